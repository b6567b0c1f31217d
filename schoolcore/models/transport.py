from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolcore.models.base import Base, TimestampMixin


class TransportVehicle(Base, TimestampMixin):
    """School bus/van with a roster of assigned students"""

    __tablename__ = "transport_vehicles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True
    )
    vehicle_number: Mapped[str] = mapped_column(String(50), nullable=False)
    route_name: Mapped[str] = mapped_column(String(255), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    assignments: Mapped[list["TransportAssignment"]] = relationship(
        "TransportAssignment",
        back_populates="vehicle",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("school_id", "vehicle_number", name="uq_vehicle_school_number"),
    )

    @property
    def assigned_student_ids(self) -> list[int]:
        return [a.student_id for a in self.assignments]


class TransportAssignment(Base):
    """Roster entry: one student riding one vehicle"""

    __tablename__ = "transport_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    vehicle_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("transport_vehicles.id", ondelete="CASCADE"), nullable=False
    )
    student_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    vehicle: Mapped[TransportVehicle] = relationship("TransportVehicle", back_populates="assignments")

    __table_args__ = (
        UniqueConstraint("vehicle_id", "student_id", name="uq_assignment_vehicle_student"),
    )
