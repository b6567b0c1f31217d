from sqlalchemy import Enum, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from schoolcore.models.base import Base, TimestampMixin
from schoolcore.models.role import EntityStatus


class Student(Base, TimestampMixin):
    """
    Enrolled student.

    Deactivation is a soft delete (status -> inactive). At most one active
    student may hold a given roll number within a class of a school; the
    partial unique index enforces this at write time.
    """

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    class_name: Mapped[str] = mapped_column(String(50), nullable=False)
    roll_number: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[EntityStatus] = mapped_column(
        Enum(EntityStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=EntityStatus.ACTIVE,
    )

    __table_args__ = (
        Index(
            "uq_students_active_roll",
            "school_id",
            "class_name",
            "roll_number",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )
