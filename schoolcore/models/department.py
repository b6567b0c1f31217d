from sqlalchemy import Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from schoolcore.models.base import Base, TimestampMixin
from schoolcore.models.role import EntityStatus


class Department(Base, TimestampMixin):
    """Academic department; subjects and workloads reference it by id"""

    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[EntityStatus] = mapped_column(
        Enum(EntityStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=EntityStatus.ACTIVE,
    )

    __table_args__ = (UniqueConstraint("school_id", "code", name="uq_department_school_code"),)
