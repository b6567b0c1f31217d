from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from schoolcore.models.base import Base, TimestampMixin


class FacultyWorkload(Base, TimestampMixin):
    """Teaching hours assigned to one teacher for an academic year"""

    __tablename__ = "faculty_workloads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True
    )
    teacher_id: Mapped[int] = mapped_column(Integer, nullable=False)
    teacher_name: Mapped[str] = mapped_column(String(255), nullable=False)
    department_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    hours_per_week: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_hours_per_week: Mapped[int] = mapped_column(Integer, nullable=False, default=20)

    __table_args__ = (
        Index("ix_workloads_school_teacher_year", "school_id", "teacher_id", "academic_year"),
    )
