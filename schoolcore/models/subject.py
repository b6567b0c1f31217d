from sqlalchemy import Enum, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from schoolcore.models.base import Base, TimestampMixin
from schoolcore.models.role import EntityStatus


class Subject(Base, TimestampMixin):
    """
    Subject taught in a school.

    teacher_id / teacher_name and department_id are denormalized, nullable
    references. They are cleared by the cascade rules, not by the database,
    so there are no foreign keys on them.
    """

    __tablename__ = "subjects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True
    )
    department_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    class_name: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    teacher_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    teacher_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[EntityStatus] = mapped_column(
        Enum(EntityStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=EntityStatus.ACTIVE,
    )

    __table_args__ = (
        UniqueConstraint("school_id", "code", name="uq_subject_school_code"),
        Index("ix_subjects_school_department_status", "school_id", "department_id", "status"),
        Index("ix_subjects_school_teacher", "school_id", "teacher_id"),
    )
