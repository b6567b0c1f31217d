from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolcore.models.base import Base, TimestampMixin
from schoolcore.models.role import SystemRole

if TYPE_CHECKING:
    from schoolcore.models.custom_role import CustomRole


class User(Base, TimestampMixin):
    """
    Staff, student and parent accounts of a school.

    Teachers are users with role=teacher. Credentials live in the external
    session store; this row is the authoritative source of role, custom
    role and module restrictions for an authenticated principal.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("schools.id", ondelete="CASCADE"),
        nullable=False,
        index=True,  # Critical for multi-tenant queries
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[SystemRole] = mapped_column(
        Enum(SystemRole, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    custom_role_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("custom_roles.id", ondelete="SET NULL"), nullable=True
    )
    # Empty list means no explicit module restriction
    allowed_modules: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    custom_role: Mapped["CustomRole | None"] = relationship("CustomRole")

    __table_args__ = (UniqueConstraint("school_id", "email", name="uq_user_school_email"),)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, school_id={self.school_id}, role={self.role.value})>"
