"""School-defined roles overriding the default capability matrix."""

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schoolcore.models.base import Base, TimestampMixin


class CustomRole(Base, TimestampMixin):
    """
    A named permission set scoped to one school.

    For every module listed in `permissions` the four booleans replace the
    built-in role defaults outright. Modules not listed fall back to the
    defaults of the user's system role.

    Constraints:
    - Unique(school_id, name); names are also compared case-insensitively
      at the service layer
    - is_system rows mirror the built-in roles and cannot be deleted
    """

    __tablename__ = "custom_roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    school_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    permissions: Mapped[list["RolePermission"]] = relationship(
        "RolePermission",
        back_populates="role",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (UniqueConstraint("school_id", "name", name="uq_custom_role_school_name"),)

    def __repr__(self) -> str:
        return f"<CustomRole(id={self.id}, school_id={self.school_id}, name='{self.name}')>"


class RolePermission(Base):
    """One (module -> view/add/edit/delete) row of a custom role"""

    __tablename__ = "role_permissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("custom_roles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    module: Mapped[str] = mapped_column(String(50), nullable=False)
    can_view: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_add: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_edit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    can_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    role: Mapped[CustomRole] = relationship("CustomRole", back_populates="permissions")

    __table_args__ = (UniqueConstraint("role_id", "module", name="uq_role_permission_module"),)
