"""Authenticated principal for request authorization."""

from dataclasses import dataclass, field

from schoolcore.models.role import SystemRole
from schoolcore.models.user import User


@dataclass(frozen=True)
class Principal:
    """
    Who is making the request and for which school.

    Built by the tenant context resolver from a verified session token and
    the stored user row. It is the only trusted source of school_id: every
    repository call made on behalf of a request filters by
    `principal.school_id`.

    Attributes:
        id: User id of the actor
        school_id: Tenant the actor belongs to
        name: Display name, copied into audit entries
        role: Built-in role
        custom_role_id: Optional school-defined role overriding defaults
        allowed_modules: Optional explicit module allow-list (empty = none)
    """

    id: int
    school_id: int
    name: str
    role: SystemRole
    custom_role_id: int | None = None
    allowed_modules: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            id=user.id,
            school_id=user.school_id,
            name=user.name,
            role=user.role,
            custom_role_id=user.custom_role_id,
            allowed_modules=tuple(user.allowed_modules or ()),
        )

    def is_admin(self) -> bool:
        """Check if principal holds the built-in admin role."""
        return self.role == SystemRole.ADMIN

    def __repr__(self) -> str:
        return f"<Principal(id={self.id}, school_id={self.school_id}, role={self.role.value})>"
