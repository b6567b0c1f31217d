import logging

from fastapi import BackgroundTasks, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session, sessionmaker

from schoolcore.core.exceptions import ForbiddenException, UnauthorizedException
from schoolcore.core.security import extract_session_claims
from schoolcore.database import get_db, get_session_factory
from schoolcore.models.capability import Capability
from schoolcore.models.principal import Principal
from schoolcore.models.role import SystemRole
from schoolcore.repositories.custom_role_repository import CustomRoleRepository
from schoolcore.repositories.user_repository import UserRepository
from schoolcore.services.audit_service import AuditRecorder
from schoolcore.services.permission_service import PermissionResolver

logger = logging.getLogger(__name__)

# auto_error=False: a missing or non-Bearer header must surface as 401 from
# our own handler rather than whatever status HTTPBearer picks
security = HTTPBearer(auto_error=False)


async def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> Principal:
    """
    FastAPI dependency resolving the tenant context of a request.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using shared SECRET_KEY
    3. Read principal id ('sub') and school ('school_id') claims
    4. Load the active user of that school; role, custom role and module
       restrictions come from the stored row, never from the request
    5. Return a Principal

    Raises:
        UnauthorizedException: If token missing/invalid or the user is gone
    """
    if credentials is None:
        raise UnauthorizedException("Not authenticated")

    principal_id, school_id = extract_session_claims(credentials.credentials)

    user = UserRepository(db).get_active_principal(principal_id, school_id)
    if user is None:
        raise UnauthorizedException("Session is no longer valid")

    return Principal.from_user(user)


def get_permission_resolver(db: Session = Depends(get_db)) -> PermissionResolver:
    """Per-request resolver; FastAPI caches it for the life of the request"""
    return PermissionResolver(CustomRoleRepository(db))


def get_audit_recorder(
    background_tasks: BackgroundTasks,
    session_factory: sessionmaker = Depends(get_session_factory),
) -> AuditRecorder:
    """Audit recorder whose writes run as background tasks of the request"""
    return AuditRecorder(session_factory, background_tasks)


def require_auth(capability: str):
    """
    Build a dependency guarding a route with one "<module>:<action>" capability.

    The capability string is parsed immediately, so an unknown module or
    action fails when the route module is imported.

    Usage:
        @router.post("")
        async def create_fee(principal: Principal = Depends(require_auth("fees:add"))):
            ...

    The returned principal's school_id must be used to scope every query.
    """
    required = Capability.parse(capability)

    async def guard(
        principal: Principal = Depends(get_principal),
        resolver: PermissionResolver = Depends(get_permission_resolver),
    ) -> Principal:
        permissions = resolver.resolve_for(principal, required.module)
        if not permissions.allows(required.action):
            logger.warning(
                "Capability %s denied for user %s (role=%s) in school %s",
                required,
                principal.id,
                principal.role.value,
                principal.school_id,
            )
            raise ForbiddenException(f"Forbidden - missing {required} permission")
        return principal

    return guard


def require_role(*roles: SystemRole):
    """
    Build a dependency admitting only the given built-in roles.

    This bypasses the capability matrix entirely; use it for operations
    gated purely by role (role management, audit log access).
    """
    if not roles:
        raise ValueError("require_role needs at least one role")
    allowed = frozenset(roles)

    async def guard(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role not in allowed:
            logger.warning(
                "Role %s denied for user %s in school %s",
                principal.role.value,
                principal.id,
                principal.school_id,
            )
            required = " or ".join(role.value for role in roles)
            raise ForbiddenException(f"Access denied. Required role: {required}")
        return principal

    return guard
