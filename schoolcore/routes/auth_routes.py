from fastapi import APIRouter, Depends

from schoolcore.dependencies import get_audit_recorder, get_permission_resolver, get_principal
from schoolcore.models.audit_log import AuditAction
from schoolcore.models.principal import Principal
from schoolcore.schemas.auth_schemas import LogoutResponse, PrincipalResponse
from schoolcore.schemas.common_schemas import PermissionSetResponse
from schoolcore.services.audit_service import AuditRecorder
from schoolcore.services.permission_service import PermissionResolver

router = APIRouter()


@router.get("/me", response_model=PrincipalResponse)
async def get_me(
    principal: Principal = Depends(get_principal),
    resolver: PermissionResolver = Depends(get_permission_resolver),
):
    """
    Current principal and effective permissions on every module.

    Clients use this to decide which actions to offer; the server still
    checks every request.
    """
    return PrincipalResponse(
        id=principal.id,
        school_id=principal.school_id,
        name=principal.name,
        role=principal.role,
        custom_role_id=principal.custom_role_id,
        allowed_modules=list(principal.allowed_modules),
        permissions={
            module: PermissionSetResponse.from_permissions(perms)
            for module, perms in resolver.resolve_all(principal).items()
        },
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    principal: Principal = Depends(get_principal),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Record the logout; token revocation belongs to the session store"""
    audit.dispatch(AuditAction.LOGOUT, "user", principal.id, principal.school_id, actor=principal)
    return {"message": "Logged out"}
