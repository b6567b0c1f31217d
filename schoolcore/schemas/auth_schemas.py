from pydantic import BaseModel

from schoolcore.models.role import SystemRole
from schoolcore.schemas.common_schemas import PermissionSetResponse


class PrincipalResponse(BaseModel):
    """The authenticated principal and its effective permissions"""

    id: int
    school_id: int
    name: str
    role: SystemRole
    custom_role_id: int | None
    allowed_modules: list[str]
    permissions: dict[str, PermissionSetResponse]


class LogoutResponse(BaseModel):
    message: str
