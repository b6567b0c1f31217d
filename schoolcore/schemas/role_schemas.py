from datetime import datetime
from pydantic import BaseModel, Field


class RolePermissionEntry(BaseModel):
    """Grants of a custom role on one module"""

    module: str = Field(..., min_length=1)
    view: bool = False
    add: bool = False
    edit: bool = False
    delete: bool = False


class RoleCreate(BaseModel):
    """Create a custom role (ADMIN only)"""

    name: str = Field(..., description="Role name, unique within the school")
    description: str = ""
    permissions: list[RolePermissionEntry] = []


class RoleUpdate(BaseModel):
    """Update a role; permissions, when given, replace the existing list"""

    name: str | None = None
    description: str | None = None
    permissions: list[RolePermissionEntry] | None = None
    is_active: bool | None = None


class RoleAssignment(BaseModel):
    """Assign (or with null, clear) a user's custom role"""

    custom_role_id: int | None = Field(..., description="Role to assign, or null to unassign")


class RoleResponse(BaseModel):
    id: int
    school_id: int
    name: str
    description: str
    is_active: bool
    is_system: bool
    permissions: list[RolePermissionEntry]
    created_at: datetime
    updated_at: datetime


class RoleDeleteResponse(BaseModel):
    message: str
    unassigned_users: int
