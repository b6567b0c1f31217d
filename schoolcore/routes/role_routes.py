from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from schoolcore.database import get_db
from schoolcore.dependencies import get_audit_recorder, require_role
from schoolcore.models.principal import Principal
from schoolcore.models.role import SystemRole
from schoolcore.schemas.role_schemas import (
    RoleAssignment,
    RoleCreate,
    RoleDeleteResponse,
    RoleResponse,
    RoleUpdate,
)
from schoolcore.schemas.teacher_schemas import TeacherResponse
from schoolcore.services.audit_service import AuditRecorder
from schoolcore.services.role_service import RoleService, role_to_dict

router = APIRouter()

admin_only = require_role(SystemRole.ADMIN)


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """List all roles of the school (**ADMIN only**)"""
    service = RoleService(db, audit)
    return [role_to_dict(role) for role in service.list_roles(principal)]


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    data: RoleCreate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """
    Create a custom role.

    - **Requires ADMIN role**
    - Name must be unique within the school (case-insensitive)
    - Entries for unknown modules are ignored
    """
    service = RoleService(db, audit)
    return role_to_dict(service.create_role(data, principal))


@router.patch("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: int,
    data: RoleUpdate,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """
    Update a role.

    - System role names cannot change
    - A given permissions list replaces the existing one
    """
    service = RoleService(db, audit)
    return role_to_dict(service.update_role(role_id, data, principal))


@router.delete("/{role_id}", response_model=RoleDeleteResponse)
async def delete_role(
    role_id: int,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Delete a custom role; users holding it fall back to their system role"""
    service = RoleService(db, audit)
    unassigned = service.delete_role(role_id, principal)
    return {"message": "Role deleted successfully", "unassigned_users": unassigned}


@router.put("/assignments/{user_id}", response_model=TeacherResponse)
async def assign_role(
    user_id: int,
    assignment: RoleAssignment,
    principal: Principal = Depends(admin_only),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Assign or clear a user's custom role"""
    service = RoleService(db, audit)
    return service.assign_role(user_id, assignment, principal)
