from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from schoolcore.database import get_db
from schoolcore.dependencies import get_audit_recorder, require_auth
from schoolcore.models.principal import Principal
from schoolcore.schemas.common_schemas import LifecycleResponse
from schoolcore.schemas.department_schemas import DepartmentCreate, DepartmentResponse
from schoolcore.services.audit_service import AuditRecorder
from schoolcore.services.department_service import DepartmentService

router = APIRouter()


@router.get("", response_model=list[DepartmentResponse])
async def list_departments(
    principal: Principal = Depends(require_auth("departments:view")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """List departments of the current school"""
    service = DepartmentService(db, audit)
    return service.list_departments(principal)


@router.post("", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
async def create_department(
    data: DepartmentCreate,
    principal: Principal = Depends(require_auth("departments:add")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Create a department"""
    service = DepartmentService(db, audit)
    return service.create_department(data, principal)


@router.delete("/{department_id}", response_model=LifecycleResponse)
async def delete_department(
    department_id: int,
    principal: Principal = Depends(require_auth("departments:delete")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """
    Delete a department.

    - Refused with 409 while active subjects are assigned to it
    - Clears the department on remaining subjects and workloads
    """
    service = DepartmentService(db, audit)
    summary = service.delete_department(department_id, principal)
    return {
        "message": "Department deleted successfully",
        "id": department_id,
        "cascade": {"counts": summary.counts, "failed": summary.failed},
    }
