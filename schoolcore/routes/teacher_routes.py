from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from schoolcore.database import get_db
from schoolcore.dependencies import get_audit_recorder, require_auth, require_role
from schoolcore.models.principal import Principal
from schoolcore.models.role import SystemRole
from schoolcore.schemas.common_schemas import LifecycleResponse
from schoolcore.schemas.teacher_schemas import TeacherResponse, TeacherUpdate
from schoolcore.services.audit_service import AuditRecorder
from schoolcore.services.teacher_service import TeacherService

router = APIRouter()


@router.get("", response_model=list[TeacherResponse])
async def list_teachers(
    principal: Principal = Depends(require_auth("teachers:view")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """List all teachers of the current school"""
    service = TeacherService(db, audit)
    return service.list_teachers(principal)


@router.patch("/{teacher_id}", response_model=TeacherResponse)
async def update_teacher(
    teacher_id: int,
    data: TeacherUpdate,
    principal: Principal = Depends(require_auth("teachers:edit")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Update teacher name/email; changed fields are audited"""
    service = TeacherService(db, audit)
    return service.update_teacher(teacher_id, data, principal)


@router.delete("/{teacher_id}", response_model=LifecycleResponse)
async def deactivate_teacher(
    teacher_id: int,
    principal: Principal = Depends(require_role(SystemRole.ADMIN)),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """
    Deactivate a teacher.

    - **Requires ADMIN role**
    - Unassigns the teacher from active subjects
    - Deletes the teacher's workload records
    """
    service = TeacherService(db, audit)
    teacher, summary = service.deactivate_teacher(teacher_id, principal)
    return {
        "message": f"{teacher.name} was deactivated",
        "id": teacher.id,
        "cascade": {"counts": summary.counts, "failed": summary.failed},
    }


@router.post("/{teacher_id}/reactivate", response_model=TeacherResponse)
async def reactivate_teacher(
    teacher_id: int,
    principal: Principal = Depends(require_role(SystemRole.ADMIN)),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Reactivate a teacher (**ADMIN only**); cleared assignments are not restored"""
    service = TeacherService(db, audit)
    return service.reactivate_teacher(teacher_id, principal)
