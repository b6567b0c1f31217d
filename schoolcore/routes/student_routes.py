from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from schoolcore.database import get_db
from schoolcore.dependencies import get_audit_recorder, require_auth
from schoolcore.models.principal import Principal
from schoolcore.models.role import EntityStatus
from schoolcore.schemas.common_schemas import LifecycleResponse
from schoolcore.schemas.student_schemas import StudentCreate, StudentResponse
from schoolcore.services.audit_service import AuditRecorder
from schoolcore.services.student_service import StudentService

router = APIRouter()


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    data: StudentCreate,
    principal: Principal = Depends(require_auth("students:add")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Enroll a student; roll numbers are unique per class among active students"""
    service = StudentService(db, audit)
    return service.create_student(data, principal)


@router.get("", response_model=list[StudentResponse])
async def list_students(
    class_name: str | None = None,
    student_status: EntityStatus | None = None,
    principal: Principal = Depends(require_auth("students:view")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """List students of the current school"""
    service = StudentService(db, audit)
    return service.list_students(principal, class_name, student_status)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: int,
    principal: Principal = Depends(require_auth("students:view")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Get specific student details"""
    service = StudentService(db, audit)
    return service.get_student(student_id, principal)


@router.delete("/{student_id}", response_model=LifecycleResponse)
async def deactivate_student(
    student_id: int,
    principal: Principal = Depends(require_auth("students:delete")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Deactivate a student and remove them from transport rosters"""
    service = StudentService(db, audit)
    student, summary = service.deactivate_student(student_id, principal)
    return {
        "message": f"{student.name} was deactivated",
        "id": student.id,
        "cascade": {"counts": summary.counts, "failed": summary.failed},
    }


@router.post("/{student_id}/reactivate", response_model=StudentResponse)
async def reactivate_student(
    student_id: int,
    principal: Principal = Depends(require_auth("students:edit")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Reactivate an inactive student"""
    service = StudentService(db, audit)
    return service.reactivate_student(student_id, principal)
