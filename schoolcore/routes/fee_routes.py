from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from schoolcore.database import get_db
from schoolcore.dependencies import get_audit_recorder, require_auth
from schoolcore.models.principal import Principal
from schoolcore.schemas.fee_schemas import FeeStructureCreate, FeeStructureResponse
from schoolcore.services.audit_service import AuditRecorder
from schoolcore.services.fee_service import FeeService

router = APIRouter()


@router.get("/structures", response_model=list[FeeStructureResponse])
async def list_fee_structures(
    class_name: str | None = None,
    principal: Principal = Depends(require_auth("fees:view")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """List fee structures of the current school"""
    service = FeeService(db, audit)
    return service.list_fee_structures(principal, class_name)


@router.post("/structures", response_model=FeeStructureResponse, status_code=status.HTTP_201_CREATED)
async def create_fee_structure(
    data: FeeStructureCreate,
    principal: Principal = Depends(require_auth("fees:add")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """Create a fee structure"""
    service = FeeService(db, audit)
    return service.create_fee_structure(data, principal)
