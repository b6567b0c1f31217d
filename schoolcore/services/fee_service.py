from sqlalchemy.orm import Session

from schoolcore.models.audit_log import AuditAction
from schoolcore.models.fee import FeeStructure
from schoolcore.models.principal import Principal
from schoolcore.repositories.fee_repository import FeeRepository
from schoolcore.schemas.fee_schemas import FeeStructureCreate
from schoolcore.services.audit_service import AuditRecorder


class FeeService:
    """Service for fee structure business logic"""

    def __init__(self, db: Session, audit: AuditRecorder):
        self.db = db
        self.audit = audit
        self.repo = FeeRepository(db)

    def list_fee_structures(self, principal: Principal, class_name: str | None = None) -> list[FeeStructure]:
        """Get all fee structures of the principal's school"""
        return self.repo.list_by_school(principal.school_id, class_name)

    def create_fee_structure(self, data: FeeStructureCreate, principal: Principal) -> FeeStructure:
        """Create new fee structure for the principal's school"""
        fee = self.repo.create(
            FeeStructure(
                school_id=principal.school_id,
                name=data.name,
                class_name=data.class_name,
                amount=data.amount,
                frequency=data.frequency,
            )
        )
        self.audit.dispatch(
            AuditAction.CREATE,
            "fee_structure",
            fee.id,
            principal.school_id,
            actor=principal,
            metadata={"name": fee.name, "class_name": fee.class_name, "amount": float(fee.amount)},
        )
        return fee
