from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from schoolcore.core.exceptions import CascadeBlockedException, ConflictException, NotFoundException
from schoolcore.models.audit_log import AuditAction
from schoolcore.models.department import Department
from schoolcore.models.principal import Principal
from schoolcore.repositories.department_repository import DepartmentRepository
from schoolcore.schemas.department_schemas import DepartmentCreate
from schoolcore.services.audit_service import AuditRecorder
from schoolcore.services.cascade_service import CascadeCoordinator, CascadeSummary, ParentKind


class DepartmentService:
    """Service for department business logic"""

    def __init__(self, db: Session, audit: AuditRecorder):
        self.db = db
        self.audit = audit
        self.repo = DepartmentRepository(db)
        self.cascade = CascadeCoordinator(db)

    def list_departments(self, principal: Principal) -> list[Department]:
        return self.repo.list_by_school(principal.school_id)

    def create_department(self, data: DepartmentCreate, principal: Principal) -> Department:
        """
        Create a department.

        Raises:
            ConflictException: If the code is already used in this school
        """
        if self.repo.get_by_code(principal.school_id, data.code):
            raise ConflictException(f"Department code {data.code} already exists")

        try:
            department = self.repo.create(
                Department(
                    school_id=principal.school_id,
                    name=data.name,
                    code=data.code,
                    description=data.description,
                )
            )
        except IntegrityError:
            self.db.rollback()
            raise ConflictException(f"Department code {data.code} already exists")
        self.audit.dispatch(
            AuditAction.CREATE,
            "department",
            department.id,
            principal.school_id,
            actor=principal,
            metadata={"department_name": department.name},
        )
        return department

    def delete_department(self, department_id: int, principal: Principal) -> CascadeSummary:
        """
        Hard delete a department.

        The pre-delete guard runs before anything is written; a department
        with active subjects is refused. After the delete, remaining
        references on subjects and workloads are cleared.

        Raises:
            NotFoundException: If department not in this school
            CascadeBlockedException: If active subjects still reference it
        """
        department = self.repo.get_by_id_and_school(department_id, principal.school_id)
        if not department:
            raise NotFoundException("Department not found")

        guard = self.cascade.check_before_delete(
            ParentKind.DEPARTMENT, department.id, principal.school_id
        )
        if guard.blocked:
            raise CascadeBlockedException(guard.reason, count=guard.blocking_count)

        name = department.name
        self.repo.delete(department)

        summary = self.cascade.cascade_on_deactivate(
            ParentKind.DEPARTMENT, department_id, principal.school_id
        )

        self.audit.dispatch(
            AuditAction.DELETE,
            "department",
            department_id,
            principal.school_id,
            actor=principal,
            metadata={"department_name": name, "cascade": summary.as_dict()},
        )
        return summary
