import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from schoolcore.core.exceptions import ConflictException, NotFoundException
from schoolcore.models.audit_log import AuditAction
from schoolcore.models.principal import Principal
from schoolcore.models.role import EntityStatus
from schoolcore.models.student import Student
from schoolcore.repositories.student_repository import StudentRepository
from schoolcore.schemas.student_schemas import StudentCreate
from schoolcore.services.audit_service import AuditRecorder
from schoolcore.services.cascade_service import CascadeCoordinator, CascadeSummary, ParentKind

logger = logging.getLogger(__name__)


class StudentService:
    """Service for student enrollment and lifecycle"""

    def __init__(self, db: Session, audit: AuditRecorder):
        self.db = db
        self.audit = audit
        self.repo = StudentRepository(db)
        self.cascade = CascadeCoordinator(db)

    def _roll_number_taken(self, class_name: str, roll_number: str) -> ConflictException:
        # The failed flush leaves the session pending rollback; callers pass
        # plain values read before the write
        self.db.rollback()
        return ConflictException(f"Roll number {roll_number} is already assigned in class {class_name}")

    def create_student(self, data: StudentCreate, principal: Principal) -> Student:
        """
        Enroll a student in the principal's school.

        Uniqueness of the active roll number per class is enforced by the
        database at insert time, so two concurrent enrollments cannot both
        succeed.

        Raises:
            ConflictException: If an active student already holds the roll number
        """
        student = Student(
            school_id=principal.school_id,
            name=data.name,
            class_name=data.class_name,
            roll_number=data.roll_number,
            status=EntityStatus.ACTIVE,
        )
        try:
            student = self.repo.create(student)
        except IntegrityError:
            raise self._roll_number_taken(data.class_name, data.roll_number)

        self.audit.dispatch(
            AuditAction.CREATE,
            "student",
            student.id,
            principal.school_id,
            actor=principal,
            metadata={"class_name": student.class_name, "roll_number": student.roll_number},
        )
        return student

    def list_students(
        self, principal: Principal, class_name: str | None = None, status: EntityStatus | None = None
    ) -> list[Student]:
        return self.repo.list_by_school(principal.school_id, class_name, status)

    def get_student(self, student_id: int, principal: Principal) -> Student:
        """
        Get student within the principal's school.

        Raises:
            NotFoundException: If student not found or belongs to another school
        """
        student = self.repo.get_by_id_and_school(student_id, principal.school_id)
        if not student:
            raise NotFoundException("Student not found")
        return student

    def deactivate_student(self, student_id: int, principal: Principal) -> tuple[Student, CascadeSummary]:
        """Soft delete (status -> inactive), drop from transport rosters, audit"""
        student = self.get_student(student_id, principal)
        student.status = EntityStatus.INACTIVE
        student = self.repo.update(student)

        summary = self.cascade.cascade_on_deactivate(
            ParentKind.STUDENT, student.id, principal.school_id
        )

        self.audit.dispatch(
            AuditAction.DELETE,
            "student",
            student.id,
            principal.school_id,
            actor=principal,
            metadata={"cascade": summary.as_dict()},
        )
        return student, summary

    def reactivate_student(self, student_id: int, principal: Principal) -> Student:
        """
        Bring an inactive student back.

        Raises:
            ConflictException: If already active, or the roll number has been
                given to another active student meanwhile
        """
        student = self.get_student(student_id, principal)
        if student.status == EntityStatus.ACTIVE:
            raise ConflictException("Student is already active")

        class_name, roll_number = student.class_name, student.roll_number
        student.status = EntityStatus.ACTIVE
        try:
            student = self.repo.update(student)
        except IntegrityError:
            raise self._roll_number_taken(class_name, roll_number)

        self.audit.dispatch(
            AuditAction.UPDATE,
            "student",
            student.id,
            principal.school_id,
            actor=principal,
            changes={"status": {"old": EntityStatus.INACTIVE.value, "new": EntityStatus.ACTIVE.value}},
        )
        return student
