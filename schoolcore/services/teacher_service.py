from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from schoolcore.core.exceptions import ConflictException, NotFoundException
from schoolcore.models.audit_log import AuditAction
from schoolcore.models.principal import Principal
from schoolcore.models.role import SystemRole
from schoolcore.models.user import User
from schoolcore.repositories.user_repository import UserRepository
from schoolcore.schemas.teacher_schemas import TeacherUpdate
from schoolcore.services.audit_service import AuditRecorder, build_changes
from schoolcore.services.cascade_service import CascadeCoordinator, CascadeSummary, ParentKind

AUDITED_FIELDS = ("name", "email")


class TeacherService:
    """Service layer for teacher lifecycle business logic"""

    def __init__(self, db: Session, audit: AuditRecorder):
        self.db = db
        self.audit = audit
        self.user_repo = UserRepository(db)
        self.cascade = CascadeCoordinator(db)

    def list_teachers(self, principal: Principal) -> list[User]:
        """List all teachers of the principal's school"""
        return self.user_repo.list_by_school(principal.school_id, SystemRole.TEACHER)

    def get_teacher(self, teacher_id: int, principal: Principal) -> User:
        """
        Get teacher within the principal's school.

        Raises:
            NotFoundException: If no such teacher exists in this school
        """
        teacher = self.user_repo.get_by_id_and_school(
            teacher_id, principal.school_id, SystemRole.TEACHER
        )
        if not teacher:
            raise NotFoundException("Teacher not found")
        return teacher

    def update_teacher(self, teacher_id: int, data: TeacherUpdate, principal: Principal) -> User:
        """
        Update teacher name/email and audit the field-level diff.

        Raises:
            NotFoundException: If teacher not in this school
            ConflictException: If the email is taken by another user of the school
        """
        teacher = self.get_teacher(teacher_id, principal)
        before = {field: getattr(teacher, field) for field in AUDITED_FIELDS}
        payload = data.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in payload and payload["email"].lower() != teacher.email.lower():
            clash = self.user_repo.get_by_email(principal.school_id, payload["email"])
            if clash and clash.id != teacher.id:
                raise ConflictException("Email already in use")

        for field, value in payload.items():
            setattr(teacher, field, value)
        try:
            teacher = self.user_repo.update(teacher)
        except IntegrityError:
            self.db.rollback()
            raise ConflictException("Email already in use")

        changes = build_changes(before, payload, AUDITED_FIELDS)
        if changes:
            self.audit.dispatch(
                AuditAction.UPDATE,
                "teacher",
                teacher.id,
                principal.school_id,
                actor=principal,
                changes=changes,
            )
        return teacher

    def deactivate_teacher(self, teacher_id: int, principal: Principal) -> tuple[User, CascadeSummary]:
        """
        Deactivate a teacher, then clean up dependents and audit.

        Order: mutate parent -> cascade (best-effort) -> audit (detached).
        Deactivating an already inactive teacher is allowed and cascades
        to zero counts.

        Raises:
            NotFoundException: If teacher not in this school
        """
        teacher = self.get_teacher(teacher_id, principal)
        teacher.is_active = False
        teacher = self.user_repo.update(teacher)

        summary = self.cascade.cascade_on_deactivate(
            ParentKind.TEACHER, teacher.id, principal.school_id
        )

        self.audit.dispatch(
            AuditAction.DELETE,
            "teacher",
            teacher.id,
            principal.school_id,
            actor=principal,
            metadata={"deactivated_teacher": teacher.name, "cascade": summary.as_dict()},
        )
        return teacher, summary

    def reactivate_teacher(self, teacher_id: int, principal: Principal) -> User:
        """
        Reactivate a teacher.

        This is a forward operation: subjects and workloads cleared by the
        deactivation cascade are not restored.
        """
        teacher = self.get_teacher(teacher_id, principal)
        if teacher.is_active:
            raise ConflictException("Teacher is already active")
        teacher.is_active = True
        teacher = self.user_repo.update(teacher)

        self.audit.dispatch(
            AuditAction.UPDATE,
            "teacher",
            teacher.id,
            principal.school_id,
            actor=principal,
            changes={"is_active": {"old": False, "new": True}},
        )
        return teacher
