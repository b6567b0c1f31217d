"""
Cascade coordinator.

When a parent entity is deactivated or deleted, dependent rows in the same
school that reference it are updated or removed according to the rule
table below. The database has no foreign keys for these references, so
this module is the single place that keeps them consistent.

Every rule runs in its own try block and commits on its own: one failing
dependent type is logged and reported, the others still run, and the
primary operation is never aborted. Rules only match rows that still
reference the parent, so re-running a cascade yields zero counts.
"""
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum as PyEnum

from sqlalchemy.orm import Session

from schoolcore.repositories.subject_repository import SubjectRepository
from schoolcore.repositories.transport_repository import TransportRepository
from schoolcore.repositories.workload_repository import WorkloadRepository

logger = logging.getLogger(__name__)


class ParentKind(str, PyEnum):
    TEACHER = "teacher"
    STUDENT = "student"
    DEPARTMENT = "department"


class CascadeEffect(str, PyEnum):
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class CascadeRule:
    """
    One dependent type of a parent kind.

    Attributes:
        key: Name of the count in the cascade summary
        dependent: Dependent entity type
        effect: Whether dependents are updated (reference cleared) or deleted
        apply: (db, parent_id, school_id) -> affected row count
    """

    key: str
    dependent: str
    effect: CascadeEffect
    apply: Callable[[Session, int, int], int]


CASCADE_RULES: dict[ParentKind, tuple[CascadeRule, ...]] = {
    ParentKind.TEACHER: (
        CascadeRule(
            "unassigned_subjects",
            "subject",
            CascadeEffect.UPDATE,
            lambda db, parent_id, school_id: SubjectRepository(db).unassign_teacher(parent_id, school_id),
        ),
        CascadeRule(
            "removed_workloads",
            "faculty_workload",
            CascadeEffect.DELETE,
            lambda db, parent_id, school_id: WorkloadRepository(db).delete_by_teacher(parent_id, school_id),
        ),
    ),
    ParentKind.STUDENT: (
        CascadeRule(
            "removed_from_transport",
            "transport",
            CascadeEffect.UPDATE,
            lambda db, parent_id, school_id: TransportRepository(db).remove_student_from_rosters(
                parent_id, school_id
            ),
        ),
    ),
    ParentKind.DEPARTMENT: (
        CascadeRule(
            "updated_subjects",
            "subject",
            CascadeEffect.UPDATE,
            lambda db, parent_id, school_id: SubjectRepository(db).clear_department(parent_id, school_id),
        ),
        CascadeRule(
            "updated_workloads",
            "faculty_workload",
            CascadeEffect.UPDATE,
            lambda db, parent_id, school_id: WorkloadRepository(db).clear_department(parent_id, school_id),
        ),
    ),
}


@dataclass
class CascadeSummary:
    """Per-operation result; never persisted except inside audit metadata"""

    parent_kind: ParentKind
    parent_id: int
    counts: dict[str, int] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def as_dict(self) -> dict:
        data = dict(self.counts)
        if self.failed:
            data["failed"] = list(self.failed)
        return data


@dataclass(frozen=True)
class DeleteGuard:
    """Outcome of a pre-delete check. `reason` is None when deletion is safe."""

    blocking_count: int = 0
    reason: str | None = None

    @property
    def blocked(self) -> bool:
        return self.reason is not None


class CascadeCoordinator:
    """Runs cascade rules and pre-delete guards for one school-scoped session"""

    def __init__(self, db: Session):
        self.db = db

    def cascade_on_deactivate(
        self, parent_kind: ParentKind | str, parent_id: int, school_id: int
    ) -> CascadeSummary:
        """
        Apply every rule of `parent_kind` for one parent.

        Must be called after the parent mutation has been committed. Never
        raises for a failing rule; the failing rule's count stays 0 and its
        key is listed in `failed`.

        Args:
            parent_kind: Kind of parent that was deactivated/deleted
            parent_id: Id of that parent
            school_id: School scope; dependents of other schools are untouched

        Returns:
            CascadeSummary with a count per dependent rule
        """
        parent_kind = ParentKind(parent_kind)
        summary = CascadeSummary(parent_kind=parent_kind, parent_id=parent_id)

        for rule in CASCADE_RULES[parent_kind]:
            summary.counts[rule.key] = 0
            try:
                summary.counts[rule.key] = rule.apply(self.db, parent_id, school_id)
            except Exception:
                self.db.rollback()
                summary.failed.append(rule.key)
                logger.error(
                    "Cascade rule %s:%s failed",
                    parent_kind.value,
                    rule.key,
                    extra={"parent_id": parent_id, "school_id": school_id},
                    exc_info=True,
                )

        logger.info(
            "Cascade for %s %s in school %s: %s",
            parent_kind.value,
            parent_id,
            school_id,
            summary.as_dict(),
        )
        return summary

    def check_before_delete(
        self, parent_kind: ParentKind | str, parent_id: int, school_id: int
    ) -> DeleteGuard:
        """
        Look for active dependents that forbid a hard delete.

        Runs before any mutation. If the dependents cannot be counted the
        delete is refused rather than allowed blindly.
        """
        parent_kind = ParentKind(parent_kind)
        if parent_kind != ParentKind.DEPARTMENT:
            return DeleteGuard()

        try:
            active_subjects = SubjectRepository(self.db).count_active_by_department(parent_id, school_id)
        except Exception:
            self.db.rollback()
            logger.error(
                "Pre-delete guard for department %s failed",
                parent_id,
                extra={"school_id": school_id},
                exc_info=True,
            )
            return DeleteGuard(
                reason="Cannot delete department: assigned subjects could not be verified. Try again later."
            )

        if active_subjects > 0:
            return DeleteGuard(
                blocking_count=active_subjects,
                reason=(
                    f"Cannot delete department: {active_subjects} active subject(s) are assigned "
                    "to it. Reassign or deactivate them first."
                ),
            )
        return DeleteGuard()

    def guard_before_delete(
        self, parent_kind: ParentKind | str, parent_id: int, school_id: int
    ) -> str | None:
        """Human-readable blocking reason, or None when safe to delete"""
        return self.check_before_delete(parent_kind, parent_id, school_id).reason
