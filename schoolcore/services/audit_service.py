"""
Audit recorder.

Every mutation leaves an AuditLog row. Recording is best-effort: failures
are logged and swallowed, and the write goes through its own session so it
can neither roll back nor be rolled back by the business transaction.
"""
import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any

from fastapi import BackgroundTasks
from sqlalchemy.orm import sessionmaker

from schoolcore.config import settings
from schoolcore.models.audit_log import AuditAction, AuditLog
from schoolcore.models.base import utcnow
from schoolcore.models.principal import Principal
from schoolcore.repositories.audit_log_repository import AuditLogRepository

logger = logging.getLogger(__name__)

_MISSING = object()


def _read(record: Any, field: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(field, _MISSING)
    return getattr(record, field, _MISSING)


def _jsonable(value: Any) -> Any:
    """Convert a field value into something the JSON column can store"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _as_text(value: Any) -> str:
    value = _jsonable(value)
    # None must not collapse into an empty string
    return "null" if value is None else str(value)


def build_changes(
    old: Any, new: Any, fields: Iterable[str]
) -> dict[str, dict[str, Any]] | None:
    """
    Build a field-level diff between two records.

    A field is included when its stringified old and new values differ and
    the new record actually carries the field. Records may be mappings or
    objects.

    Args:
        old: Record before the mutation
        new: Record (or partial update payload) after the mutation
        fields: Field names to compare

    Returns:
        {field: {"old": ..., "new": ...}} or None when nothing changed,
        so callers can skip writing a no-op entry
    """
    changes = {}
    for field in fields:
        new_value = _read(new, field)
        if new_value is _MISSING:
            continue
        old_value = _read(old, field)
        if old_value is _MISSING:
            old_value = None
        if _as_text(old_value) != _as_text(new_value):
            changes[field] = {"old": _jsonable(old_value), "new": _jsonable(new_value)}
    return changes or None


class AuditRecorder:
    """Writes audit entries; `audit` and `dispatch` never raise."""

    def __init__(
        self,
        session_factory: sessionmaker,
        background_tasks: BackgroundTasks | None = None,
        retention_days: int | None = None,
    ):
        self.session_factory = session_factory
        self.background_tasks = background_tasks
        self.retention_days = (
            retention_days if retention_days is not None else settings.AUDIT_RETENTION_DAYS
        )

    def audit(
        self,
        action: AuditAction,
        entity_type: str,
        entity_id: int | str | None,
        school_id: int,
        actor: Principal | None = None,
        changes: dict | None = None,
        metadata: dict | None = None,
    ) -> None:
        """
        Record one audit entry synchronously.

        Any failure (store outage, bad payload) is logged with context and
        swallowed: the caller's operation has already succeeded.
        """
        try:
            entry = AuditLog(
                school_id=school_id,
                action=AuditAction(action),
                entity_type=entity_type,
                entity_id="" if entity_id is None else str(entity_id),
                actor_id=str(actor.id) if actor else "",
                actor_name=actor.name if actor else "",
                actor_role=actor.role.value if actor else "",
                changes=changes,
                meta=metadata,
            )
            with self.session_factory() as db:
                AuditLogRepository(db).create(entry)
        except Exception:
            logger.error(
                "Failed to record audit entry",
                extra={
                    "audit_action": str(action),
                    "entity_type": entity_type,
                    "entity_id": entity_id,
                    "school_id": school_id,
                },
                exc_info=True,
            )

    def dispatch(self, *args, **kwargs) -> None:
        """
        Record an audit entry without holding up the response.

        With background tasks available (inside a request) the write runs
        after the response is produced; otherwise it runs inline. Either way
        it never raises.
        """
        if self.background_tasks is not None:
            self.background_tasks.add_task(self.audit, *args, **kwargs)
        else:
            self.audit(*args, **kwargs)

    def search(self, school_id: int, page: int = 1, limit: int = 20, **filters) -> tuple[list[AuditLog], int]:
        """Paginated, school-scoped read of the trail"""
        with self.session_factory() as db:
            entries, total = AuditLogRepository(db).search(
                school_id, limit=limit, offset=(page - 1) * limit, **filters
            )
            db.expunge_all()
            return entries, total

    def purge_expired(self, now: datetime | None = None) -> int:
        """
        Delete entries older than the retention window.

        Returns:
            Number of entries removed
        """
        cutoff = (now or utcnow()) - timedelta(days=self.retention_days)
        with self.session_factory() as db:
            removed = AuditLogRepository(db).delete_older_than(cutoff)
        if removed:
            logger.info("Purged %d audit entries older than %s", removed, cutoff.isoformat())
        return removed
