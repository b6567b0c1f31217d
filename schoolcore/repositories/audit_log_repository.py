from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from schoolcore.models.audit_log import AuditAction, AuditLog


class AuditLogRepository:
    """Repository for AuditLog data access. Entries are insert-only."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, entry: AuditLog) -> AuditLog:
        """Insert a new audit entry"""
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def search(
        self,
        school_id: int,
        action: Optional[AuditAction] = None,
        entity_type: Optional[str] = None,
        actor_id: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[AuditLog], int]:
        """
        Get audit entries with filters, ensuring multi-tenant isolation.

        Args:
            school_id: School ID for isolation
            action: Optional action filter
            entity_type: Optional entity type filter
            actor_id: Optional actor filter
            date_from: Optional inclusive lower bound on created_at
            date_to: Optional inclusive upper bound on created_at
            limit: Maximum number of results
            offset: Pagination offset

        Returns:
            Tuple of (entries newest first, total count)
        """
        query = self.db.query(AuditLog).filter(AuditLog.school_id == school_id)

        if action is not None:
            query = query.filter(AuditLog.action == action)

        if entity_type is not None:
            query = query.filter(AuditLog.entity_type == entity_type)

        if actor_id is not None:
            query = query.filter(AuditLog.actor_id == actor_id)

        if date_from is not None:
            query = query.filter(AuditLog.created_at >= date_from)

        if date_to is not None:
            query = query.filter(AuditLog.created_at <= date_to)

        total = query.count()

        entries = (
            query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

        return entries, total

    def delete_older_than(self, cutoff: datetime) -> int:
        """
        Purge entries created before `cutoff`, across all schools.

        Returns:
            Number of entries deleted
        """
        count = (
            self.db.query(AuditLog)
            .filter(AuditLog.created_at < cutoff)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count
