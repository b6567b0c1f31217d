from datetime import datetime
from typing import Any
from pydantic import BaseModel, Field

from schoolcore.models.audit_log import AuditAction


class AuditLogResponse(BaseModel):
    """One audit entry"""

    id: int
    action: AuditAction
    entity_type: str
    entity_id: str
    actor_id: str
    actor_name: str
    actor_role: str
    changes: dict[str, Any] | None
    metadata: dict[str, Any] | None = Field(None, validation_alias="meta")
    created_at: datetime

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AuditLogListResponse(BaseModel):
    data: list[AuditLogResponse]
    pagination: Pagination
