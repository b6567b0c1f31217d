import math
from datetime import date, datetime, time

from fastapi import APIRouter, Depends, Query

from schoolcore.dependencies import get_audit_recorder, require_role
from schoolcore.models.audit_log import AuditAction
from schoolcore.models.principal import Principal
from schoolcore.models.role import SystemRole
from schoolcore.schemas.audit_schemas import AuditLogListResponse
from schoolcore.services.audit_service import AuditRecorder

router = APIRouter()


@router.get("", response_model=AuditLogListResponse)
async def list_audit_logs(
    action: AuditAction | None = None,
    entity: str | None = None,
    user_id: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    principal: Principal = Depends(require_role(SystemRole.ADMIN)),
    audit: AuditRecorder = Depends(get_audit_recorder),
):
    """
    Browse the school's audit trail, newest first.

    - **Requires ADMIN role**
    - `date_to` is inclusive of the whole day
    """
    entries, total = audit.search(
        principal.school_id,
        page=page,
        limit=limit,
        action=action,
        entity_type=entity,
        actor_id=user_id,
        date_from=datetime.combine(date_from, time.min) if date_from else None,
        date_to=datetime.combine(date_to, time.max) if date_to else None,
    )
    return {
        "data": entries,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit),
        },
    }
