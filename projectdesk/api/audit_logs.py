from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..api.dependencies import get_db
from ..auth.jwt import Identity, get_current_user
from ..config import settings
from ..schemas.schemas import ApiResponse, AuditLogEntry
from ..services.audit import list_audit_logs

router = APIRouter(prefix="/audit-logs", tags=["audit"])


@router.get("", response_model=ApiResponse[List[AuditLogEntry]])
def read_audit_logs(
    entity_type: Optional[str] = Query(None),
    entity_id: Optional[str] = Query(None),
    user_id: Optional[int] = Query(None),
    limit: int = Query(settings.audit_log_default_limit, ge=1, le=settings.audit_log_max_limit),
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_user),
) -> ApiResponse[List[AuditLogEntry]]:
    entries = list_audit_logs(
        db,
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id,
        limit=limit,
    )
    return ApiResponse[List[AuditLogEntry]](data=[AuditLogEntry(**entry) for entry in entries])
