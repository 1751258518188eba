import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..models.models import AuditLog, User, utcnow

logger = logging.getLogger(__name__)


def _jsonable(data: Any) -> Any:
    if data is None or isinstance(data, (str, int, float, bool)):
        return data
    if isinstance(data, dict):
        return {str(key): _jsonable(value) for key, value in data.items()}
    if isinstance(data, (list, tuple, set)):
        return [_jsonable(value) for value in data]
    return str(data)


def record_audit(
    session: Session,
    entity_type: str,
    entity_id: Any,
    user_id: Optional[int],
    action: str,
    changes: Any = None,
) -> Optional[AuditLog]:
    """Append one audit entry and commit it.

    Audit logging never breaks the operation that triggered it: storage
    failures are logged and swallowed, and ``None`` is returned instead.
    """
    try:
        entry = AuditLog(
            entity_type=entity_type,
            entity_id=str(entity_id),
            user_id=user_id,
            action=action,
            changes=_jsonable(changes),
            created_at=utcnow(),
        )
        session.add(entry)
        session.commit()
        return entry
    except Exception:
        session.rollback()
        logger.exception(
            "Audit log write failed for %s %s (action=%s).", entity_type, entity_id, action
        )
        return None


def list_audit_logs(
    session: Session,
    entity_type: Optional[str] = None,
    entity_id: Optional[Any] = None,
    user_id: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    limit = limit or settings.audit_log_default_limit
    query = session.query(AuditLog, User.name).outerjoin(User, AuditLog.user_id == User.id)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if entity_id is not None:
        query = query.filter(AuditLog.entity_id == str(entity_id))
    if user_id is not None:
        query = query.filter(AuditLog.user_id == user_id)
    rows = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()
    return [
        {
            "id": entry.id,
            "entity_type": entry.entity_type,
            "entity_id": entry.entity_id,
            "user_id": entry.user_id,
            "user_name": user_name,
            "action": entry.action,
            "changes": entry.changes,
            "created_at": entry.created_at,
        }
        for entry, user_name in rows
    ]
