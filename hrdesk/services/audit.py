import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hrdesk.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def _sanitize(obj: Any) -> Any:
    """Make details/states JSON-serializable."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    return obj


class AuditService:
    def __init__(self, db: Session):
        self.db = db

    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        user_id: Optional[int],
        details: Optional[dict] = None,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None
    ) -> Optional[AuditLog]:
        """
        Append an audit entry to the current transaction.

        The entry is written inside a SAVEPOINT: it commits or rolls back with
        the caller's transaction, and a failed audit write only rolls back the
        savepoint so the main action can still proceed.
        """
        db_log = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            details=_sanitize(details),
            before_state=_sanitize(before_state),
            after_state=_sanitize(after_state)
        )
        try:
            with self.db.begin_nested():
                self.db.add(db_log)
        except SQLAlchemyError as e:
            logger.error(f"FAILED TO AUDIT LOG {action} on {entity_type}#{entity_id}: {e}", exc_info=True)
            return None
        return db_log

    # Static wrapper so call sites can stay one-liners
    @staticmethod
    def log(db: Session, *args, **kwargs) -> Optional[AuditLog]:
        return AuditService(db).log_action(*args, **kwargs)
