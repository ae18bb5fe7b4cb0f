import json
import logging
from typing import Optional, Dict, Any

from sqlalchemy.orm import Session

from scrs.models.audit_log import AuditLog
from scrs.models.user import User

logger = logging.getLogger(__name__)


class AuditService:
    @staticmethod
    def log_action(
        db: Session,
        action: str,
        performer: Optional[User],
        target_id: Optional[Any] = None,
        target_type: Optional[str] = None,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        """
        Record an admin action in the caller's transaction.

        The entry is flushed, not committed: it lands together with the change
        it describes, or not at all.
        """
        entry = AuditLog(
            action=action,
            performer_id=performer.id if performer else None,
            target_id=str(target_id) if target_id is not None else None,
            target_type=target_type,
            old_value=old_value,
            new_value=new_value,
            details=json.dumps(details, default=str) if details else None,
        )
        db.add(entry)
        db.flush()
        logger.info(
            "[AUDIT] %s by %s on %s:%s",
            action,
            performer.username if performer else "system",
            target_type,
            target_id,
        )
        return entry
