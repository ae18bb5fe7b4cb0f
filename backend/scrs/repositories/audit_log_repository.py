from sqlalchemy.orm import Session
from scrs.models.audit_log import AuditLog
from typing import List

class AuditLogRepository:
    def create(self, db: Session, entry: AuditLog) -> AuditLog:
        db.add(entry)
        db.flush()
        return entry

    def get_recent(self, db: Session, limit: int = 20) -> List[AuditLog]:
        return (
            db.query(AuditLog)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
            .all()
        )

    def clear_performer(self, db: Session, user_id: int) -> int:
        return (
            db.query(AuditLog)
            .filter(AuditLog.performer_id == user_id)
            .update({"performer_id": None}, synchronize_session=False)
        )
