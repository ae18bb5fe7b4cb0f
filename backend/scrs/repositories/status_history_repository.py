from sqlalchemy.orm import Session
from scrs.models.complaint_status_history import ComplaintStatusHistory
from typing import List

class StatusHistoryRepository:
    def create(self, db: Session, entry: ComplaintStatusHistory) -> ComplaintStatusHistory:
        db.add(entry)
        db.flush()
        return entry

    def get_for_complaint(self, db: Session, complaint_id: int) -> List[ComplaintStatusHistory]:
        return (
            db.query(ComplaintStatusHistory)
            .filter(ComplaintStatusHistory.complaint_id == complaint_id)
            .order_by(ComplaintStatusHistory.created_at, ComplaintStatusHistory.id)
            .all()
        )

    def get_recent(self, db: Session, limit: int = 20) -> List[ComplaintStatusHistory]:
        return (
            db.query(ComplaintStatusHistory)
            .order_by(ComplaintStatusHistory.created_at.desc(), ComplaintStatusHistory.id.desc())
            .limit(limit)
            .all()
        )

    def delete_by_complaint(self, db: Session, complaint_id: int) -> int:
        return (
            db.query(ComplaintStatusHistory)
            .filter(ComplaintStatusHistory.complaint_id == complaint_id)
            .delete(synchronize_session=False)
        )
