from sqlalchemy.orm import Session
from scrs.models.complaint_vote import ComplaintVote
from typing import List, Optional

class VoteRepository:
    def get(self, db: Session, complaint_id: int, user_id: int) -> Optional[ComplaintVote]:
        return (
            db.query(ComplaintVote)
            .filter(ComplaintVote.complaint_id == complaint_id, ComplaintVote.user_id == user_id)
            .first()
        )

    def exists(self, db: Session, complaint_id: int, user_id: int) -> bool:
        return self.get(db, complaint_id, user_id) is not None

    def create(self, db: Session, vote: ComplaintVote) -> ComplaintVote:
        db.add(vote)
        db.flush()
        return vote

    def delete(self, db: Session, complaint_id: int, user_id: int) -> int:
        """Delete the vote if it still exists; returns the number of rows removed"""
        return (
            db.query(ComplaintVote)
            .filter(ComplaintVote.complaint_id == complaint_id, ComplaintVote.user_id == user_id)
            .delete(synchronize_session=False)
        )

    def get_for_user(self, db: Session, user_id: int) -> List[ComplaintVote]:
        return db.query(ComplaintVote).filter(ComplaintVote.user_id == user_id).all()

    def count_for_complaint(self, db: Session, complaint_id: int) -> int:
        return db.query(ComplaintVote).filter(ComplaintVote.complaint_id == complaint_id).count()

    def delete_by_complaint(self, db: Session, complaint_id: int) -> int:
        return (
            db.query(ComplaintVote)
            .filter(ComplaintVote.complaint_id == complaint_id)
            .delete(synchronize_session=False)
        )
