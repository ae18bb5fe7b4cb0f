from sqlalchemy.orm import Session
from scrs.models.complaint_comment import ComplaintComment
from typing import List

class CommentRepository:
    def create(self, db: Session, comment: ComplaintComment) -> ComplaintComment:
        db.add(comment)
        db.flush()
        return comment

    def get_for_complaint(self, db: Session, complaint_id: int, include_internal: bool = True) -> List[ComplaintComment]:
        query = db.query(ComplaintComment).filter(ComplaintComment.complaint_id == complaint_id)
        if not include_internal:
            query = query.filter(ComplaintComment.is_internal.is_(False))
        return query.order_by(ComplaintComment.created_at, ComplaintComment.id).all()

    def delete_by_complaint(self, db: Session, complaint_id: int) -> int:
        return (
            db.query(ComplaintComment)
            .filter(ComplaintComment.complaint_id == complaint_id)
            .delete(synchronize_session=False)
        )
