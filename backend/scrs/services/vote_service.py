import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scrs.core.exceptions import ConflictError, NotFoundError
from scrs.models.complaint import Complaint
from scrs.models.complaint_vote import ComplaintVote
from scrs.repositories.complaint_repository import ComplaintRepository
from scrs.repositories.user_repository import UserRepository
from scrs.repositories.vote_repository import VoteRepository

logger = logging.getLogger(__name__)


class VoteService:
    """One vote per user per complaint, mirrored in Complaint.total_votes.

    The unique constraint on (complaint_id, user_id) closes the race between the
    existence check and the insert: a concurrent duplicate fails on flush and
    the whole transaction, counter increment included, is rolled back.
    """

    def __init__(self, db: Session):
        self.db = db
        self.complaint_repo = ComplaintRepository()
        self.user_repo = UserRepository()
        self.vote_repo = VoteRepository()

    def _check_participants(self, complaint_id: int, user_id: int) -> Complaint:
        complaint = self.complaint_repo.get_by_id(self.db, complaint_id)
        if not complaint:
            raise NotFoundError(f"Complaint not found with id: {complaint_id}")
        if not self.user_repo.get_by_id(self.db, user_id):
            raise NotFoundError(f"User not found with id: {user_id}")
        return complaint

    def vote(self, complaint_id: int, user_id: int) -> Complaint:
        complaint = self._check_participants(complaint_id, user_id)
        if self.vote_repo.exists(self.db, complaint_id, user_id):
            raise ConflictError("DuplicateVote: user has already voted for this complaint")

        try:
            self.vote_repo.create(
                self.db,
                ComplaintVote(complaint_id=complaint_id, user_id=user_id, created_at=datetime.utcnow()),
            )
            complaint.total_votes = Complaint.total_votes + 1
            self.db.flush()
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("[VOTE] Duplicate vote rejected by constraint: complaint=%s user=%s", complaint_id, user_id)
            raise ConflictError("DuplicateVote: user has already voted for this complaint")
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(complaint)
        logger.info("[VOTE] User %s voted for complaint %s (total=%s)", user_id, complaint_id, complaint.total_votes)
        return complaint

    def unvote(self, complaint_id: int, user_id: int) -> Complaint:
        complaint = self._check_participants(complaint_id, user_id)
        if self.vote_repo.get(self.db, complaint_id, user_id) is None:
            return complaint

        try:
            # A concurrent removal may already have deleted the row
            removed = self.vote_repo.delete(self.db, complaint_id, user_id)
            if removed:
                self.complaint_repo.decrement_votes(self.db, complaint_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        if not removed:
            logger.info("[VOTE] Vote by user %s on complaint %s was already removed", user_id, complaint_id)
        self.db.refresh(complaint)
        logger.info("[VOTE] User %s removed vote from complaint %s (total=%s)", user_id, complaint_id, complaint.total_votes)
        return complaint

    def has_voted(self, complaint_id: int, user_id: int) -> bool:
        return self.vote_repo.exists(self.db, complaint_id, user_id)

    def vote_count(self, complaint_id: int) -> int:
        if not self.complaint_repo.exists(self.db, complaint_id):
            raise NotFoundError(f"Complaint not found with id: {complaint_id}")
        return self.vote_repo.count_for_complaint(self.db, complaint_id)
