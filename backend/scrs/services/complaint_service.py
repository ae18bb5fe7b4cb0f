import logging
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional

from sqlalchemy.orm import Session

from scrs.core.config import settings
from scrs.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError
from scrs.models.complaint import Complaint, ComplaintStatus, ComplaintType
from scrs.models.complaint_comment import ComplaintComment
from scrs.models.complaint_status_history import ComplaintStatusHistory
from scrs.models.user import User, UserRole
from scrs.repositories.comment_repository import CommentRepository
from scrs.repositories.complaint_repository import ComplaintRepository
from scrs.repositories.department_repository import DepartmentRepository
from scrs.repositories.status_history_repository import StatusHistoryRepository
from scrs.repositories.user_repository import UserRepository
from scrs.repositories.vote_repository import VoteRepository
from scrs.schemas.complaint import ComplaintCreate, ComplaintUpdate
from scrs.services.department_service import DepartmentService

logger = logging.getLogger(__name__)

INITIAL_SUBMISSION_NOTE = "Initial complaint submission"
AUTO_ASSIGN_NOTE = "Auto-assigned to staff member"

# Only consulted when ENFORCE_STATUS_TRANSITIONS is on
ALLOWED_TRANSITIONS: Dict[ComplaintStatus, FrozenSet[ComplaintStatus]] = {
    ComplaintStatus.NEW: frozenset({
        ComplaintStatus.ASSIGNED,
        ComplaintStatus.IN_PROGRESS,
        ComplaintStatus.CLOSED,
    }),
    ComplaintStatus.ASSIGNED: frozenset({
        ComplaintStatus.IN_PROGRESS,
        ComplaintStatus.RESOLUTION_ANNOUNCED,
        ComplaintStatus.CLOSED,
    }),
    ComplaintStatus.IN_PROGRESS: frozenset({
        ComplaintStatus.RESOLUTION_ANNOUNCED,
        ComplaintStatus.CLOSED,
    }),
    ComplaintStatus.RESOLUTION_ANNOUNCED: frozenset({
        ComplaintStatus.IN_PROGRESS,
        ComplaintStatus.CONFIRMED_BY_STUDENT,
        ComplaintStatus.CLOSED,
    }),
    ComplaintStatus.CONFIRMED_BY_STUDENT: frozenset({
        ComplaintStatus.RESOLUTION_ANNOUNCED,
        ComplaintStatus.CLOSED,
    }),
    ComplaintStatus.CLOSED: frozenset(),
}


def _status_label(value: Optional[ComplaintStatus]) -> str:
    return value.value if value is not None else "None"


def compose_status_comment(old: Optional[ComplaintStatus], new: ComplaintStatus, notes: Optional[str] = None) -> str:
    if old is None:
        return notes or f"Status set to {new.value}"
    comment = f"Status changed from {_status_label(old)} to {_status_label(new)}"
    if notes:
        comment = f"{comment}: {notes}"
    return comment


class ComplaintService:
    """Complaint lifecycle: submission, status changes, assignment, comments and deletion.

    Every public mutating method commits once on success and rolls back on any
    error. The ``_``-prefixed helpers only flush, so they compose inside a
    single transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.complaint_repo = ComplaintRepository()
        self.user_repo = UserRepository()
        self.department_repo = DepartmentRepository()
        self.vote_repo = VoteRepository()
        self.history_repo = StatusHistoryRepository()
        self.comment_repo = CommentRepository()
        self.department_service = DepartmentService(db)

    # Lookups

    def get_complaint(self, complaint_id: int) -> Complaint:
        complaint = self.complaint_repo.get_by_id(self.db, complaint_id)
        if not complaint:
            raise NotFoundError(f"Complaint not found with id: {complaint_id}")
        return complaint

    def _get_user(self, user_id: int, label: str = "User") -> User:
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise NotFoundError(f"{label} not found with id: {user_id}")
        return user

    def list_complaints(
        self,
        status: Optional[ComplaintStatus] = None,
        complaint_type: Optional[ComplaintType] = None,
        created_by_id: Optional[int] = None,
        assigned_to_id: Optional[int] = None,
        department_id: Optional[int] = None,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Complaint]:
        return self.complaint_repo.search(
            self.db,
            status=status,
            complaint_type=complaint_type,
            created_by_id=created_by_id,
            assigned_to_id=assigned_to_id,
            department_id=department_id,
            created_from=created_from,
            created_to=created_to,
            skip=skip,
            limit=limit,
        )

    def get_top_voted(self, limit: Optional[int] = None) -> List[Complaint]:
        return self.complaint_repo.get_top_voted(self.db, limit or settings.TOP_VOTED_LIMIT)

    def get_requiring_confirmation(self) -> List[Complaint]:
        return self.complaint_repo.get_requiring_confirmation(self.db)

    def get_history(self, complaint_id: int) -> List[ComplaintStatusHistory]:
        self.get_complaint(complaint_id)
        return self.history_repo.get_for_complaint(self.db, complaint_id)

    # Mutations

    def create_complaint(self, data: ComplaintCreate, creator_id: int) -> Complaint:
        creator = self._get_user(creator_id)
        if not creator.is_active:
            raise InvalidStateError("Inactive users cannot submit complaints")

        try:
            if data.department_id is not None:
                department = self.department_repo.get_by_id(self.db, data.department_id)
                if not department:
                    raise NotFoundError(f"Department not found with id: {data.department_id}")
            else:
                department = self.department_service.resolve_target_department(data.type)

            now = datetime.utcnow()
            complaint = Complaint(
                title=data.title,
                description=data.description,
                type=data.type,
                location=data.location,
                status=ComplaintStatus.NEW,
                created_by_id=creator.id,
                target_department_id=department.id,
                total_votes=0,
                student_confirmation=False,
                created_at=now,
                updated_at=now,
            )
            self.complaint_repo.create(self.db, complaint)
            self._append_history(complaint, None, ComplaintStatus.NEW, creator, INITIAL_SUBMISSION_NOTE)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(complaint)
        logger.info(
            "[COMPLAINT] Created complaint %s by %s in department %s",
            complaint.id, creator.username, department.name,
        )
        return complaint

    def update_complaint(self, complaint_id: int, data: ComplaintUpdate, actor: User) -> Complaint:
        complaint = self.get_complaint(complaint_id)
        if actor.role == UserRole.STUDENT and complaint.created_by_id != actor.id:
            raise ForbiddenError("Only the creator can edit this complaint")

        try:
            if data.title is not None:
                complaint.title = data.title
            if data.description is not None:
                complaint.description = data.description
            if data.type is not None:
                complaint.type = data.type
            if data.location is not None:
                complaint.location = data.location
            if data.department_id is not None:
                department = self.department_repo.get_by_id(self.db, data.department_id)
                if not department:
                    raise NotFoundError(f"Department not found with id: {data.department_id}")
                complaint.target_department_id = department.id
            complaint.updated_at = datetime.utcnow()
            self.complaint_repo.save(self.db, complaint)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(complaint)
        return complaint

    def change_status(
        self,
        complaint_id: int,
        new_status: ComplaintStatus,
        actor_id: int,
        notes: Optional[str] = None,
    ) -> Complaint:
        complaint = self.get_complaint(complaint_id)
        actor = self._get_user(actor_id, "Actor")
        try:
            self._apply_status(complaint, new_status, actor, notes)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(complaint)
        return complaint

    def assign(self, complaint_id: int, staff_id: int, actor_id: int) -> Complaint:
        complaint = self.get_complaint(complaint_id)
        staff = self._get_user(staff_id, "Staff member")
        actor = self._get_user(actor_id, "Actor")
        if staff.role != UserRole.STAFF:
            raise InvalidStateError(f"User {staff.username} is not a staff member")

        try:
            complaint.assigned_to_id = staff.id
            complaint.updated_at = datetime.utcnow()
            if complaint.status == ComplaintStatus.NEW:
                self._apply_status(complaint, ComplaintStatus.ASSIGNED, actor, AUTO_ASSIGN_NOTE)
            else:
                self.complaint_repo.save(self.db, complaint)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(complaint)
        logger.info("[COMPLAINT] Complaint %s assigned to %s by %s", complaint.id, staff.username, actor.username)
        return complaint

    def confirm_resolution(self, complaint_id: int, student_id: int) -> Complaint:
        complaint = self.get_complaint(complaint_id)
        if complaint.created_by_id != student_id:
            raise ForbiddenError("Only the student who submitted the complaint can confirm its resolution")
        if complaint.status != ComplaintStatus.RESOLUTION_ANNOUNCED:
            raise InvalidStateError("Only complaints with an announced resolution can be confirmed")
        return self.change_status(
            complaint_id, ComplaintStatus.CONFIRMED_BY_STUDENT, student_id, "Resolution confirmed by student"
        )

    def add_comment(self, complaint_id: int, user_id: int, text: str, is_internal: bool = False) -> ComplaintComment:
        complaint = self.get_complaint(complaint_id)
        author = self._get_user(user_id)
        if is_internal and author.role == UserRole.STUDENT:
            raise ForbiddenError("Students cannot post internal comments")

        now = datetime.utcnow()
        comment = ComplaintComment(
            complaint_id=complaint.id,
            user_id=author.id,
            comment=text,
            is_internal=is_internal,
            created_at=now,
            updated_at=now,
        )
        try:
            self.comment_repo.create(self.db, comment)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(comment)
        return comment

    def list_comments(self, complaint_id: int, viewer: User) -> List[ComplaintComment]:
        self.get_complaint(complaint_id)
        include_internal = viewer.role != UserRole.STUDENT
        return self.comment_repo.get_for_complaint(self.db, complaint_id, include_internal=include_internal)

    def delete_complaint(self, complaint_id: int) -> None:
        if not self.complaint_repo.exists(self.db, complaint_id):
            raise NotFoundError(f"Complaint not found with id: {complaint_id}")

        try:
            comments = self.comment_repo.delete_by_complaint(self.db, complaint_id)
            votes = self.vote_repo.delete_by_complaint(self.db, complaint_id)
            history = self.history_repo.delete_by_complaint(self.db, complaint_id)
            self.complaint_repo.delete_by_id(self.db, complaint_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.expire_all()
        logger.info(
            "[COMPLAINT] Deleted complaint %s (%s comments, %s votes, %s history rows)",
            complaint_id, comments, votes, history,
        )

    # Helpers

    def _apply_status(
        self,
        complaint: Complaint,
        new_status: ComplaintStatus,
        actor: User,
        notes: Optional[str] = None,
    ) -> None:
        old_status = complaint.status
        if settings.ENFORCE_STATUS_TRANSITIONS and new_status not in ALLOWED_TRANSITIONS.get(old_status, frozenset()):
            raise InvalidStateError(
                f"Cannot move complaint from {_status_label(old_status)} to {_status_label(new_status)}"
            )

        now = datetime.utcnow()
        complaint.status = new_status
        complaint.updated_at = now
        if new_status == ComplaintStatus.CONFIRMED_BY_STUDENT:
            complaint.student_confirmation = True
            complaint.confirmed_by_student_at = now
        elif new_status == ComplaintStatus.RESOLUTION_ANNOUNCED:
            # The student has to confirm again after every announcement
            complaint.student_confirmation = False
            complaint.resolution_announced_at = now

        self.complaint_repo.save(self.db, complaint)
        self._append_history(complaint, old_status, new_status, actor, notes)
        logger.info(
            "[COMPLAINT] Complaint %s: %s -> %s by %s",
            complaint.id, _status_label(old_status), _status_label(new_status), actor.username,
        )

    def _append_history(
        self,
        complaint: Complaint,
        old_status: Optional[ComplaintStatus],
        new_status: ComplaintStatus,
        actor: User,
        notes: Optional[str] = None,
    ) -> ComplaintStatusHistory:
        entry = ComplaintStatusHistory(
            complaint_id=complaint.id,
            status=new_status,
            comment=compose_status_comment(old_status, new_status, notes),
            changed_by_id=actor.id,
            created_at=datetime.utcnow(),
        )
        return self.history_repo.create(self.db, entry)
