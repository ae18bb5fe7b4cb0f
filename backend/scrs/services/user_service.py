import logging
import math
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scrs.core.audit import AuditService
from scrs.core.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationFailedError,
)
from scrs.core.security import get_password_hash, verify_password
from scrs.models.complaint import Complaint
from scrs.models.complaint_comment import ComplaintComment
from scrs.models.complaint_status_history import ComplaintStatusHistory
from scrs.models.user import User, UserRole
from scrs.repositories.audit_log_repository import AuditLogRepository
from scrs.repositories.complaint_repository import ComplaintRepository
from scrs.repositories.department_repository import DepartmentRepository
from scrs.repositories.user_repository import UserRepository
from scrs.repositories.vote_repository import VoteRepository
from scrs.schemas.user import AdminUserUpdate, UserPage, UserResponse

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository()
        self.department_repo = DepartmentRepository()
        self.audit_repo = AuditLogRepository()
        self.complaint_repo = ComplaintRepository()
        self.vote_repo = VoteRepository()

    def get_user(self, user_id: int) -> User:
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise NotFoundError(f"User not found with id: {user_id}")
        return user

    def list_users(self, skip: int = 0, limit: int = 100) -> List[User]:
        return self.user_repo.get_all(self.db, skip=skip, limit=limit)

    def list_by_role(self, role: UserRole) -> List[User]:
        return self.user_repo.get_by_role(self.db, role)

    def list_by_department(self, department_id: int) -> List[User]:
        if not self.department_repo.get_by_id(self.db, department_id):
            raise NotFoundError(f"Department not found with id: {department_id}")
        return self.user_repo.get_by_department(self.db, department_id)

    def search_users(
        self,
        page: int = 0,
        size: int = 10,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> UserPage:
        users, total = self.user_repo.search(
            self.db,
            role=role,
            is_active=is_active,
            search=search.strip() if search else None,
            skip=page * size,
            limit=size,
        )
        return UserPage(
            content=[UserResponse.model_validate(u) for u in users],
            total_elements=total,
            total_pages=math.ceil(total / size) if size else 0,
            number=page,
            size=size,
        )

    def update_user(self, user_id: int, update: AdminUserUpdate, performer: User) -> User:
        """Apply only the fields present in the request body."""
        user = self.get_user(user_id)
        changes = update.model_dump(exclude_unset=True)
        if not changes:
            return user

        for required in ("username", "email", "role"):
            if required in changes and changes[required] is None:
                raise ValidationFailedError(f"{required} cannot be null")

        if "username" in changes and changes["username"] != user.username:
            if self.user_repo.exists_by_username(self.db, changes["username"]):
                raise ConflictError(f"Username already exists: {changes['username']}")
        if "email" in changes and changes["email"].lower() != user.email.lower():
            if self.user_repo.exists_by_email(self.db, changes["email"]):
                raise ConflictError(f"Email already exists: {changes['email']}")
        if changes.get("department_id") is not None:
            if not self.department_repo.get_by_id(self.db, changes["department_id"]):
                raise NotFoundError(f"Department not found with id: {changes['department_id']}")

        old_values = {field: getattr(user, field) for field in changes}
        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = datetime.utcnow()

        try:
            AuditService.log_action(
                self.db, "USER_UPDATE", performer,
                target_id=user.id, target_type="USER",
                old_value=str({k: getattr(v, "value", v) for k, v in old_values.items()}),
                new_value=str({k: getattr(v, "value", v) for k, v in changes.items()}),
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Username or email already exists")
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        logger.info("[USERS] %s updated user %s: %s", performer.username, user.id, sorted(changes))
        return user

    def set_active(self, user_id: int, is_active: bool, performer: User) -> User:
        user = self.get_user(user_id)
        if user.id == performer.id and not is_active:
            raise InvalidStateError("You cannot deactivate your own account")

        old_value = user.is_active
        user.is_active = is_active
        user.updated_at = datetime.utcnow()
        try:
            AuditService.log_action(
                self.db,
                "USER_ACTIVATE" if is_active else "USER_DEACTIVATE",
                performer,
                target_id=user.id, target_type="USER",
                old_value=str(old_value), new_value=str(is_active),
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        logger.info("[USERS] User %s is_active=%s (by %s)", user.username, is_active, performer.username)
        return user

    def toggle_status(self, user_id: int, performer: User) -> User:
        user = self.get_user(user_id)
        return self.set_active(user_id, not user.is_active, performer)

    def change_password(self, user_id: int, new_password: str, performer: User) -> User:
        user = self.get_user(user_id)
        user.hashed_password = get_password_hash(new_password)
        user.updated_at = datetime.utcnow()
        try:
            AuditService.log_action(
                self.db, "USER_PASSWORD_RESET", performer, target_id=user.id, target_type="USER",
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        return user

    def change_own_password(self, user: User, current_password: str, new_password: str) -> User:
        if not verify_password(current_password, user.hashed_password):
            raise ValidationFailedError("Current password is incorrect")
        user.hashed_password = get_password_hash(new_password)
        user.updated_at = datetime.utcnow()
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        logger.info("[USERS] User %s changed their password", user.username)
        return user

    def delete_user(self, user_id: int, performer: User) -> None:
        """
        Delete a user together with their votes and comments.

        Users who submitted complaints or changed a complaint's status stay in
        the audit trail and can only be deactivated.
        """
        user = self.get_user(user_id)
        if user.id == performer.id:
            raise InvalidStateError("You cannot delete your own account")

        has_complaints = self.db.query(Complaint.id).filter(Complaint.created_by_id == user.id).first()
        has_history = (
            self.db.query(ComplaintStatusHistory.id)
            .filter(ComplaintStatusHistory.changed_by_id == user.id)
            .first()
        )
        if has_complaints or has_history:
            raise ConflictError("User has complaint records and cannot be deleted; deactivate instead")

        username = user.username
        try:
            for vote in self.vote_repo.get_for_user(self.db, user.id):
                if self.vote_repo.delete(self.db, vote.complaint_id, user.id):
                    self.complaint_repo.decrement_votes(self.db, vote.complaint_id)
            self.db.query(ComplaintComment).filter(ComplaintComment.user_id == user.id).delete(
                synchronize_session=False
            )
            self.db.query(Complaint).filter(Complaint.assigned_to_id == user.id).update(
                {"assigned_to_id": None}, synchronize_session=False
            )
            self.audit_repo.clear_performer(self.db, user.id)
            self.user_repo.delete(self.db, user)
            AuditService.log_action(
                self.db, "USER_DELETE", performer, target_id=user_id, target_type="USER", old_value=username,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("[USERS] %s deleted user %s (%s)", performer.username, user_id, username)
