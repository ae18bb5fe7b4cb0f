import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scrs.core.exceptions import AuthFailureError, ConflictError, ForbiddenError, ValidationFailedError
from scrs.core.security import (
    TokenValidationError,
    create_user_token,
    decode_token_claims,
    get_password_hash,
    verify_password,
)
from scrs.models.user import User, UserRole
from scrs.repositories.user_repository import UserRepository
from scrs.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, TokenValidationResponse
from scrs.schemas.user import UserResponse

logger = logging.getLogger(__name__)


def split_full_name(full_name: Optional[str]):
    """'Ada King Lovelace' -> ('Ada', 'King Lovelace')"""
    if not full_name or not full_name.strip():
        return None, None
    parts = full_name.strip().split(" ", 1)
    first = parts[0][:50]
    last = parts[1].strip()[:50] if len(parts) > 1 else None
    return first, last or None


class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository()

    async def login(self, login_data: LoginRequest) -> TokenResponse:
        identifier = login_data.identifier.strip()
        if not identifier:
            raise ValidationFailedError("Identifier is required")

        user = self.user_repo.get_by_username_or_email(self.db, identifier)
        if not user or not verify_password(login_data.password, user.hashed_password):
            logger.info("[AUTH] Failed login for %r", identifier)
            raise AuthFailureError("Invalid username/email or password")

        if not user.is_active:
            logger.info("[AUTH] [BLOCKED] Login blocked for %s - account is inactive", user.username)
            raise ForbiddenError("User account is inactive")

        logger.info("[AUTH] Login successful - user: %s, role: %s", user.username, user.role.value)
        return self._create_token_response(user)

    def register(self, data: RegisterRequest) -> TokenResponse:
        if self.user_repo.exists_by_username(self.db, data.username):
            raise ConflictError(f"Username already exists: {data.username}")
        if self.user_repo.exists_by_email(self.db, data.email):
            raise ConflictError(f"Email already exists: {data.email}")

        first_name, last_name = split_full_name(data.full_name)
        now = datetime.utcnow()
        user = User(
            username=data.username,
            email=data.email,
            hashed_password=get_password_hash(data.password),
            first_name=first_name,
            last_name=last_name,
            role=UserRole.STUDENT,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        try:
            self.user_repo.create(self.db, user)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Username or email already exists")
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        logger.info("[AUTH] Registered user %s (id=%s)", user.username, user.id)
        return self._create_token_response(user)

    def validate_token(self, token: Optional[str]) -> TokenValidationResponse:
        try:
            claims = decode_token_claims(token)
        except TokenValidationError as e:
            logger.warning("[AUTH] Token validation failed (%s): %s", e.reason, e)
            raise AuthFailureError("Invalid token")

        subject = claims.get("sub")
        user = self.user_repo.get_by_id(self.db, int(subject)) if str(subject or "").isdigit() else None
        if user is None:
            raise AuthFailureError("Invalid token")
        return TokenValidationResponse(
            valid=True,
            user_id=user.id,
            username=user.username,
            role=user.role.value,
        )

    def _create_token_response(self, user: User) -> TokenResponse:
        access_token = create_user_token(user.id, user.username, user.role.value)
        return TokenResponse(
            access_token=access_token,
            token_type="bearer",
            user=UserResponse.model_validate(user),
        )
