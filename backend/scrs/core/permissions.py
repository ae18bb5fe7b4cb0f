import logging
from typing import List, Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from scrs.core.database import get_db
from scrs.core.exceptions import AuthFailureError, ForbiddenError
from scrs.core.security import decode_access_token
from scrs.models.user import User, UserRole

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_user_from_token(token: Optional[str], db: Session) -> User:
    """Resolve a bearer token into an active User"""
    if not token:
        raise AuthFailureError("Not authenticated")

    payload = decode_access_token(token)
    if not payload:
        raise AuthFailureError("Invalid token")

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise AuthFailureError("Invalid token")

    user = db.query(User).filter(User.id == int(subject)).first()
    if user is None:
        raise AuthFailureError("User not found")

    if not user.is_active:
        logger.info("[PERMISSIONS] Rejected inactive user %s", user.username)
        raise ForbiddenError("User is inactive")

    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    token = credentials.credentials if credentials else None
    return get_user_from_token(token, db)


def require_roles(allowed_roles: List[UserRole]):
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise ForbiddenError("Insufficient permissions")
        return current_user
    return role_checker


def get_admin_user(current_user: User = Depends(require_roles([UserRole.ADMIN]))) -> User:
    return current_user


def get_staff_or_admin(current_user: User = Depends(require_roles([UserRole.STAFF, UserRole.ADMIN]))) -> User:
    return current_user


def get_student_user(current_user: User = Depends(require_roles([UserRole.STUDENT]))) -> User:
    return current_user
