from datetime import timedelta

import pytest

from scrs.core.exceptions import AuthFailureError, ForbiddenError
from scrs.core.permissions import get_user_from_token, require_roles
from scrs.core.security import create_access_token, create_user_token
from scrs.models.user import UserRole


def test_token_resolves_to_user(db, make_user):
    user = make_user(role=UserRole.STAFF)
    token = create_user_token(user.id, user.username, user.role.value)
    assert get_user_from_token(token, db).id == user.id


def test_missing_token(db):
    with pytest.raises(AuthFailureError):
        get_user_from_token(None, db)


def test_expired_token(db, make_user):
    user = make_user()
    token = create_access_token({"sub": str(user.id)}, expires_delta=timedelta(seconds=-1))
    with pytest.raises(AuthFailureError):
        get_user_from_token(token, db)


def test_deleted_user(db):
    with pytest.raises(AuthFailureError):
        get_user_from_token(create_user_token(42, "ghost", "STUDENT"), db)


def test_inactive_user(db, make_user):
    user = make_user(is_active=False)
    with pytest.raises(ForbiddenError):
        get_user_from_token(create_user_token(user.id, user.username, "STUDENT"), db)


def test_require_roles(db, make_user):
    student = make_user()
    staff = make_user(role=UserRole.STAFF)
    checker = require_roles([UserRole.STAFF, UserRole.ADMIN])
    assert checker(current_user=staff) is staff
    with pytest.raises(ForbiddenError):
        checker(current_user=student)
