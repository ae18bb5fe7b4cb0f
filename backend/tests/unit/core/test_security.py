from datetime import timedelta

import pytest
from jose import jwt

from scrs.core.config import settings
from scrs.core.security import (
    TokenValidationError,
    create_access_token,
    create_user_token,
    decode_access_token,
    decode_token_claims,
    get_password_hash,
    verify_password,
)


def test_password_hash_roundtrip():
    hashed = get_password_hash("correct horse")
    assert hashed != "correct horse"
    assert hashed.startswith("$2")
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_verify_password_rejects_non_bcrypt_hash():
    assert verify_password("anything", "plain-text") is False
    assert verify_password("", get_password_hash("x")) is False


def test_user_token_claims():
    token = create_user_token(7, "alice", "STAFF")
    claims = decode_token_claims(token)
    assert claims["sub"] == "7"
    assert claims["username"] == "alice"
    assert claims["role"] == "STAFF"
    assert claims["exp"] > claims["iat"]


@pytest.mark.parametrize("token", [None, "", "   "])
def test_empty_token(token):
    with pytest.raises(TokenValidationError) as excinfo:
        decode_token_claims(token)
    assert excinfo.value.reason == "empty"


def test_malformed_token():
    with pytest.raises(TokenValidationError) as excinfo:
        decode_token_claims("definitely.not.a-token")
    assert excinfo.value.reason == "malformed"


def test_expired_token():
    token = create_access_token({"sub": "1"}, expires_delta=timedelta(minutes=-5))
    with pytest.raises(TokenValidationError) as excinfo:
        decode_token_claims(token)
    assert excinfo.value.reason == "expired"


def test_unsupported_algorithm():
    token = jwt.encode({"sub": "1"}, settings.JWT_SECRET_KEY, algorithm="HS512")
    with pytest.raises(TokenValidationError) as excinfo:
        decode_token_claims(token)
    assert excinfo.value.reason == "unsupported"


def test_wrong_signature_is_malformed():
    token = jwt.encode({"sub": "1"}, "some-other-secret", algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(TokenValidationError) as excinfo:
        decode_token_claims(token)
    assert excinfo.value.reason == "malformed"


def test_decode_access_token_returns_none_on_failure():
    assert decode_access_token("garbage") is None
    assert decode_access_token(create_user_token(1, "a", "ADMIN"))["sub"] == "1"
