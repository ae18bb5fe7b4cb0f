import logging
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

from scrs.core.config import settings

logger = logging.getLogger(__name__)

# Bcrypt configuration - using 12 rounds for better security (default is 10)
BCRYPT_ROUNDS = 12


class TokenValidationError(Exception):
    """Raised when a bearer token cannot be trusted.

    ``reason`` is one of ``empty``, ``malformed``, ``expired`` or ``unsupported``.
    """

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a bcrypt hash.
    """
    if not plain_password or not hashed_password:
        return False
    try:
        if isinstance(hashed_password, bytes):
            hash_bytes = hashed_password
        else:
            hash_bytes = hashed_password.encode('utf-8')
        return bcrypt.checkpw(plain_password.encode('utf-8'), hash_bytes)
    except ValueError as e:
        # Stored hash is not a bcrypt hash
        logger.warning("[SECURITY] Password verification error: %s", e)
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.
    Returns the hash as a string for database storage.
    """
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token"""
    to_encode = data.copy()
    now = datetime.utcnow()
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "iat": now})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_user_token(user_id: int, username: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Token carrying the identity the API needs: user id, username and role"""
    return create_access_token(
        {"sub": str(user_id), "username": username, "role": role},
        expires_delta=expires_delta,
    )


def decode_token_claims(token: Optional[str]) -> dict:
    """Decode and verify a token, raising TokenValidationError with a distinct reason"""
    if token is None or not token.strip():
        raise TokenValidationError("empty", "JWT claims string is empty")

    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        raise TokenValidationError("malformed", f"Invalid JWT token: {e}")

    if header.get("alg") != settings.JWT_ALGORITHM:
        raise TokenValidationError("unsupported", f"JWT algorithm {header.get('alg')!r} is unsupported")

    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise TokenValidationError("expired", "JWT token is expired")
    except JWTClaimsError as e:
        raise TokenValidationError("malformed", f"Invalid JWT claims: {e}")
    except JWTError as e:
        raise TokenValidationError("malformed", f"Invalid JWT token: {e}")


def decode_access_token(token: Optional[str]) -> Optional[dict]:
    """Decode a JWT access token; failures are logged and return None"""
    try:
        return decode_token_claims(token)
    except TokenValidationError as e:
        logger.warning("[SECURITY] Token rejected (%s): %s", e.reason, e)
        return None
