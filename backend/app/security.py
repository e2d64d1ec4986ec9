"""
RedSocial Backend — Password & Token Primitives
=================================================

What:  bcrypt password hashing (passlib) and HS256 access tokens (python-jose).
Who:   UserService hashes/verifies passwords; AuthService issues and
       decodes tokens.

Token Claims:
    sub     username of the account (resolved back to a user on every request)
    userId  numeric id, informational
    iat     issued-at (UTC)
    exp     expiry (UTC), iat + ACCESS_TOKEN_EXPIRE_MINUTES

decode_access_token() raises jose.JWTError (ExpiredSignatureError is a
subclass) for any signature, format or expiry problem; callers translate it
into UnauthorizedError.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt
from passlib.context import CryptContext

from app.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    subject: str,
    extra_claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a token for `subject` (a username) valid for `expires_delta`."""
    issued_at = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode: Dict[str, Any] = dict(extra_claims or {})
    to_encode.update({
        "sub": subject,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    })
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry and return the claims."""
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
