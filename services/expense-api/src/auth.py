"""
Password hashing and bearer-token handling for the expense API.

Hashing is delegated to bcrypt and token signing to python-jose; this module
only decides what goes into a token and how a request proves who it is.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
from fastapi import Request
from jose import JWTError, jwt

from settings import ApiSettings

BEARER_PREFIX = "bearer"


class AuthenticationError(Exception):
    """Raised when a request lacks valid credentials."""

    def __init__(self, error_code: str, details: str) -> None:
        super().__init__(details)
        self.error_code = error_code
        self.details = details


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


def create_access_token(user_id: str, settings: ApiSettings, *, now: datetime | None = None) -> str:
    issued_at = now or datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "sub": user_id,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(days=settings.jwt_expires_days)).timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: ApiSettings) -> str:
    """Return the user id carried by a valid token."""
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise AuthenticationError("invalid_token", "Invalid or expired token.") from exc

    user_id = claims.get("sub")
    if not user_id:
        raise AuthenticationError("invalid_token", "Invalid or expired token.")
    return str(user_id)


def _extract_bearer_token(request: Request) -> str:
    header = request.headers.get("authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() != BEARER_PREFIX or not token.strip():
        raise AuthenticationError("authentication_required", "Authentication required.")
    return token.strip()


def authenticate_request(request: Request, settings: ApiSettings) -> str:
    """Resolve the user id from the request's bearer token or raise AuthenticationError."""
    token = _extract_bearer_token(request)
    user_id = decode_access_token(token, settings)
    request.state.user_id = user_id
    return user_id
