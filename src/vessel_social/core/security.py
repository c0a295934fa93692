"""Bearer token helpers.

Token issuance belongs to the external authentication service; these helpers
only share its HS256 format so development tooling and tests can mint tokens
that the API accepts.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from vessel_social.core.settings import settings


def create_access_token(user_id: str) -> str:
    """Create a JWT whose subject is the opaque user id."""
    to_encode: dict[str, object] = {"sub": user_id}
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> str | None:
    """Return the user id carried by ``token`` or None if it is not valid."""
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        return None
    return subject
