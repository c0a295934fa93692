"""Read-only access to the external identity store."""
from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from vessel_social.core.errors import NotFound
from vessel_social.models import User

__all__ = ["IdentityStore", "normalize_handle"]


def normalize_handle(handle: str) -> str:
    """Strip an optional leading '@' and lower-case the handle."""
    cleaned = handle.strip()
    if cleaned.startswith("@"):
        cleaned = cleaned[1:]
    return cleaned.lower()


class IdentityStore:
    """Lookups by handle or id; this service never writes users."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_handle(self, handle: str) -> User | None:
        """Return the user owning ``handle`` or None."""
        normalized = normalize_handle(handle)
        if not normalized:
            return None
        return self.db.query(User).filter(User.handle == normalized).first()

    def resolve_by_handle(self, handle: str) -> str:
        """Return the id behind ``handle``; raise NotFound when unknown."""
        user = self.find_by_handle(handle)
        if user is None:
            raise NotFound("User not found")
        return user.id

    def resolve_by_id(self, user_id: str) -> User:
        """Return the user record for ``user_id``; raise NotFound when unknown."""
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def resolve_identifier(self, identifier: str) -> User:
        """Resolve a path identifier that may be a handle or an id."""
        user = self.find_by_handle(identifier) or self.db.get(User, identifier)
        if user is None:
            raise NotFound("User not found")
        return user

    def summaries(self, user_ids: Iterable[str]) -> dict[str, User]:
        """Return users keyed by id; unknown ids are omitted."""
        ids = set(user_ids)
        if not ids:
            return {}
        users = self.db.query(User).filter(User.id.in_(ids)).all()
        return {user.id: user for user in users}
