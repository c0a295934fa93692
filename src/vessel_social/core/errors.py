"""Domain errors raised by the social graph and messaging services.

Services never raise ``HTTPException`` directly; the API layer renders these
errors through a single exception handler so the same rules can be exercised
without a transport.
"""

from __future__ import annotations

from fastapi import status


class SocialGraphError(RuntimeError):
    """Base exception for every domain failure surfaced to callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"

    def __init__(self, detail: str, *, reason: str | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.reason = reason

    def to_payload(self) -> dict[str, str | None]:
        """Return the JSON body used by the API layer."""
        return {"detail": self.detail, "code": self.code, "reason": self.reason}


class NotFound(SocialGraphError):
    """Referenced user, request, thread or notification does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Forbidden(SocialGraphError):
    """Caller lacks standing: not a participant, not the recipient, not mutual."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class InvalidOperation(SocialGraphError):
    """Operation violates an invariant such as self-follow or empty content."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_operation"


class Conflict(SocialGraphError):
    """Uniqueness violation; ``reason`` tells the client which one."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class Unavailable(SocialGraphError):
    """The data store or an external collaborator could not be reached.

    This is the only error class a caller may retry, and only for idempotent
    operations (follow, unfollow, dismiss).
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "unavailable"


__all__ = [
    "SocialGraphError",
    "NotFound",
    "Forbidden",
    "InvalidOperation",
    "Conflict",
    "Unavailable",
]
