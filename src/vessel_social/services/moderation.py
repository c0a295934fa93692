"""Client for the external content moderation collaborator.

Message requests and thread messages are passed through a ``ContentReviewer``
before they are persisted. When moderation is disabled every text is
approved; otherwise the text is POSTed to the configured review endpoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from vessel_social.core.errors import InvalidOperation, Unavailable
from vessel_social.core.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewResult:
    """Verdict returned by a reviewer."""

    approved: bool
    reason: str | None = None


class ContentReviewer(Protocol):
    """Anything that can judge a piece of user text."""

    def review(self, text: str) -> ReviewResult:
        ...


class AllowAllReviewer:
    """Reviewer used when no moderation service is configured."""

    def review(self, text: str) -> ReviewResult:
        return ReviewResult(approved=True)


class HttpContentReviewer:
    """Reviewer backed by an HTTP endpoint.

    The endpoint receives ``{"text": ...}`` and answers
    ``{"approved": bool, "reason": str | null}``.
    """

    def __init__(
        self,
        review_url: str,
        *,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.review_url = review_url
        self._client = client or httpx.Client(timeout=timeout)

    def review(self, text: str) -> ReviewResult:
        try:
            response = self._client.post(self.review_url, json={"text": text})
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Moderation review failed: %s", exc)
            raise Unavailable("Moderation service unavailable") from exc

        return ReviewResult(
            approved=bool(payload.get("approved", False)),
            reason=payload.get("reason"),
        )

    def close(self) -> None:
        self._client.close()


def ensure_approved(reviewer: ContentReviewer, text: str) -> None:
    """Raise InvalidOperation when ``reviewer`` rejects ``text``."""
    result = reviewer.review(text)
    if not result.approved:
        reason = result.reason or "Content rejected by moderation"
        logger.info("Content rejected by moderation: %s", reason)
        raise InvalidOperation(reason, reason="moderation_rejected")


class _ReviewerSingleton:
    """Singleton wrapper for the configured reviewer."""

    _instance: ContentReviewer | None = None

    @classmethod
    def get_instance(cls) -> ContentReviewer:
        """Get or create the reviewer described by settings."""
        if cls._instance is None:
            if settings.moderation_active:
                cls._instance = HttpContentReviewer(
                    settings.moderation_review_url or "",
                    timeout=settings.moderation_timeout_seconds,
                )
            else:
                cls._instance = AllowAllReviewer()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached reviewer, closing its HTTP client if any."""
        if isinstance(cls._instance, HttpContentReviewer):
            cls._instance.close()
        cls._instance = None


def get_content_reviewer() -> ContentReviewer:
    """Return the process-wide reviewer built from settings."""
    return _ReviewerSingleton.get_instance()


def close_content_reviewer() -> None:
    """Release the reviewer's resources on shutdown."""
    _ReviewerSingleton.reset()
