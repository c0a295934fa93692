# mypy: ignore-errors
# tests/services/test_moderation.py
"""Tests for the moderation reviewer clients."""

import json

import httpx
import pytest

from vessel_social.core.errors import InvalidOperation, Unavailable
from vessel_social.services.moderation import (
    AllowAllReviewer,
    HttpContentReviewer,
    ensure_approved,
)

REVIEW_URL = "http://moderation.test/review"


def _reviewer(handler) -> HttpContentReviewer:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpContentReviewer(REVIEW_URL, client=client)


def test_allow_all_reviewer_approves_everything() -> None:
    assert AllowAllReviewer().review("anything at all").approved


def test_http_reviewer_posts_text_and_reads_verdict() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"approved": False, "reason": "harassment"})

    reviewer = _reviewer(handler)
    result = reviewer.review("you are awful")

    assert result.approved is False
    assert result.reason == "harassment"
    assert str(seen[0].url) == REVIEW_URL
    assert json.loads(seen[0].content) == {"text": "you are awful"}
    reviewer.close()


def test_http_reviewer_server_error_is_unavailable() -> None:
    reviewer = _reviewer(lambda request: httpx.Response(502))

    with pytest.raises(Unavailable):
        reviewer.review("hello")


def test_http_reviewer_bad_payload_is_unavailable() -> None:
    reviewer = _reviewer(lambda request: httpx.Response(200, content=b"not json"))

    with pytest.raises(Unavailable):
        reviewer.review("hello")


def test_http_reviewer_connection_error_is_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(Unavailable):
        _reviewer(handler).review("hello")


def test_ensure_approved_raises_on_rejection() -> None:
    reviewer = _reviewer(lambda request: httpx.Response(200, json={"approved": False, "reason": "spam"}))

    with pytest.raises(InvalidOperation) as excinfo:
        ensure_approved(reviewer, "spam spam")
    assert excinfo.value.reason == "moderation_rejected"
    assert excinfo.value.detail == "spam"
