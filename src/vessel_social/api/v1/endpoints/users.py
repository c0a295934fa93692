# src/vessel_social/api/v1/endpoints/users.py
"""Profile lookups and follow counts for the Vessel API."""

from __future__ import annotations

from fastapi import APIRouter, Query

from vessel_social.core.settings import settings
from vessel_social.schemas import FollowCounts, ProfileResponse, UserSummary

from ..dependencies import FollowGraphDep, IdentityDep
from ..serializers import to_user_summary

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{identifier}", response_model=ProfileResponse)
def get_profile(
    identifier: str,
    identity: IdentityDep,
    graph: FollowGraphDep,
) -> ProfileResponse:
    """Return a user's public summary and follow counts by handle or id."""
    user = identity.resolve_identifier(identifier)
    counts = graph.counts(user.id)
    return ProfileResponse(
        user=to_user_summary(user),
        counts=FollowCounts(followers=counts.followers, following=counts.following),
    )


@router.get("/{identifier}/stats", response_model=FollowCounts)
def get_follow_counts(
    identifier: str,
    identity: IdentityDep,
    graph: FollowGraphDep,
) -> FollowCounts:
    """Return follower and following totals."""
    user = identity.resolve_identifier(identifier)
    counts = graph.counts(user.id)
    return FollowCounts(followers=counts.followers, following=counts.following)


@router.get("/{identifier}/followers", response_model=list[UserSummary])
def list_followers(
    identifier: str,
    identity: IdentityDep,
    graph: FollowGraphDep,
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
) -> list[UserSummary]:
    """List the users following ``identifier``."""
    user = identity.resolve_identifier(identifier)
    return [to_user_summary(follower) for follower in graph.list_followers(user.id, limit, offset)]


@router.get("/{identifier}/following", response_model=list[UserSummary])
def list_following(
    identifier: str,
    identity: IdentityDep,
    graph: FollowGraphDep,
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
) -> list[UserSummary]:
    """List the users ``identifier`` follows."""
    user = identity.resolve_identifier(identifier)
    return [to_user_summary(followee) for followee in graph.list_following(user.id, limit, offset)]
