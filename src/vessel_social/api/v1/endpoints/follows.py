# src/vessel_social/api/v1/endpoints/follows.py
"""Follow graph endpoints for the Vessel API."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from vessel_social.core.settings import settings
from vessel_social.schemas import FollowResult, FollowStatus, SuggestedUser

from ..dependencies import CurrentUserDep, FollowGraphDep, IdentityDep

router = APIRouter(prefix="/follows", tags=["follows"])


@router.get("/suggestions", response_model=list[SuggestedUser])
def suggested_connections(
    current_user: CurrentUserDep,
    graph: FollowGraphDep,
    limit: int = Query(settings.suggestion_limit, ge=1, le=50),
) -> list[SuggestedUser]:
    """Suggest people followed by the users the caller follows."""
    return [
        SuggestedUser(
            id=suggestion.user.id,
            handle=suggestion.user.handle,
            display_name=suggestion.user.display_name,
            photo_url=suggestion.user.photo_url,
            mutual_connections=suggestion.mutual_connections,
        )
        for suggestion in graph.suggestions(current_user.id, limit=limit)
    ]


@router.post("/{handle}", response_model=FollowResult, status_code=status.HTTP_200_OK)
def follow_user(
    handle: str,
    current_user: CurrentUserDep,
    identity: IdentityDep,
    graph: FollowGraphDep,
) -> FollowResult:
    """Follow a user by handle. Repeating the call is a no-op."""
    target_id = identity.resolve_by_handle(handle)
    changed = graph.follow(current_user.id, target_id)
    return FollowResult(handle=identity.resolve_by_id(target_id).handle, following=True, changed=changed)


@router.delete("/{handle}", response_model=FollowResult)
def unfollow_user(
    handle: str,
    current_user: CurrentUserDep,
    identity: IdentityDep,
    graph: FollowGraphDep,
) -> FollowResult:
    """Unfollow a user by handle. Not following is not an error."""
    target = identity.resolve_by_id(identity.resolve_by_handle(handle))
    changed = graph.unfollow(current_user.id, target.id)
    return FollowResult(handle=target.handle, following=False, changed=changed)


@router.get("/{handle}/status", response_model=FollowStatus)
def follow_status(
    handle: str,
    current_user: CurrentUserDep,
    identity: IdentityDep,
    graph: FollowGraphDep,
) -> FollowStatus:
    """Describe the relationship between the caller and ``handle``."""
    target = identity.resolve_by_id(identity.resolve_by_handle(handle))
    is_following = graph.is_following(current_user.id, target.id)
    is_followed_by = graph.is_following(target.id, current_user.id)
    return FollowStatus(
        handle=target.handle,
        is_following=is_following,
        is_followed_by=is_followed_by,
        is_mutual=is_following and is_followed_by,
    )
