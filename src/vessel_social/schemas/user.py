"""User and follow-graph Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class UserSummary(BaseModel):
    """Public projection of an identity store record."""

    id: str
    handle: str
    display_name: str
    photo_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class FollowCounts(BaseModel):
    """Follower/following totals for a profile."""

    followers: int = Field(..., ge=0)
    following: int = Field(..., ge=0)


class ProfileResponse(BaseModel):
    """User summary combined with follow counts."""

    user: UserSummary
    counts: FollowCounts


class FollowResult(BaseModel):
    """Outcome of a follow or unfollow call."""

    handle: str
    following: bool = Field(..., description="Caller follows the user after the call")
    changed: bool = Field(..., description="False when the call was a no-op")


class FollowStatus(BaseModel):
    """Relationship between the caller and another user."""

    handle: str
    is_following: bool
    is_followed_by: bool
    is_mutual: bool


class SuggestedUser(UserSummary):
    """Follow suggestion ranked by shared connections."""

    mutual_connections: int = 0
