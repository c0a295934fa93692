"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .message_request import (
    MessageRequestCreate,
    MessageRequestDecision,
    MessageRequestDecisionResponse,
    MessageRequestResponse,
)
from .notification import NotificationResponse, UnreadCount
from .thread import (
    MessageCreate,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
    ThreadResponse,
)
from .user import (
    FollowCounts,
    FollowResult,
    FollowStatus,
    ProfileResponse,
    SuggestedUser,
    UserSummary,
)

__all__ = [
    "MessageRequestCreate", "MessageRequestDecision",
    "MessageRequestDecisionResponse", "MessageRequestResponse",
    "NotificationResponse", "UnreadCount",
    "MessageCreate", "MessageResponse", "SendMessageRequest",
    "SendMessageResponse", "ThreadResponse",
    "FollowCounts", "FollowResult", "FollowStatus", "ProfileResponse",
    "SuggestedUser", "UserSummary",
]
