"""Business logic services for the Vessel social service."""

from .follow_graph import FollowGraph
from .identity import IdentityStore
from .message_requests import MessageRequestWorkflow
from .moderation import AllowAllReviewer, HttpContentReviewer
from .notifications import NotificationFanout
from .threads import ThreadStore

__all__ = [
    "FollowGraph",
    "IdentityStore",
    "MessageRequestWorkflow",
    "AllowAllReviewer",
    "HttpContentReviewer",
    "NotificationFanout",
    "ThreadStore",
]
