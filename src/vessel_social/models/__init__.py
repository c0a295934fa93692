"""SQLAlchemy models for the Vessel social service."""

from .follow import FollowEdge
from .message import Message
from .message_request import MessageRequest
from .notification import Notification
from .thread import Thread, ThreadParticipant
from .user import User

__all__ = [
    "FollowEdge",
    "Message",
    "MessageRequest",
    "Notification",
    "Thread", "ThreadParticipant",
    "User",
]
