"""Notification Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from .user import UserSummary


class NotificationResponse(BaseModel):
    """Notification rendered with its actor."""

    id: int
    type: Literal["follow", "like", "comment", "request_accepted"]
    actor: UserSummary
    target_ref: str | None
    is_read: bool
    created_at: datetime


class UnreadCount(BaseModel):
    """Number of unread notifications for the caller."""

    unread: int
