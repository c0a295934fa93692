"""Message request Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from .thread import ThreadResponse
from .user import UserSummary


class MessageRequestCreate(BaseModel):
    """Schema for asking a non-mutual user to start a conversation."""

    recipient_handle: str = Field(..., min_length=1, description="Handle of the recipient, '@' optional")
    content: str = Field(..., min_length=1, description="Opening message")


class MessageRequestDecision(BaseModel):
    """Recipient's answer to a pending request."""

    action: Literal["accept", "decline"]


class MessageRequestResponse(BaseModel):
    """Message request as seen by either party."""

    id: int
    sender: UserSummary
    recipient: UserSummary
    content: str
    status: Literal["pending", "accepted", "declined"]
    direction: Literal["inbound", "outbound"]
    created_at: datetime
    updated_at: datetime


class MessageRequestDecisionResponse(BaseModel):
    """Result of responding to a request; ``thread`` is set on accept."""

    status: Literal["accepted", "declined"]
    thread: ThreadResponse | None = None
