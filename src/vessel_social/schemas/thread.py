"""Thread and message Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .user import UserSummary


class MessageResponse(BaseModel):
    """Single message in a thread."""

    id: int
    thread_id: int
    sender_id: str
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ThreadResponse(BaseModel):
    """Inbox entry: participants plus the most recent message."""

    id: int
    participants: list[UserSummary]
    last_message: MessageResponse | None = None
    created_at: datetime
    updated_at: datetime


class MessageCreate(BaseModel):
    """Schema for posting into an existing thread."""

    content: str = Field(..., min_length=1)


class SendMessageRequest(BaseModel):
    """Send into a known thread, or start one with a mutual follower by handle."""

    thread_id: int | None = None
    recipient_handle: str | None = None
    content: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _require_target(self) -> "SendMessageRequest":
        if self.thread_id is None and not self.recipient_handle:
            raise ValueError("Either thread_id or recipient_handle is required")
        return self


class SendMessageResponse(BaseModel):
    """Message that was sent and the thread it landed in."""

    thread: ThreadResponse
    message: MessageResponse
