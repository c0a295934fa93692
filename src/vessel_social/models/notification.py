"""Notifications fanned out to users by follow and messaging activity."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from vessel_social.db.session import Base
from vessel_social.db.time import utcnow

NOTIFICATION_FOLLOW = "follow"
NOTIFICATION_LIKE = "like"
NOTIFICATION_COMMENT = "comment"
NOTIFICATION_REQUEST_ACCEPTED = "request_accepted"

NOTIFICATION_TYPES = (
    NOTIFICATION_FOLLOW,
    NOTIFICATION_LIKE,
    NOTIFICATION_COMMENT,
    NOTIFICATION_REQUEST_ACCEPTED,
)


class Notification(Base):
    """Inbox entry telling ``recipient_id`` that ``actor_id`` did something."""

    __tablename__ = "notifications"
    __table_args__ = (
        CheckConstraint(
            "type IN ('follow', 'like', 'comment', 'request_accepted')",
            name="ck_notifications_type",
        ),
        CheckConstraint("recipient_id <> actor_id", name="ck_notifications_not_self"),
        Index("ix_notifications_recipient_created", "recipient_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipient_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    actor_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    # Opaque pointer to the subject, e.g. "thread:12" or a video id.
    target_ref: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
