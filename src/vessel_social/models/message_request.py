"""Message requests gating first contact between non-mutual users."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from vessel_social.db.session import Base
from vessel_social.db.time import utcnow

REQUEST_STATUS_PENDING = "pending"
REQUEST_STATUS_ACCEPTED = "accepted"
REQUEST_STATUS_DECLINED = "declined"


class MessageRequest(Base):
    """State machine: pending -> accepted | declined, decided once by the recipient."""

    __tablename__ = "message_requests"
    __table_args__ = (
        # One request per ordered pair, whatever its state.
        UniqueConstraint("sender_id", "recipient_id", name="uq_message_requests_pair"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'declined')",
            name="ck_message_requests_status",
        ),
        Index("ix_message_requests_recipient_id", "recipient_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sender_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    recipient_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=REQUEST_STATUS_PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    @property
    def is_pending(self) -> bool:
        """Return True while the recipient has not decided yet."""
        return self.status == REQUEST_STATUS_PENDING
