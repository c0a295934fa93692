"""Two-party conversation threads and their participant sets."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vessel_social.db.session import Base
from vessel_social.db.time import utcnow

if TYPE_CHECKING:
    from .message import Message


def normalize_pair(first: str, second: str) -> tuple[str, str]:
    """Return the unordered pair as ``(low, high)``."""
    return (first, second) if first < second else (second, first)


class Thread(Base):
    """Conversation container between exactly two users.

    ``user_low_id``/``user_high_id`` hold the participant pair in sorted order
    so the unique constraint guarantees at most one thread per unordered pair,
    even when two creators race.
    """

    __tablename__ = "message_threads"
    __table_args__ = (
        UniqueConstraint("user_low_id", "user_high_id", name="uq_message_threads_pair"),
        CheckConstraint("user_low_id < user_high_id", name="ck_message_threads_pair_order"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_low_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_high_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    # Bumped on every new message; drives inbox ordering.
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    participants: Mapped[list[ThreadParticipant]] = relationship(
        "ThreadParticipant",
        back_populates="thread",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    messages: Mapped[list[Message]] = relationship(
        "Message",
        back_populates="thread",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Message.id",
    )

    @property
    def participant_ids(self) -> set[str]:
        """Return the ids of everyone in the thread."""
        return {participant.user_id for participant in self.participants}


class ThreadParticipant(Base):
    """Membership row linking a user into a thread."""

    __tablename__ = "thread_participants"
    __table_args__ = (Index("ix_thread_participants_user_id", "user_id"),)

    thread_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("message_threads.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    thread: Mapped[Thread] = relationship("Thread", back_populates="participants")
