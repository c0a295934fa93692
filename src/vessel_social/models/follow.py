"""Directed follow edges between users."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from vessel_social.db.session import Base
from vessel_social.db.time import utcnow


class FollowEdge(Base):
    """``follower_id`` follows ``followee_id``.

    The composite primary key makes a duplicate follow impossible; the check
    constraint rejects self-edges at the store level as well.
    """

    __tablename__ = "user_follows"
    __table_args__ = (
        CheckConstraint("follower_id <> followee_id", name="ck_user_follows_no_self"),
        Index("ix_user_follows_followee_id", "followee_id"),
    )

    follower_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    followee_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
