"""Notification fan-out and inbox queries."""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from vessel_social.core.errors import InvalidOperation, NotFound
from vessel_social.db.session import unit_of_work
from vessel_social.models import Notification
from vessel_social.models.notification import NOTIFICATION_TYPES

logger = logging.getLogger(__name__)


class NotificationFanout:
    """Append-only notification log with recipient-owned reads and dismissals.

    ``emit`` joins the caller's transaction and never commits, so a follow or
    an accepted request lands together with its notification or not at all.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def emit(
        self,
        recipient_id: str,
        actor_id: str,
        type_: str,
        target_ref: str | None = None,
    ) -> Notification | None:
        """Queue a notification; return None for self-notifications."""
        if recipient_id == actor_id:
            return None
        if type_ not in NOTIFICATION_TYPES:
            raise InvalidOperation(f"Unknown notification type: {type_}")

        notification = Notification(
            recipient_id=recipient_id,
            actor_id=actor_id,
            type=type_,
            target_ref=target_ref,
            is_read=False,
        )
        self.db.add(notification)
        self.db.flush()
        logger.debug(
            "Queued %s notification %s for %s from %s",
            type_, notification.id, recipient_id, actor_id,
        )
        return notification

    def list(self, recipient_id: str, limit: int = 50, offset: int = 0) -> list[Notification]:
        """Return the recipient's notifications, newest first."""
        return (
            self.db.query(Notification)
            .filter(Notification.recipient_id == recipient_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def unread_count(self, recipient_id: str) -> int:
        """Return how many notifications the recipient has not read."""
        return self.db.query(func.count(Notification.id)).filter(
            Notification.recipient_id == recipient_id,
            Notification.is_read.is_(False),
        ).scalar() or 0

    def dismiss(self, notification_id: int, caller_id: str) -> bool:
        """Delete the caller's notification; a missing row is a silent success."""
        with unit_of_work(self.db):
            deleted = (
                self.db.query(Notification)
                .filter(
                    Notification.id == notification_id,
                    Notification.recipient_id == caller_id,
                )
                .delete(synchronize_session="fetch")
            )
        return bool(deleted)

    def mark_read(self, notification_id: int, caller_id: str) -> Notification:
        """Mark one of the caller's notifications as read."""
        notification = self.db.get(Notification, notification_id)
        # Someone else's notification is reported as missing, not forbidden.
        if notification is None or notification.recipient_id != caller_id:
            raise NotFound("Notification not found")
        with unit_of_work(self.db):
            notification.is_read = True
        return notification

    def mark_all_read(self, caller_id: str) -> int:
        """Mark every unread notification of the caller as read."""
        with unit_of_work(self.db):
            updated = (
                self.db.query(Notification)
                .filter(
                    Notification.recipient_id == caller_id,
                    Notification.is_read.is_(False),
                )
                .update({"is_read": True}, synchronize_session="fetch")
            )
        return updated
