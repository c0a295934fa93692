# src/vessel_social/api/v1/endpoints/notifications.py
"""Notification inbox endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from vessel_social.core.settings import settings
from vessel_social.schemas import NotificationResponse, UnreadCount

from ..dependencies import CurrentUserDep, IdentityDep, NotificationsDep
from ..serializers import to_notification_out

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
def list_notifications(
    current_user: CurrentUserDep,
    notifications: NotificationsDep,
    identity: IdentityDep,
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
) -> list[NotificationResponse]:
    """Return the caller's notifications, newest first."""
    items = notifications.list(current_user.id, limit, offset)
    actors = identity.summaries(item.actor_id for item in items)
    return [
        to_notification_out(item, actors[item.actor_id])
        for item in items
        if item.actor_id in actors
    ]


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(current_user: CurrentUserDep, notifications: NotificationsDep) -> UnreadCount:
    return UnreadCount(unread=notifications.unread_count(current_user.id))


@router.post("/read-all", response_model=UnreadCount)
def mark_all_read(current_user: CurrentUserDep, notifications: NotificationsDep) -> UnreadCount:
    """Mark every notification read; returns the remaining unread count."""
    notifications.mark_all_read(current_user.id)
    return UnreadCount(unread=notifications.unread_count(current_user.id))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: int,
    current_user: CurrentUserDep,
    notifications: NotificationsDep,
    identity: IdentityDep,
) -> NotificationResponse:
    notification = notifications.mark_read(notification_id, current_user.id)
    return to_notification_out(notification, identity.resolve_by_id(notification.actor_id))


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def dismiss_notification(
    notification_id: int,
    current_user: CurrentUserDep,
    notifications: NotificationsDep,
) -> None:
    """Dismiss one of the caller's notifications; unknown ids succeed silently."""
    notifications.dismiss(notification_id, current_user.id)
