"""Conversions from ORM rows and service projections to API schemas."""

from __future__ import annotations

from vessel_social.models import Message, Notification, User
from vessel_social.schemas import (
    MessageRequestResponse,
    MessageResponse,
    NotificationResponse,
    ThreadResponse,
    UserSummary,
)
from vessel_social.services.message_requests import RequestView
from vessel_social.services.threads import ThreadView


def to_user_summary(user: User) -> UserSummary:
    return UserSummary.model_validate(user)


def to_message_out(message: Message) -> MessageResponse:
    return MessageResponse.model_validate(message)


def to_thread_out(view: ThreadView) -> ThreadResponse:
    """Convert a thread projection into the inbox schema."""
    return ThreadResponse(
        id=view.thread.id,
        participants=[to_user_summary(user) for user in view.participants],
        last_message=to_message_out(view.last_message) if view.last_message else None,
        created_at=view.thread.created_at,
        updated_at=view.thread.updated_at,
    )


def to_request_out(view: RequestView) -> MessageRequestResponse:
    request = view.request
    return MessageRequestResponse(
        id=request.id,
        sender=to_user_summary(view.sender),
        recipient=to_user_summary(view.recipient),
        content=request.content,
        status=request.status,
        direction=view.direction,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


def to_notification_out(notification: Notification, actor: User) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        type=notification.type,
        actor=to_user_summary(actor),
        target_ref=notification.target_ref,
        is_read=notification.is_read,
        created_at=notification.created_at,
    )
