# src/vessel_social/api/v1/endpoints/threads.py
"""Direct message thread endpoints for the Vessel API."""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from vessel_social.core.settings import settings
from vessel_social.schemas import (
    MessageCreate,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
    ThreadResponse,
)

from ..dependencies import CurrentUserDep, ThreadStoreDep
from ..serializers import to_message_out, to_thread_out

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/threads", response_model=list[ThreadResponse])
def list_threads(
    current_user: CurrentUserDep,
    threads: ThreadStoreDep,
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
) -> list[ThreadResponse]:
    """Return the caller's inbox, most recently active thread first."""
    return [to_thread_out(view) for view in threads.list_threads_for(current_user.id, limit, offset)]


@router.get("/threads/{thread_id}", response_model=ThreadResponse)
def get_thread(
    thread_id: int,
    current_user: CurrentUserDep,
    threads: ThreadStoreDep,
) -> ThreadResponse:
    return to_thread_out(threads.get_thread(thread_id, current_user.id))


@router.get("/threads/{thread_id}/messages", response_model=list[MessageResponse])
def list_thread_messages(
    thread_id: int,
    current_user: CurrentUserDep,
    threads: ThreadStoreDep,
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    offset: int = Query(0, ge=0),
) -> list[MessageResponse]:
    """Return a page of messages, newest first."""
    messages = threads.list_messages(thread_id, current_user.id, limit, offset)
    return [to_message_out(message) for message in messages]


@router.post(
    "/threads/{thread_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
def post_thread_message(
    thread_id: int,
    payload: MessageCreate,
    current_user: CurrentUserDep,
    threads: ThreadStoreDep,
) -> MessageResponse:
    message = threads.post_message(thread_id, current_user.id, payload.content)
    return to_message_out(message)


@router.post("/send", response_model=SendMessageResponse, status_code=status.HTTP_201_CREATED)
def send_message(
    payload: SendMessageRequest,
    current_user: CurrentUserDep,
    threads: ThreadStoreDep,
) -> SendMessageResponse:
    """Send into an existing thread, or open one with a mutual follower.

    Users who do not follow each other must use a message request first.
    """
    if payload.thread_id is not None:
        message = threads.post_message(payload.thread_id, current_user.id, payload.content)
        view = threads.get_thread(payload.thread_id, current_user.id)
    else:
        view, message = threads.start_thread_direct(
            current_user.id, payload.recipient_handle, payload.content
        )
    return SendMessageResponse(thread=to_thread_out(view), message=to_message_out(message))
