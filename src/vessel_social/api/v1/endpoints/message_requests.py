# src/vessel_social/api/v1/endpoints/message_requests.py
"""Message request endpoints: contact between users who are not mutual followers."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Query, status

from vessel_social.schemas import (
    MessageRequestCreate,
    MessageRequestDecision,
    MessageRequestDecisionResponse,
    MessageRequestResponse,
)

from ..dependencies import CurrentUserDep, RequestWorkflowDep
from ..serializers import to_request_out, to_thread_out

router = APIRouter(prefix="/messages/requests", tags=["message-requests"])


@router.get("", response_model=list[MessageRequestResponse])
def list_message_requests(
    current_user: CurrentUserDep,
    workflow: RequestWorkflowDep,
    status_filter: Literal["pending", "accepted", "declined"] | None = Query(None, alias="status"),
    direction: Literal["inbound", "outbound"] | None = None,
) -> list[MessageRequestResponse]:
    """List requests the caller sent or received, newest first."""
    views = workflow.list_for(current_user.id, status=status_filter, direction=direction)
    return [to_request_out(view) for view in views]


@router.post("", response_model=MessageRequestResponse, status_code=status.HTTP_201_CREATED)
def create_message_request(
    payload: MessageRequestCreate,
    current_user: CurrentUserDep,
    workflow: RequestWorkflowDep,
) -> MessageRequestResponse:
    """Ask another user for permission to start a conversation."""
    request = workflow.submit(current_user.id, payload.recipient_handle, payload.content)
    return to_request_out(workflow.get(request.id, current_user.id))


@router.get("/{request_id}", response_model=MessageRequestResponse)
def get_message_request(
    request_id: int,
    current_user: CurrentUserDep,
    workflow: RequestWorkflowDep,
) -> MessageRequestResponse:
    return to_request_out(workflow.get(request_id, current_user.id))


@router.post("/{request_id}/respond", response_model=MessageRequestDecisionResponse)
def respond_to_message_request(
    request_id: int,
    payload: MessageRequestDecision,
    current_user: CurrentUserDep,
    workflow: RequestWorkflowDep,
) -> MessageRequestDecisionResponse:
    """Accept or decline a pending request addressed to the caller.

    Accepting opens (or reuses) the thread between the two users and places
    the request's content in it as the first message.
    """
    outcome = workflow.respond(request_id, current_user.id, payload.action)
    return MessageRequestDecisionResponse(
        status=outcome.status,
        thread=to_thread_out(outcome.thread) if outcome.thread is not None else None,
    )
