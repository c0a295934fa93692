"""Message request workflow gating first contact between non-mutual users.

A request is created ``pending`` and decided exactly once by its recipient.
Declining is terminal for the (sender, recipient) pair. Accepting turns the
request into a thread whose first message is the request's content, dated at
the moment the request was sent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import or_
from sqlalchemy.orm import Session

from vessel_social.core.errors import Conflict, Forbidden, InvalidOperation, NotFound
from vessel_social.db.session import unit_of_work
from vessel_social.db.time import utcnow
from vessel_social.models import MessageRequest, User
from vessel_social.models.message_request import (
    REQUEST_STATUS_ACCEPTED,
    REQUEST_STATUS_DECLINED,
    REQUEST_STATUS_PENDING,
)
from vessel_social.models.notification import NOTIFICATION_REQUEST_ACCEPTED
from vessel_social.services.follow_graph import FollowGraph
from vessel_social.services.identity import IdentityStore
from vessel_social.services.moderation import ContentReviewer, ensure_approved, get_content_reviewer
from vessel_social.services.notifications import NotificationFanout
from vessel_social.services.threads import ThreadStore, ThreadView, clean_content

logger = logging.getLogger(__name__)

DECISION_ACCEPT = "accept"
DECISION_DECLINE = "decline"

DIRECTION_INBOUND = "inbound"
DIRECTION_OUTBOUND = "outbound"

_EXISTING_REQUEST_CONFLICTS = {
    REQUEST_STATUS_PENDING: ("You already have a pending request with this user", "already_pending"),
    REQUEST_STATUS_DECLINED: ("This user has declined your previous request", "previously_declined"),
    REQUEST_STATUS_ACCEPTED: (
        "This user already accepted your request; continue in your thread",
        "already_accepted",
    ),
}


@dataclass
class RequestView:
    """Request with both parties resolved, as seen by ``viewer``."""

    request: MessageRequest
    sender: User
    recipient: User
    direction: str


@dataclass
class RequestOutcome:
    """Result of a decision; ``thread`` is set when the request was accepted."""

    request: MessageRequest
    thread: ThreadView | None = None

    @property
    def status(self) -> str:
        return self.request.status


class MessageRequestWorkflow:
    """Submit, decide and list message requests."""

    def __init__(
        self,
        db: Session,
        *,
        identity: IdentityStore | None = None,
        graph: FollowGraph | None = None,
        threads: ThreadStore | None = None,
        notifications: NotificationFanout | None = None,
        reviewer: ContentReviewer | None = None,
    ) -> None:
        self.db = db
        self.identity = identity or IdentityStore(db)
        self.notifications = notifications or NotificationFanout(db)
        self.graph = graph or FollowGraph(db, self.notifications)
        self.reviewer = reviewer or get_content_reviewer()
        self.threads = threads or ThreadStore(
            db,
            identity=self.identity,
            graph=self.graph,
            reviewer=self.reviewer,
        )

    def _find_pair_request(self, sender_id: str, recipient_id: str) -> MessageRequest | None:
        return (
            self.db.query(MessageRequest)
            .filter(
                MessageRequest.sender_id == sender_id,
                MessageRequest.recipient_id == recipient_id,
            )
            .first()
        )

    def submit(self, sender_id: str, recipient_handle: str, content: str) -> MessageRequest:
        """Ask ``recipient_handle`` to start a conversation with ``sender_id``.

        Raises:
            NotFound: the handle does not resolve.
            InvalidOperation: self-addressed, already mutual, or bad content.
            Conflict: a request for this exact pair already exists.
        """
        recipient_id = self.identity.resolve_by_handle(recipient_handle)
        if recipient_id == sender_id:
            raise InvalidOperation("You cannot send a message request to yourself")
        if self.graph.is_mutual(sender_id, recipient_id):
            raise InvalidOperation(
                "You can message this user directly",
                reason="mutual_followers",
            )

        existing = self._find_pair_request(sender_id, recipient_id)
        if existing is not None:
            detail, reason = _EXISTING_REQUEST_CONFLICTS[existing.status]
            raise Conflict(detail, reason=reason)

        text = clean_content(content)
        ensure_approved(self.reviewer, text)

        # A concurrent submit for the same pair trips the unique constraint.
        detail, reason = _EXISTING_REQUEST_CONFLICTS[REQUEST_STATUS_PENDING]
        with unit_of_work(self.db, on_conflict=Conflict(detail, reason=reason)):
            request = MessageRequest(
                sender_id=sender_id,
                recipient_id=recipient_id,
                content=text,
                status=REQUEST_STATUS_PENDING,
            )
            self.db.add(request)
            self.db.flush()

        logger.info("Message request %s submitted by %s to %s", request.id, sender_id, recipient_id)
        return request

    def respond(self, request_id: int, acting_user_id: str, decision: str) -> RequestOutcome:
        """Accept or decline a pending request addressed to ``acting_user_id``.

        Accepting runs as one transaction: the status flip, the thread
        find-or-create, the first message and the sender's notification land
        together or not at all.
        """
        request = self.db.get(MessageRequest, request_id)
        if request is None:
            raise NotFound("Message request not found")
        if request.recipient_id != acting_user_id:
            raise Forbidden("You can only respond to requests sent to you")
        if decision not in (DECISION_ACCEPT, DECISION_DECLINE):
            raise InvalidOperation(f"Unknown decision: {decision}")
        if not request.is_pending:
            raise InvalidOperation(
                "This request has already been responded to",
                reason="already_resolved",
            )

        new_status = REQUEST_STATUS_ACCEPTED if decision == DECISION_ACCEPT else REQUEST_STATUS_DECLINED
        thread = None
        with unit_of_work(self.db):
            self._transition(request, new_status)
            if new_status == REQUEST_STATUS_ACCEPTED:
                thread = self.threads.find_or_create(request.sender_id, request.recipient_id)
                self.threads.append_message(
                    thread,
                    request.sender_id,
                    request.content,
                    created_at=request.created_at,
                )
                self.notifications.emit(
                    request.sender_id,
                    request.recipient_id,
                    NOTIFICATION_REQUEST_ACCEPTED,
                    target_ref=f"thread:{thread.id}",
                )

        logger.info("Message request %s %s by %s", request.id, new_status, acting_user_id)
        if thread is None:
            return RequestOutcome(request=request)
        return RequestOutcome(request=request, thread=self.threads.build_views([thread])[0])

    def _transition(self, request: MessageRequest, new_status: str) -> None:
        """Move a pending request to ``new_status`` with a compare-and-set update.

        Two concurrent decisions cannot both succeed: the loser matches no
        pending row and its whole transaction is rolled back.
        """
        now = utcnow()
        updated = (
            self.db.query(MessageRequest)
            .filter(
                MessageRequest.id == request.id,
                MessageRequest.status == REQUEST_STATUS_PENDING,
            )
            .update({"status": new_status, "updated_at": now}, synchronize_session="fetch")
        )
        if updated != 1:
            raise InvalidOperation(
                "This request has already been responded to",
                reason="already_resolved",
            )

    def get(self, request_id: int, caller_id: str) -> RequestView:
        """Return a request visible to either of its parties."""
        request = self.db.get(MessageRequest, request_id)
        if request is None:
            raise NotFound("Message request not found")
        if caller_id not in (request.sender_id, request.recipient_id):
            raise Forbidden("You are not a party to this request")
        return self._build_views([request], caller_id)[0]

    def list_for(
        self,
        user_id: str,
        *,
        status: str | None = None,
        direction: str | None = None,
    ) -> list[RequestView]:
        """Return requests sent or received by ``user_id``, newest first."""
        query = self.db.query(MessageRequest)
        if direction == DIRECTION_INBOUND:
            query = query.filter(MessageRequest.recipient_id == user_id)
        elif direction == DIRECTION_OUTBOUND:
            query = query.filter(MessageRequest.sender_id == user_id)
        else:
            query = query.filter(
                or_(MessageRequest.sender_id == user_id, MessageRequest.recipient_id == user_id)
            )
        if status is not None:
            query = query.filter(MessageRequest.status == status)

        requests = query.order_by(MessageRequest.created_at.desc(), MessageRequest.id.desc()).all()
        return self._build_views(requests, user_id)

    def _build_views(self, requests: list[MessageRequest], viewer_id: str) -> list[RequestView]:
        users = self.identity.summaries(
            user_id for request in requests for user_id in (request.sender_id, request.recipient_id)
        )
        return [
            RequestView(
                request=request,
                sender=users[request.sender_id],
                recipient=users[request.recipient_id],
                direction=DIRECTION_OUTBOUND if request.sender_id == viewer_id else DIRECTION_INBOUND,
            )
            for request in requests
        ]
