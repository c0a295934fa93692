"""Thread store and message log.

Both conversation entry points (direct messaging between mutual followers and
accepting a message request) go through ``find_or_create`` and
``append_message``. Those two primitives never commit; the public operations
wrap them in a single unit of work.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from vessel_social.core.errors import Forbidden, InvalidOperation, NotFound
from vessel_social.core.settings import settings
from vessel_social.db.session import unit_of_work
from vessel_social.db.time import utcnow
from vessel_social.models import Message, Thread, ThreadParticipant, User
from vessel_social.models.thread import normalize_pair
from vessel_social.services.follow_graph import FollowGraph
from vessel_social.services.identity import IdentityStore
from vessel_social.services.moderation import ContentReviewer, ensure_approved, get_content_reviewer

logger = logging.getLogger(__name__)


def clean_content(content: str, max_length: int | None = None) -> str:
    """Trim ``content`` and enforce the non-empty and length invariants.

    Length is counted in code points, which is what ``len`` measures on str.
    """
    limit = max_length if max_length is not None else settings.message_max_length
    text = (content or "").strip()
    if not text:
        raise InvalidOperation("Message content is required", reason="empty_content")
    if len(text) > limit:
        raise InvalidOperation(
            f"Message content exceeds {limit} characters",
            reason="content_too_long",
        )
    return text


@dataclass
class ThreadView:
    """Thread projected for an inbox: participants plus the latest message."""

    thread: Thread
    participants: list[User]
    last_message: Message | None


class ThreadStore:
    """Two-party threads with at most one thread per unordered pair."""

    def __init__(
        self,
        db: Session,
        *,
        identity: IdentityStore | None = None,
        graph: FollowGraph | None = None,
        reviewer: ContentReviewer | None = None,
    ) -> None:
        self.db = db
        self.identity = identity or IdentityStore(db)
        self.graph = graph or FollowGraph(db)
        self.reviewer = reviewer or get_content_reviewer()

    # -- primitives ---------------------------------------------------------

    def _find_by_pair(self, low_id: str, high_id: str) -> Thread | None:
        return (
            self.db.query(Thread)
            .filter(Thread.user_low_id == low_id, Thread.user_high_id == high_id)
            .first()
        )

    def find_or_create(self, first_id: str, second_id: str) -> Thread:
        """Return the pair's thread, inserting it (and its participants) if needed."""
        if first_id == second_id:
            raise InvalidOperation("A thread needs two distinct participants")
        low_id, high_id = normalize_pair(first_id, second_id)

        thread = self._find_by_pair(low_id, high_id)
        if thread is not None:
            return thread

        try:
            with self.db.begin_nested():
                thread = Thread(user_low_id=low_id, user_high_id=high_id)
                thread.participants = [
                    ThreadParticipant(user_id=low_id),
                    ThreadParticipant(user_id=high_id),
                ]
                self.db.add(thread)
                self.db.flush()
        except IntegrityError:
            # Another creator inserted the pair first; adopt its thread.
            existing = self._find_by_pair(low_id, high_id)
            if existing is None:
                raise
            logger.info("Thread for %s/%s created concurrently, reusing %s", low_id, high_id, existing.id)
            return existing

        logger.info("Created thread %s for %s/%s", thread.id, low_id, high_id)
        return thread

    def append_message(
        self,
        thread: Thread,
        sender_id: str,
        content: str,
        *,
        created_at: datetime | None = None,
    ) -> Message:
        """Add a message and bump the thread's activity time; the caller commits."""
        message = Message(thread_id=thread.id, sender_id=sender_id, content=content)
        if created_at is not None:
            message.created_at = created_at
        self.db.add(message)
        thread.updated_at = utcnow()
        self.db.flush()
        return message

    def _get_thread(self, thread_id: int) -> Thread:
        thread = self.db.get(Thread, thread_id)
        if thread is None:
            raise NotFound("Thread not found")
        return thread

    def _require_participant(self, thread: Thread, user_id: str) -> None:
        if user_id not in thread.participant_ids:
            raise Forbidden("You are not a participant in this thread")

    # -- operations ---------------------------------------------------------

    def find_or_create_thread(self, participant_ids: Iterable[str]) -> Thread:
        """Return the unique thread for exactly two users, creating it if absent."""
        ids = set(participant_ids)
        if len(ids) != 2:
            raise InvalidOperation("A thread needs exactly two distinct participants")
        for user_id in ids:
            self.identity.resolve_by_id(user_id)

        first_id, second_id = sorted(ids)
        with unit_of_work(self.db):
            thread = self.find_or_create(first_id, second_id)
        return thread

    def post_message(self, thread_id: int, sender_id: str, content: str) -> Message:
        """Append a message from a participant and bump the thread's activity time."""
        thread = self._get_thread(thread_id)
        self._require_participant(thread, sender_id)
        text = clean_content(content)
        ensure_approved(self.reviewer, text)

        with unit_of_work(self.db):
            message = self.append_message(thread, sender_id, text)

        logger.debug("User %s posted message %s in thread %s", sender_id, message.id, thread_id)
        return message

    def start_thread_direct(
        self,
        initiator_id: str,
        recipient_handle: str,
        first_message: str,
    ) -> tuple[ThreadView, Message]:
        """Open (or reuse) a thread with a mutual follower and post into it.

        Non-mutual contact must go through a message request instead.
        """
        recipient_id = self.identity.resolve_by_handle(recipient_handle)
        if recipient_id == initiator_id:
            raise InvalidOperation("You cannot message yourself")
        if not self.graph.is_mutual(initiator_id, recipient_id):
            raise Forbidden(
                "You can only message mutual followers directly; send a message request instead",
                reason="not_mutual",
            )
        text = clean_content(first_message)
        ensure_approved(self.reviewer, text)

        with unit_of_work(self.db):
            thread = self.find_or_create(initiator_id, recipient_id)
            message = self.append_message(thread, initiator_id, text)

        return self.build_views([thread])[0], message

    def get_thread(self, thread_id: int, caller_id: str) -> ThreadView:
        thread = self._get_thread(thread_id)
        self._require_participant(thread, caller_id)
        return self.build_views([thread])[0]

    def list_threads_for(self, user_id: str, limit: int = 50, offset: int = 0) -> list[ThreadView]:
        """Return the user's threads, most recently active first."""
        threads = (
            self.db.query(Thread)
            .join(ThreadParticipant, ThreadParticipant.thread_id == Thread.id)
            .filter(ThreadParticipant.user_id == user_id)
            .options(selectinload(Thread.participants))
            .order_by(Thread.updated_at.desc(), Thread.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return self.build_views(threads)

    def list_messages(
        self,
        thread_id: int,
        caller_id: str,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Message]:
        """Return a page of the thread's messages, newest first.

        Ordering is ``(created_at, id)`` descending so pages never overlap or
        skip rows when timestamps tie.
        """
        thread = self._get_thread(thread_id)
        self._require_participant(thread, caller_id)
        return (
            self.db.query(Message)
            .filter(Message.thread_id == thread_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    # -- projections --------------------------------------------------------

    def latest_messages(self, thread_ids: list[int]) -> dict[int, Message]:
        """Return the most recent message of each thread that has one."""
        if not thread_ids:
            return {}
        ranked = (
            select(
                Message.id.label("message_id"),
                func.row_number()
                .over(
                    partition_by=Message.thread_id,
                    order_by=(Message.created_at.desc(), Message.id.desc()),
                )
                .label("position"),
            )
            .where(Message.thread_id.in_(thread_ids))
            .subquery()
        )
        messages = (
            self.db.query(Message)
            .join(ranked, ranked.c.message_id == Message.id)
            .filter(ranked.c.position == 1)
            .all()
        )
        return {message.thread_id: message for message in messages}

    def build_views(self, threads: list[Thread]) -> list[ThreadView]:
        latest = self.latest_messages([thread.id for thread in threads])
        users = self.identity.summaries(
            user_id for thread in threads for user_id in thread.participant_ids
        )
        return [
            ThreadView(
                thread=thread,
                participants=[
                    users[user_id] for user_id in sorted(thread.participant_ids) if user_id in users
                ],
                last_message=latest.get(thread.id),
            )
            for thread in threads
        ]
