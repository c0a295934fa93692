# mypy: ignore-errors
# tests/services/test_threads.py
"""Tests for the thread store and message log."""

import threading
from datetime import timedelta

import pytest
from sqlalchemy.orm import Session

from vessel_social.core.errors import Forbidden, InvalidOperation, NotFound
from vessel_social.db.session import Base, build_engine
from vessel_social.db.time import utcnow
from vessel_social.models import Message, Thread, ThreadParticipant, User
from vessel_social.services.moderation import AllowAllReviewer
from vessel_social.services.threads import ThreadStore, clean_content


def test_find_or_create_thread_is_order_insensitive(threads, db_session, alice, bob) -> None:
    first = threads.find_or_create_thread([alice.id, bob.id])
    second = threads.find_or_create_thread([bob.id, alice.id])

    assert first.id == second.id
    assert first.participant_ids == {alice.id, bob.id}
    assert db_session.query(Thread).count() == 1
    assert db_session.query(ThreadParticipant).count() == 2


def test_find_or_create_thread_requires_two_distinct_users(threads, alice, bob, carol) -> None:
    with pytest.raises(InvalidOperation):
        threads.find_or_create_thread([alice.id, alice.id])
    with pytest.raises(InvalidOperation):
        threads.find_or_create_thread([alice.id, bob.id, carol.id])


def test_find_or_create_thread_unknown_user(threads, alice) -> None:
    with pytest.raises(NotFound):
        threads.find_or_create_thread([alice.id, "ghost"])


def test_concurrent_thread_creation_yields_one_thread(tmp_path) -> None:
    """Racing creators on a file database all get the same thread."""
    engine = build_engine(
        f"sqlite:///{tmp_path / 'threads.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    with Session(engine) as setup:
        first = User(handle="racer_one", display_name="Racer One")
        second = User(handle="racer_two", display_name="Racer Two")
        setup.add_all([first, second])
        setup.commit()
        pair = [first.id, second.id]

    workers = 8
    barrier = threading.Barrier(workers)
    thread_ids: list[int] = []
    errors: list[Exception] = []
    lock = threading.Lock()

    def create() -> None:
        session = Session(engine)
        try:
            barrier.wait()
            thread = ThreadStore(session, reviewer=AllowAllReviewer()).find_or_create_thread(pair)
            with lock:
                thread_ids.append(thread.id)
        except Exception as exc:  # collected for the assertion below
            with lock:
                errors.append(exc)
        finally:
            session.close()

    try:
        runners = [threading.Thread(target=create) for _ in range(workers)]
        for runner in runners:
            runner.start()
        for runner in runners:
            runner.join()

        assert errors == []
        assert len(thread_ids) == workers
        assert len(set(thread_ids)) == 1
        with Session(engine) as check:
            assert check.query(Thread).count() == 1
            assert check.query(ThreadParticipant).count() == 2
    finally:
        engine.dispose()


def test_post_message_by_participant(threads, alice, bob) -> None:
    thread = threads.find_or_create_thread([alice.id, bob.id])

    message = threads.post_message(thread.id, alice.id, "  hello bob  ")

    assert message.content == "hello bob"
    assert message.sender_id == alice.id
    assert threads.get_thread(thread.id, bob.id).last_message.id == message.id


def test_post_message_by_outsider_is_forbidden(threads, db_session, alice, bob, carol) -> None:
    thread = threads.find_or_create_thread([alice.id, bob.id])

    with pytest.raises(Forbidden):
        threads.post_message(thread.id, carol.id, "let me in")
    assert db_session.query(Message).count() == 0


def test_post_message_unknown_thread(threads, alice) -> None:
    with pytest.raises(NotFound):
        threads.post_message(999_999, alice.id, "anyone?")


def test_post_message_rejects_blank_content(threads, alice, bob) -> None:
    thread = threads.find_or_create_thread([alice.id, bob.id])

    with pytest.raises(InvalidOperation) as excinfo:
        threads.post_message(thread.id, alice.id, "   \n\t ")
    assert excinfo.value.reason == "empty_content"


def test_clean_content_limits_code_points() -> None:
    assert clean_content("é" * 5, max_length=5) == "é" * 5
    with pytest.raises(InvalidOperation) as excinfo:
        clean_content("x" * 6, max_length=5)
    assert excinfo.value.reason == "content_too_long"


def test_post_message_rejected_by_moderation(threads, reviewer, db_session, alice, bob) -> None:
    thread = threads.find_or_create_thread([alice.id, bob.id])
    reviewer.blocked.add("spam")

    with pytest.raises(InvalidOperation) as excinfo:
        threads.post_message(thread.id, alice.id, "buy spam now")
    assert excinfo.value.reason == "moderation_rejected"
    assert db_session.query(Message).count() == 0


def test_list_messages_pages_newest_first_without_overlap(threads, alice, bob) -> None:
    """Pagination is stable even when every message shares one timestamp."""
    thread = threads.find_or_create_thread([alice.id, bob.id])
    stamp = utcnow()
    posted = [
        threads.append_message(thread, alice.id, f"message {index}", created_at=stamp)
        for index in range(5)
    ]

    first_page = threads.list_messages(thread.id, bob.id, limit=2, offset=0)
    second_page = threads.list_messages(thread.id, bob.id, limit=2, offset=2)
    third_page = threads.list_messages(thread.id, bob.id, limit=2, offset=4)

    seen = [m.id for m in first_page + second_page + third_page]
    assert seen == [m.id for m in reversed(posted)]
    assert len(set(seen)) == 5


def test_list_messages_requires_participant(threads, alice, bob, carol) -> None:
    thread = threads.find_or_create_thread([alice.id, bob.id])
    with pytest.raises(Forbidden):
        threads.list_messages(thread.id, carol.id)


def test_start_thread_direct_requires_mutual_follow(threads, graph, db_session, alice, bob) -> None:
    graph.follow(alice.id, bob.id)

    with pytest.raises(Forbidden) as excinfo:
        threads.start_thread_direct(alice.id, "bob", "hi")
    assert excinfo.value.reason == "not_mutual"
    assert db_session.query(Thread).count() == 0


def test_start_thread_direct_reuses_existing_thread(threads, mutual, db_session, alice, bob) -> None:
    mutual(alice, bob)

    view, first = threads.start_thread_direct(alice.id, "@Bob", "hi bob")
    again, second = threads.start_thread_direct(bob.id, "alice", "hi alice")

    assert view.thread.id == again.thread.id
    assert db_session.query(Thread).count() == 1
    assert again.last_message.id == second.id
    assert {user.id for user in again.participants} == {alice.id, bob.id}
    assert first.id != second.id


def test_start_thread_direct_to_self_is_invalid(threads, alice) -> None:
    with pytest.raises(InvalidOperation):
        threads.start_thread_direct(alice.id, "alice", "note to self")


def test_list_threads_orders_by_latest_activity(threads, db_session, alice, bob, carol) -> None:
    with_bob = threads.find_or_create_thread([alice.id, bob.id])
    with_carol = threads.find_or_create_thread([alice.id, carol.id])
    now = utcnow()
    threads.append_message(with_carol, carol.id, "older", created_at=now - timedelta(minutes=5))
    with_carol.updated_at = now - timedelta(minutes=5)
    threads.append_message(with_bob, bob.id, "newer", created_at=now)
    with_bob.updated_at = now
    db_session.flush()

    views = threads.list_threads_for(alice.id)

    assert [view.thread.id for view in views] == [with_bob.id, with_carol.id]
    assert views[0].last_message.content == "newer"
    assert views[1].last_message.content == "older"
    assert [view.thread.id for view in threads.list_threads_for(carol.id)] == [with_carol.id]


def test_get_thread_for_outsider_is_forbidden(threads, alice, bob, carol) -> None:
    thread = threads.find_or_create_thread([alice.id, bob.id])

    assert threads.get_thread(thread.id, bob.id).last_message is None
    with pytest.raises(Forbidden):
        threads.get_thread(thread.id, carol.id)
