# mypy: ignore-errors
# tests/services/test_notifications.py
"""Tests for notification fan-out and the notification inbox."""

from datetime import timedelta

import pytest

from vessel_social.core.errors import InvalidOperation, NotFound
from vessel_social.db.time import utcnow
from vessel_social.models import Notification


def test_emit_skips_self_notifications(notifications, db_session, alice) -> None:
    assert notifications.emit(alice.id, alice.id, "like") is None
    assert db_session.query(Notification).count() == 0


def test_emit_rejects_unknown_type(notifications, alice, bob) -> None:
    with pytest.raises(InvalidOperation):
        notifications.emit(bob.id, alice.id, "poke")


def test_list_is_newest_first_and_paginated(notifications, db_session, alice, bob, carol) -> None:
    now = utcnow()
    oldest = notifications.emit(alice.id, bob.id, "like", target_ref="video:1")
    oldest.created_at = now - timedelta(minutes=2)
    middle = notifications.emit(alice.id, carol.id, "comment", target_ref="video:1")
    middle.created_at = now - timedelta(minutes=1)
    newest = notifications.emit(alice.id, bob.id, "follow")
    newest.created_at = now
    db_session.flush()

    first_page = notifications.list(alice.id, limit=2)
    second_page = notifications.list(alice.id, limit=2, offset=2)

    assert [n.id for n in first_page] == [newest.id, middle.id]
    assert [n.id for n in second_page] == [oldest.id]
    assert notifications.list(bob.id) == []


def test_dismiss_only_removes_own_notification(notifications, alice, bob) -> None:
    notification = notifications.emit(alice.id, bob.id, "follow")

    assert notifications.dismiss(notification.id, bob.id) is False
    assert len(notifications.list(alice.id)) == 1

    assert notifications.dismiss(notification.id, alice.id) is True
    assert notifications.list(alice.id) == []


def test_dismiss_missing_notification_is_silent(notifications, alice) -> None:
    assert notifications.dismiss(123456, alice.id) is False


def test_mark_read_and_unread_count(notifications, alice, bob, carol) -> None:
    first = notifications.emit(alice.id, bob.id, "follow")
    notifications.emit(alice.id, carol.id, "follow")
    assert notifications.unread_count(alice.id) == 2

    notifications.mark_read(first.id, alice.id)
    assert notifications.unread_count(alice.id) == 1

    assert notifications.mark_all_read(alice.id) == 1
    assert notifications.unread_count(alice.id) == 0


def test_mark_read_of_foreign_notification_is_not_found(notifications, alice, bob) -> None:
    notification = notifications.emit(alice.id, bob.id, "follow")

    with pytest.raises(NotFound):
        notifications.mark_read(notification.id, bob.id)
