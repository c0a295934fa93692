# mypy: ignore-errors
# tests/v1/test_notifications.py
"""Tests for notification endpoints."""

from fastapi import status


def _followed_by(client, auth_headers, target, *followers) -> None:
    for follower in followers:
        client.post(f"/api/v1/follows/{target.handle}", headers=auth_headers(follower))


def test_unread_count_and_mark_all_read(client, alice, bob, carol, auth_headers) -> None:
    _followed_by(client, auth_headers, alice, bob, carol)

    before = client.get("/api/v1/notifications/unread-count", headers=auth_headers(alice))
    cleared = client.post("/api/v1/notifications/read-all", headers=auth_headers(alice))

    assert before.json() == {"unread": 2}
    assert cleared.json() == {"unread": 0}
    items = client.get("/api/v1/notifications", headers=auth_headers(alice)).json()
    assert all(item["is_read"] for item in items)


def test_mark_single_notification_read(client, alice, bob, auth_headers) -> None:
    _followed_by(client, auth_headers, alice, bob)
    notification_id = client.get("/api/v1/notifications", headers=auth_headers(alice)).json()[0]["id"]

    response = client.post(f"/api/v1/notifications/{notification_id}/read", headers=auth_headers(alice))
    foreign = client.post(f"/api/v1/notifications/{notification_id}/read", headers=auth_headers(bob))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_read"] is True
    assert response.json()["actor"]["handle"] == "bob"
    assert foreign.status_code == status.HTTP_404_NOT_FOUND


def test_dismiss_notification(client, alice, bob, auth_headers) -> None:
    _followed_by(client, auth_headers, alice, bob)
    notification_id = client.get("/api/v1/notifications", headers=auth_headers(alice)).json()[0]["id"]

    foreign = client.delete(f"/api/v1/notifications/{notification_id}", headers=auth_headers(bob))
    still_there = client.get("/api/v1/notifications", headers=auth_headers(alice)).json()
    own = client.delete(f"/api/v1/notifications/{notification_id}", headers=auth_headers(alice))
    again = client.delete(f"/api/v1/notifications/{notification_id}", headers=auth_headers(alice))

    assert foreign.status_code == status.HTTP_204_NO_CONTENT
    assert [item["id"] for item in still_there] == [notification_id]
    assert own.status_code == status.HTTP_204_NO_CONTENT
    assert again.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/v1/notifications", headers=auth_headers(alice)).json() == []
