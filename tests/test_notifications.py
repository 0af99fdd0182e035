from datetime import datetime, timedelta

import pytest
from starlette.websockets import WebSocketDisconnect

from havenhouse.core.config import settings
from havenhouse.routers import notifications
from havenhouse.schemas.notification import NotificationCreate
from havenhouse.services.notification_feed import SqlNotificationStore
from havenhouse.services.notification_service import NotificationService

URL = "/api/v1/notifications"
BASE = datetime(2024, 2, 1, 9, 0)


@pytest.fixture
def three_notifications(make_notification):
    return [
        make_notification(title="Oldest", created_at=BASE),
        make_notification(title="Middle", created_at=BASE + timedelta(minutes=1), is_read=True),
        make_notification(title="Newest", created_at=BASE + timedelta(minutes=2)),
    ]


def test_list_newest_first(staff_client, three_notifications):
    body = staff_client.get(URL).json()
    assert [n["title"] for n in body["notifications"]] == ["Newest", "Middle", "Oldest"]
    assert body["unread_count"] == 2


def test_unread_count_matches_listed_rows(staff_client, make_notification):
    for minute in range(settings.notification_feed_limit + 1):
        make_notification(title=f"Alert {minute}", created_at=BASE + timedelta(minutes=minute))

    body = staff_client.get(URL).json()
    assert len(body["notifications"]) == settings.notification_feed_limit
    assert body["unread_count"] == settings.notification_feed_limit
    assert body["notifications"][-1]["title"] == "Alert 1"


def test_mark_read(staff_client, three_notifications):
    oldest = three_notifications[0]
    response = staff_client.patch(f"{URL}/{oldest.id}/read")
    assert response.status_code == 200
    assert response.json()["is_read"] is True
    assert staff_client.patch(f"{URL}/{oldest.id}/read").status_code == 200
    assert staff_client.get(URL).json()["unread_count"] == 1
    assert staff_client.patch(f"{URL}/missing/read").status_code == 404


def test_mark_all_read(staff_client, three_notifications):
    assert staff_client.post(f"{URL}/read-all").json() == {"updated": 2}
    assert staff_client.post(f"{URL}/read-all").json() == {"updated": 0}
    assert staff_client.get(URL).json()["unread_count"] == 0


def test_delete(staff_client, three_notifications):
    newest = three_notifications[2]
    assert staff_client.delete(f"{URL}/{newest.id}").status_code == 204
    assert staff_client.delete(f"{URL}/{newest.id}").status_code == 404
    body = staff_client.get(URL).json()
    assert [n["title"] for n in body["notifications"]] == ["Middle", "Oldest"]
    assert body["unread_count"] == 1


def test_requires_staff(client):
    assert client.get(URL).status_code == 401


class TestNotificationSocket:

    def test_rejects_anonymous_connections(self, client):
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(f"{URL}/ws"):
                pass

    def test_snapshot_and_commands(self, staff_client, three_notifications):
        oldest = three_notifications[0]
        with staff_client.websocket_connect(f"{URL}/ws") as websocket:
            snapshot = websocket.receive_json()
            assert snapshot["type"] == "snapshot"
            assert snapshot["unread_count"] == 2

            websocket.send_json({"action": "mark_read", "id": oldest.id})
            # The store write and its change event may each produce a snapshot
            snapshot = websocket.receive_json()
            while snapshot["unread_count"] != 1:
                snapshot = websocket.receive_json()
            assert snapshot["type"] == "snapshot"

            websocket.send_json(["not", "an", "object"])
            message = websocket.receive_json()
            while message["type"] == "snapshot":
                message = websocket.receive_json()
            assert message == {"type": "error", "message": "Notification commands must be JSON objects"}

    def test_insert_committed_during_initial_load_is_delivered(self, staff_client, session_factory, monkeypatch):
        class RacingStore(SqlNotificationStore):
            def fetch_recent(self, limit):
                items = super().fetch_recent(limit)
                db = self.session_factory()
                try:
                    NotificationService.create_notification(
                        db, NotificationCreate(title="Payment overdue", message="Rent is late", type="payment_overdue")
                    )
                finally:
                    db.close()
                return items

        monkeypatch.setattr(notifications, "SqlNotificationStore", RacingStore)
        with staff_client.websocket_connect(f"{URL}/ws") as websocket:
            snapshot = websocket.receive_json()
            assert snapshot["unread_count"] == 0

            snapshot = websocket.receive_json()
            assert snapshot["type"] == "snapshot"
            assert snapshot["unread_count"] == 1
            assert [n["title"] for n in snapshot["notifications"]] == ["Payment overdue"]

    def test_pushes_new_notifications(self, staff_client, session_factory):
        with staff_client.websocket_connect(f"{URL}/ws?alerts=true") as websocket:
            assert websocket.receive_json()["unread_count"] == 0

            db = session_factory()
            try:
                NotificationService.create_notification(
                    db, NotificationCreate(title="New application received", message="Jamie applied", type="new_application")
                )
            finally:
                db.close()

            messages = {}
            for _ in range(2):
                message = websocket.receive_json()
                messages[message["type"]] = message
            assert messages["alert"] == {"type": "alert", "title": "New application received", "message": "Jamie applied"}
            assert messages["snapshot"]["unread_count"] == 1
            assert messages["snapshot"]["notifications"][0]["title"] == "New application received"
