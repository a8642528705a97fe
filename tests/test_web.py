"""Tests for web/app.py and web/routes/api.py."""

import pytest
from notifications.provider import NotificationProvider
from web.app import create_app


@pytest.fixture
def provider(connection, session):
    return NotificationProvider(connection, session, toast_duration=10.0, grace_period=5.0)


@pytest.fixture
def client(provider):
    return create_app(provider=provider).test_client()


class TestHealth:
    async def test_health(self):
        client = create_app().test_client()
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert await resp.get_json() == {"status": "ok"}


class TestNoProvider:
    async def test_api_unavailable(self):
        client = create_app().test_client()
        resp = await client.get("/api/notifications")
        assert resp.status_code == 503


class TestGetNotifications:
    async def test_snapshot(self, client, provider, notification_factory):
        provider.set_initial_notifications([notification_factory(1, "warning")])
        provider.add_notification(notification_factory(2, "critical"))

        resp = await client.get("/api/notifications")
        assert resp.status_code == 200
        body = await resp.get_json()
        assert [n["id"] for n in body["notifications"]] == ["2", "1"]
        assert [t["id"] for t in body["toasts"]] == ["2"]
        assert body["toasts"][0]["toastId"].startswith("toast-2-")
        assert body["counts"] == {"total": 2, "critical": 1, "high": 0, "warning": 1}
        assert body["isConnected"] is False
        assert body["status"] == "Offline"

    async def test_sorted_by_severity(self, client, provider, notification_factory):
        provider.set_initial_notifications([
            notification_factory("w", "warning"),
            notification_factory("c", "critical"),
            notification_factory("h", "high"),
        ])
        resp = await client.get("/api/notifications?sorted=1")
        body = await resp.get_json()
        assert [n["id"] for n in body["notifications"]] == ["c", "h", "w"]


class TestCommands:
    async def test_fetch_requested(self, client):
        resp = await client.post("/api/notifications/fetch")
        assert resp.status_code == 202

    async def test_mark_read(self, client, provider, connector):
        await provider.connection.connect("jwt-token")
        resp = await client.post("/api/notifications/expired-shelf-1/read")
        assert resp.status_code == 202
        assert (await resp.get_json()) == {"id": "expired-shelf-1"}
        await provider.connection.disconnect()

    async def test_clear(self, client, provider, notification_factory):
        provider.set_initial_notifications([notification_factory(1)])
        resp = await client.post("/api/notifications/clear")
        assert resp.status_code == 204
        assert provider.notifications == []

    async def test_dismiss_toast(self, client, provider, notification_factory):
        provider.add_notification(notification_factory(3, "high"))
        toast_id = provider.toasts.toasts[0].toast_id
        resp = await client.delete(f"/api/toasts/{toast_id}")
        assert resp.status_code == 204
        assert provider.toasts.toasts == []


class TestGrouped:
    async def test_groups_by_severity(self, client, provider, notification_factory):
        provider.set_initial_notifications([
            notification_factory("w", "warning"),
            notification_factory("c", "critical"),
            notification_factory("i", "info"),
            notification_factory("c2", "critical"),
        ])
        resp = await client.get("/api/notifications?sorted=1&grouped=1")
        body = await resp.get_json()
        assert body["groups"] == {"critical": ["c", "c2"], "high": [], "warning": ["w"]}
        assert [n["id"] for n in body["notifications"]] == ["c", "c2", "w", "i"]

    async def test_groups_absent_by_default(self, client):
        body = await (await client.get("/api/notifications")).get_json()
        assert "groups" not in body
