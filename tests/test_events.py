"""Tests for notifications/events.py: typed decoding of stream events."""

import pytest
from notifications.events import (
    ConnectionChanged,
    NotificationFailed,
    NotificationReceived,
    NotificationsLoaded,
    decode_event,
)
from realtime.errors import UnknownEventError


class TestDecodeEvent:
    def test_notification(self):
        event = decode_event("notification", {"id": "low-stock-1", "severity": "warning"})
        assert isinstance(event, NotificationReceived)
        assert event.notification.id == "low-stock-1"

    def test_initial_is_not_refresh(self):
        event = decode_event("notification:initial", [{"id": 1, "severity": "warning"}])
        assert event == NotificationsLoaded(event.notifications, refresh=False)
        assert [n.id for n in event.notifications] == ["1"]

    def test_refresh(self):
        event = decode_event("notification:refresh", [])
        assert isinstance(event, NotificationsLoaded)
        assert event.refresh is True
        assert event.notifications == []

    def test_lifecycle(self):
        assert decode_event("connect") == ConnectionChanged(True)
        assert decode_event("disconnect", "transport closed") == ConnectionChanged(False)

    def test_error(self):
        assert decode_event("notification:error", {"message": "boom"}) == NotificationFailed({"message": "boom"})

    def test_unknown_name(self):
        with pytest.raises(UnknownEventError) as exc_info:
            decode_event("notification:inventory:expired", {})
        assert exc_info.value.name == "notification:inventory:expired"

    def test_list_payload_required(self):
        with pytest.raises(ValueError):
            decode_event("notification:initial", {"id": 1})

    def test_bad_records_dropped_from_list(self):
        event = decode_event("notification:initial", [{"id": 1}, {"severity": "critical"}, "junk"])
        assert [n.id for n in event.notifications] == ["1"]

    def test_bad_single_record_raises(self):
        with pytest.raises(ValueError):
            decode_event("notification", {"severity": "critical"})
