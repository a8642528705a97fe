"""Tests for notifications/types.py: Notification, Toast and SeverityCounts."""

import pytest
from notifications.types import Notification, SeverityCounts, Toast


class TestNotification:
    def test_from_payload_splits_core_and_extra_fields(self):
        notif = Notification.from_payload({
            "id": "expired-shelf-42",
            "type": "expired_on_shelf",
            "severity": "critical",
            "title": "Expired Batch on Shelf",
            "message": "B-001 - Milk has expired",
            "batchCode": "B-001",
            "quantity": 12,
            "expiryDate": "2026-10-01",
        })
        assert notif.id == "expired-shelf-42"
        assert notif.severity == "critical"
        assert notif.data == {"batchCode": "B-001", "quantity": 12, "expiryDate": "2026-10-01"}

    def test_numeric_id_is_stringified(self):
        notif = Notification.from_payload({"id": 1, "severity": "warning"})
        assert notif.id == "1"
        assert notif.type == ""

    def test_non_string_title_and_message_are_coerced(self):
        notif = Notification.from_payload({"id": 1, "title": 42, "message": 3.5})
        assert notif.title == "42"
        assert notif.message == "3.5"

    def test_missing_id_raises(self):
        with pytest.raises(ValueError):
            Notification.from_payload({"severity": "critical"})

    def test_non_dict_raises(self):
        with pytest.raises(ValueError):
            Notification.from_payload(["not", "a", "record"])

    def test_to_payload_round_trips_extra_fields(self):
        payload = {
            "id": "low-stock-7",
            "type": "low_stock",
            "severity": "warning",
            "title": "Low Stock Alert",
            "message": "running low",
            "quantity": 3,
            "timestamp": "2026-10-19T08:00:00Z",
        }
        assert Notification.from_payload(payload).to_payload() == payload


class TestToast:
    def test_toast_id_embeds_notification_id(self):
        notif = Notification(id="n1", type="low_stock", severity="warning")
        toast = Toast.for_notification(notif)
        assert toast.toast_id.startswith("toast-n1-")
        assert toast.to_payload()["toastId"] == toast.toast_id
        assert toast.to_payload()["id"] == "n1"


class TestSeverityCounts:
    def test_aggregates_by_severity(self, notification_factory):
        items = [
            notification_factory(1, "critical"),
            notification_factory(2, "high"),
            notification_factory(3, "warning"),
            notification_factory(4, "warning"),
        ]
        counts = SeverityCounts.from_notifications(items)
        assert counts.to_dict() == {"total": 4, "critical": 1, "high": 1, "warning": 2}

    def test_other_severities_only_count_toward_total(self, notification_factory):
        counts = SeverityCounts.from_notifications([notification_factory(1, "info"), notification_factory(2, "")])
        assert counts == SeverityCounts(total=2)

    def test_empty(self):
        assert SeverityCounts.from_notifications([]) == SeverityCounts()
