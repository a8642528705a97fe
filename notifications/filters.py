"""Ordering and grouping of notifications for display."""

from collections.abc import Iterable
from config.constants import COUNTED_SEVERITIES, DEFAULT_SEVERITY_RANK, SEVERITY_ORDER
from notifications.types import Notification


def severity_rank(notification: Notification) -> int:
    return SEVERITY_ORDER.get(notification.severity, DEFAULT_SEVERITY_RANK)


def sort_by_severity(notifications: Iterable[Notification]) -> list[Notification]:
    """Highest severity first; ties keep their newest-first order."""
    return sorted(notifications, key=severity_rank)


def group_by_severity(notifications: Iterable[Notification]) -> dict[str, list[Notification]]:
    """Split into the counted severities. Other severities are left out."""
    groups: dict[str, list[Notification]] = {s.value: [] for s in COUNTED_SEVERITIES}
    for notification in notifications:
        if notification.severity in groups:
            groups[notification.severity].append(notification)
    return groups
