"""Canonical notification collection with derived severity counts."""

from collections.abc import Callable, Iterable
import structlog
from notifications.events import (
    ConnectionChanged,
    NotificationFailed,
    NotificationReceived,
    NotificationsLoaded,
    StoreEvent,
)
from notifications.toasts import ToastQueue
from notifications.types import Notification, SeverityCounts

log = structlog.get_logger(__name__)


class NotificationStore:
    """Single source of truth for the notifications that currently apply.

    Ids are unique within the collection. Counts are recomputed from the
    collection after every mutation, so they always equal
    ``SeverityCounts.from_notifications(store.notifications)``.
    """

    def __init__(self, toasts: ToastQueue | None = None) -> None:
        self._toasts = toasts
        self._notifications: list[Notification] = []
        self._counts = SeverityCounts()
        self._connected = False
        self._listeners: list[Callable[[], None]] = []

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    @property
    def counts(self) -> SeverityCounts:
        return self._counts

    @property
    def is_connected(self) -> bool:
        return self._connected

    def get(self, notification_id: str) -> Notification | None:
        for notification in self._notifications:
            if notification.id == notification_id:
                return notification
        return None

    def set_initial_notifications(self, notifications: Iterable[Notification]) -> None:
        """Replace the whole collection with an authoritative list. No toasts."""
        seen: set[str] = set()
        replacement = []
        for notification in notifications:
            if notification.id in seen:
                continue
            seen.add(notification.id)
            replacement.append(notification)
        self._commit(replacement)

    def add_notification(self, notification: Notification) -> bool:
        """Prepend a new notification and toast it. Returns False for a known id."""
        if any(n.id == notification.id for n in self._notifications):
            log.debug("notification_duplicate", notification_id=notification.id)
            return False

        self._commit([notification, *self._notifications])
        if self._toasts is not None:
            self._toasts.add_toast(notification)
        return True

    def clear_notifications(self) -> None:
        self._commit([])

    def set_connected(self, connected: bool) -> None:
        if connected != self._connected:
            self._connected = connected
            self._notify()

    def apply(self, event: StoreEvent) -> None:
        """Apply one decoded stream event."""
        match event:
            case NotificationReceived(notification=notification):
                log.info("notification_received", notification_id=notification.id, severity=notification.severity)
                self.add_notification(notification)
            case NotificationsLoaded(notifications=notifications, refresh=refresh):
                log.info("notifications_loaded", count=len(notifications), refresh=refresh)
                self.set_initial_notifications(notifications)
            case ConnectionChanged(connected=connected):
                self.set_connected(connected)
            case NotificationFailed(error=error):
                log.error("notification_stream_error", error=error)

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, notifications: list[Notification]) -> None:
        self._notifications = notifications
        self._counts = SeverityCounts.from_notifications(notifications)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                log.error("store_listener_error", error=str(e))
