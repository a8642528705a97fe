"""Transient toast alerts with auto-expiry and duplicate suppression."""

import asyncio
from collections.abc import Callable
import structlog
from config.constants import TOAST_DEDUP_GRACE, TOAST_DURATION
from notifications.types import Notification, Toast

log = structlog.get_logger(__name__)


class ToastQueue:
    """Active toasts, keyed by arrival rather than by notification identity.

    A notification id stays in the shown set until ``grace_period`` seconds
    after its toast auto-expires, so a redelivery inside that window does not
    toast again. Explicit dismissal does not shorten the window.
    """

    def __init__(
        self,
        duration: float = TOAST_DURATION,
        grace_period: float = TOAST_DEDUP_GRACE,
    ) -> None:
        self.duration = duration
        self.grace_period = grace_period
        self._toasts: list[Toast] = []
        self._shown_ids: set[str] = set()
        self._listeners: list[Callable[[], None]] = []

    @property
    def toasts(self) -> list[Toast]:
        return list(self._toasts)

    def is_suppressed(self, notification_id: str) -> bool:
        return notification_id in self._shown_ids

    def add_toast(self, notification: Notification) -> Toast | None:
        """Show a toast for a notification unless its id was shown recently."""
        if notification.id in self._shown_ids:
            log.debug("toast_suppressed", notification_id=notification.id)
            return None

        self._shown_ids.add(notification.id)
        toast = Toast.for_notification(notification)
        self._toasts.append(toast)

        loop = asyncio.get_running_loop()
        loop.call_later(self.duration, self._expire, toast.toast_id, notification.id)

        log.debug("toast_added", toast_id=toast.toast_id, severity=notification.severity)
        self._notify()
        return toast

    def remove_toast(self, toast_id: str) -> None:
        """Dismiss a toast early. The de-dup window is left untouched."""
        remaining = [t for t in self._toasts if t.toast_id != toast_id]
        if len(remaining) != len(self._toasts):
            self._toasts = remaining
            self._notify()

    def clear(self) -> None:
        if self._toasts:
            self._toasts = []
            self._notify()

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _expire(self, toast_id: str, notification_id: str) -> None:
        # Timers outlive teardown; both steps are no-ops on cleared state
        self.remove_toast(toast_id)
        loop = asyncio.get_running_loop()
        loop.call_later(self.grace_period, self._shown_ids.discard, notification_id)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                log.error("toast_listener_error", error=str(e))
