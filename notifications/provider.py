"""Session-scoped composition of stream, store and toasts."""

import asyncio
from collections.abc import Callable, Iterable
from typing import Any
import structlog
from auth.session import Session
from config.constants import StreamEvent
from config.settings import settings
from notifications.events import decode_event
from notifications.store import NotificationStore
from notifications.toasts import ToastQueue
from notifications.types import Notification
from realtime.connection import ConnectionManager
from realtime.errors import ConfigurationError, HandshakeRejected, StreamError, UnknownEventError
from utils.retry import sanitize_error

log = structlog.get_logger(__name__)

# Events the store consumes from the connection
_SUBSCRIBED_EVENTS = tuple(e.value for e in StreamEvent)

_STOP = object()


class NotificationProvider:
    """Owns the notification state for one authenticated session.

    Each stream event is forwarded, unchanged, into an internal queue by a
    handler registered once per event name in :meth:`start`. A single drain
    task decodes queued events and applies them to the store in arrival
    order, so the subscribed handlers never need to see current state.
    """

    def __init__(
        self,
        connection: ConnectionManager,
        session: Session,
        *,
        toast_duration: float | None = None,
        grace_period: float | None = None,
    ) -> None:
        self.connection = connection
        self.session = session
        self.toasts = ToastQueue(
            duration=settings.toast_duration if toast_duration is None else toast_duration,
            grace_period=settings.toast_dedup_grace if grace_period is None else grace_period,
        )
        self.store = NotificationStore(toasts=self.toasts)
        self._events: asyncio.Queue[tuple[str, Any] | object] = asyncio.Queue()
        self._handlers: dict[str, Callable[[Any], None]] = {}
        self._drain_task: asyncio.Task | None = None
        self._started = False
        # Bumped by stop() so a start still awaiting the network gives up
        self._generation = 0

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """Subscribe, start draining, connect and request the initial load.

        Sessions without a token or without the view-notifications permission
        get no connection and no error. Connection failures are logged and
        leave the provider running offline.
        """
        if self._started:
            return
        if not self.session.is_authenticated:
            log.info("notifications_skipped", reason="no_token")
            return
        if not self.session.can_view_notifications:
            log.info(
                "notifications_skipped",
                reason="missing_permission",
                user=self.session.username,
                permissions=sorted(self.session.permissions),
            )
            return

        self._started = True
        for name in _SUBSCRIBED_EVENTS:
            handler = self._forwarder(name)
            self._handlers[name] = handler
            self.connection.on(name, handler)
        self._drain_task = asyncio.create_task(self._drain())

        await self._initialize_connection()

    async def stop(self) -> None:
        """Tear down the session: unsubscribe, disconnect, clear state."""
        if not self._started:
            return
        self._started = False
        self._generation += 1

        for name, handler in self._handlers.items():
            self.connection.off(name, handler)
        self._handlers.clear()

        if self._drain_task is not None:
            self._events.put_nowait(_STOP)
            await self._drain_task
            self._drain_task = None

        await self.connection.disconnect()
        self.store.set_connected(False)
        self.store.clear_notifications()
        self.toasts.clear()
        log.info("notifications_stopped", user=self.session.username)

    async def flush(self) -> None:
        """Wait until every queued stream event has been applied."""
        await self._events.join()

    # ── State for UI collaborators ──

    @property
    def notifications(self) -> list[Notification]:
        return self.store.notifications

    @property
    def is_connected(self) -> bool:
        return self.store.is_connected

    def snapshot(self) -> dict[str, Any]:
        return {
            "notifications": [n.to_payload() for n in self.store.notifications],
            "toasts": [t.to_payload() for t in self.toasts.toasts],
            "counts": self.store.counts.to_dict(),
            "isConnected": self.store.is_connected,
        }

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Listen for any change to notifications, counts, toasts or connection."""
        unsubscribe_store = self.store.subscribe(listener)
        unsubscribe_toasts = self.toasts.subscribe(listener)

        def unsubscribe() -> None:
            unsubscribe_store()
            unsubscribe_toasts()

        return unsubscribe

    # ── Imperative entry points ──

    def add_notification(self, notification: Notification) -> bool:
        return self.store.add_notification(notification)

    def set_initial_notifications(self, notifications: Iterable[Notification]) -> None:
        self.store.set_initial_notifications(notifications)

    def remove_toast(self, toast_id: str) -> None:
        self.toasts.remove_toast(toast_id)

    def clear_notifications(self) -> None:
        self.store.clear_notifications()

    def fetch_notifications(self) -> None:
        self.connection.fetch_notifications()

    def mark_read(self, notification_id: str) -> None:
        self.connection.mark_notification_read(notification_id)

    # ── Internals ──

    def _forwarder(self, name: str) -> Callable[[Any], None]:
        def forward(payload: Any) -> None:
            self._events.put_nowait((name, payload))

        return forward

    async def _initialize_connection(self) -> None:
        generation = self._generation
        try:
            config = await self.connection.config_service.get_config()
            if generation != self._generation:
                log.info("notifications_start_aborted", user=self.session.username)
                return
            if not config.real_time_notifications:
                log.info("notifications_disabled_by_config")
                return
            await self.connection.connect(self.session.token)
        except HandshakeRejected as e:
            if e.permission_denied:
                log.warning("notifications_permission_denied", user=self.session.username, status=e.status)
            else:
                log.error("notifications_handshake_failed", status=e.status, error=sanitize_error(str(e)))
            return
        except ConfigurationError as e:
            log.error("notifications_config_failed", error=str(e))
            return
        except StreamError as e:
            log.error("notifications_connect_failed", error=sanitize_error(str(e)))
            return
        except Exception as e:
            log.error("notifications_init_failed", error=sanitize_error(str(e)))
            return

        if generation != self._generation:
            log.info("notifications_start_aborted", user=self.session.username)
            return
        self.store.set_connected(self.connection.is_connected())
        if self.connection.is_connected():
            self.connection.fetch_notifications()

    async def _drain(self) -> None:
        while True:
            item = await self._events.get()
            try:
                if item is _STOP:
                    return
                name, payload = item  # type: ignore[misc]
                self._apply(name, payload)
            finally:
                self._events.task_done()

    def _apply(self, name: str, payload: Any) -> None:
        try:
            event = decode_event(name, payload)
        except UnknownEventError as e:
            log.debug("stream_event_ignored", stream_event=e.name)
            return
        except ValueError as e:
            log.warning("stream_event_invalid", stream_event=name, error=str(e))
            return
        self.store.apply(event)
