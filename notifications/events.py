"""Typed events decoded from the raw notification stream."""

from dataclasses import dataclass
from typing import Any
import structlog
from config.constants import StreamEvent
from notifications.types import Notification
from realtime.errors import UnknownEventError

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class NotificationReceived:
    notification: Notification


@dataclass(frozen=True)
class NotificationsLoaded:
    notifications: list[Notification]
    refresh: bool = False  # True for backend-driven batch replacement


@dataclass(frozen=True)
class ConnectionChanged:
    connected: bool


@dataclass(frozen=True)
class NotificationFailed:
    error: Any


StoreEvent = NotificationReceived | NotificationsLoaded | ConnectionChanged | NotificationFailed


def decode_event(name: str, payload: Any = None) -> StoreEvent:
    """Turn one raw stream event into its typed form.

    Raises UnknownEventError for names the store does not consume and
    ValueError for payloads of the wrong shape.
    """
    try:
        kind = StreamEvent(name)
    except ValueError:
        raise UnknownEventError(name) from None

    match kind:
        case StreamEvent.NOTIFICATION:
            return NotificationReceived(Notification.from_payload(payload))
        case StreamEvent.NOTIFICATION_INITIAL:
            return NotificationsLoaded(_decode_list(name, payload), refresh=False)
        case StreamEvent.NOTIFICATION_REFRESH:
            return NotificationsLoaded(_decode_list(name, payload), refresh=True)
        case StreamEvent.CONNECT:
            return ConnectionChanged(True)
        case StreamEvent.DISCONNECT:
            return ConnectionChanged(False)
        case StreamEvent.NOTIFICATION_ERROR:
            return NotificationFailed(payload)


def _decode_list(name: str, payload: Any) -> list[Notification]:
    if not isinstance(payload, list):
        raise ValueError(f"{name} payload must be a list, got {type(payload).__name__}")

    notifications = []
    for record in payload:
        try:
            notifications.append(Notification.from_payload(record))
        except ValueError as e:
            log.warning("notification_record_dropped", stream_event=name, error=str(e))
    return notifications
