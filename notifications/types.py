"""Notification types and data classes."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any
from config.constants import Severity
from utils.time_utils import epoch_millis

# Wire fields lifted onto the dataclass; everything else lands in ``data``
_CORE_FIELDS = ("id", "type", "severity", "title", "message", "timestamp")


@dataclass
class Notification:
    """A backend alert record. Only ``id`` and ``severity`` matter to the pipeline."""
    id: str
    type: str
    severity: str
    title: str = ""
    message: str = ""
    timestamp: str | None = None
    data: dict[str, Any] = field(default_factory=dict)  # type-specific fields, uninterpreted

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Notification":
        """Decode a wire record. Raises ValueError if it has no id."""
        if not isinstance(payload, dict):
            raise ValueError(f"Notification payload must be an object, got {type(payload).__name__}")
        raw_id = payload.get("id")
        if raw_id is None or raw_id == "":
            raise ValueError("Notification payload has no id")
        return cls(
            id=str(raw_id),
            type=str(payload.get("type") or ""),
            severity=str(payload.get("severity") or ""),
            title=str(payload.get("title") or ""),
            message=str(payload.get("message") or ""),
            timestamp=payload.get("timestamp"),
            data={k: v for k, v in payload.items() if k not in _CORE_FIELDS},
        )

    def to_payload(self) -> dict[str, Any]:
        payload = dict(self.data)
        payload.update(
            id=self.id,
            type=self.type,
            severity=self.severity,
            title=self.title,
            message=self.message,
        )
        if self.timestamp is not None:
            payload["timestamp"] = self.timestamp
        return payload


@dataclass
class Toast:
    """A transient presentation of a notification."""
    notification: Notification
    toast_id: str

    @classmethod
    def for_notification(cls, notification: Notification) -> "Toast":
        return cls(notification=notification, toast_id=f"toast-{notification.id}-{epoch_millis()}")

    def to_payload(self) -> dict[str, Any]:
        return {**self.notification.to_payload(), "toastId": self.toast_id}


@dataclass(frozen=True)
class SeverityCounts:
    """Running totals, always derived from a collection, never patched."""
    total: int = 0
    critical: int = 0
    high: int = 0
    warning: int = 0

    @classmethod
    def from_notifications(cls, notifications: Iterable[Notification]) -> "SeverityCounts":
        items = list(notifications)
        return cls(
            total=len(items),
            critical=sum(1 for n in items if n.severity == Severity.CRITICAL.value),
            high=sum(1 for n in items if n.severity == Severity.HIGH.value),
            warning=sum(1 for n in items if n.severity == Severity.WARNING.value),
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "critical": self.critical,
            "high": self.high,
            "warning": self.warning,
        }
