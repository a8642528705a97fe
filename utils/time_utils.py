"""Timestamp helpers."""

import time
from datetime import datetime


def epoch_millis() -> int:
    """Milliseconds since the epoch, used to stamp toast ids."""
    return time.time_ns() // 1_000_000


def parse_iso_date(value: str | None) -> datetime | None:
    """Parse an ISO-8601 date or datetime string. Returns None if unparseable."""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return None
