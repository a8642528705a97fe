"""Presentation payloads for the bell dropdown and toast stack."""

from typing import Any
from notifications.types import Notification, Toast
from config.constants import CREDIT_TYPE_PREFIX, NotificationType, Severity
from utils.formatting import format_currency, format_date, format_percent, format_units, truncate

# Icon and colour per severity; anything unrecognised renders as info
SEVERITY_STYLES: dict[str, tuple[str, str]] = {
    Severity.CRITICAL.value: ("alert-circle", "red"),
    Severity.HIGH.value: ("alert-triangle", "orange"),
    Severity.WARNING.value: ("clock", "amber"),
}
DEFAULT_STYLE = ("info", "blue")
CREDIT_ICON = "dollar-sign"

DETAIL_SEPARATOR = " • "


def is_credit_alert(notification: Notification) -> bool:
    return notification.type.startswith(CREDIT_TYPE_PREFIX)


def severity_style(notification: Notification) -> tuple[str, str]:
    """Return ``(icon, colour)`` for a notification."""
    icon, color = SEVERITY_STYLES.get(notification.severity, DEFAULT_STYLE)
    if is_credit_alert(notification):
        icon = CREDIT_ICON
    return icon, color


def format_details(notification: Notification) -> str | None:
    """One summary line of the type-specific fields, or None for unknown types."""
    formatters = {
        NotificationType.EXPIRED_ON_SHELF.value: _format_expired,
        NotificationType.EXPIRED_IN_WAREHOUSE.value: _format_expired,
        NotificationType.EXPIRING_SOON.value: _format_expiring,
        NotificationType.LOW_STOCK.value: _format_low_stock,
    }
    if is_credit_alert(notification):
        return _format_credit(notification)
    formatter = formatters.get(notification.type)
    return formatter(notification) if formatter else None


def format_notification(notification: Notification) -> dict[str, Any]:
    """Payload for one dropdown entry."""
    icon, color = severity_style(notification)
    return {
        **notification.to_payload(),
        "title": truncate(str(notification.title), 256),
        "message": truncate(str(notification.message), 1024),
        "icon": icon,
        "color": color,
        "details": format_details(notification),
    }


def format_toast(toast: Toast) -> dict[str, Any]:
    return {**format_notification(toast.notification), "toastId": toast.toast_id}


def _format_credit(notification: Notification) -> str:
    data = notification.data
    return DETAIL_SEPARATOR.join([
        str(data.get("supplierCode", "")),
        f"Debt: {format_currency(data.get('currentDebt'))}",
        f"Limit: {format_currency(data.get('creditLimit'))}",
        format_percent(data.get("creditUtilization")),
    ])


def _format_expired(notification: Notification) -> str:
    data = notification.data
    return DETAIL_SEPARATOR.join([
        f"Expired: {format_date(data.get('expiryDate'))}",
        format_units(data.get("quantity")),
    ])


def _format_expiring(notification: Notification) -> str:
    data = notification.data
    return DETAIL_SEPARATOR.join([
        f"Expires: {format_date(data.get('expiryDate'))}",
        f"{data.get('daysUntilExpiry', '?')} days left",
        format_units(data.get("quantity")),
    ])


def _format_low_stock(notification: Notification) -> str:
    data = notification.data
    return DETAIL_SEPARATOR.join([
        str(data.get("batchCode", "")),
        f"{format_units(data.get('quantity'))} remaining",
    ])
