"""Number, currency and date formatting for notification details."""

from datetime import datetime
from utils.time_utils import parse_iso_date

CURRENCY_SYMBOL = "₫"


def format_currency(value: float | int | str | None) -> str:
    """Format an amount in dong with dot thousands separators (₫1.250.000)."""
    if value is None or value == "":
        return f"{CURRENCY_SYMBOL}0"
    try:
        amount = round(float(value))
    except (TypeError, ValueError, OverflowError):
        return f"{CURRENCY_SYMBOL}0"
    return f"{CURRENCY_SYMBOL}{amount:,}".replace(",", ".")


def format_percent(value: float | int | str | None, decimals: int = 1) -> str:
    """Format a number as a percentage. Non-numeric input yields 'N/A'."""
    if value is None or value == "":
        return "N/A"
    try:
        ratio = float(value)
    except (TypeError, ValueError):
        return "N/A"
    return f"{ratio:.{decimals}f}%"


def format_date(value: str | datetime | None) -> str:
    """Format a date as DD/MM/YYYY. Unparseable input yields 'N/A'."""
    date = value if isinstance(value, datetime) else parse_iso_date(value)
    if date is None:
        return "N/A"
    return date.strftime("%d/%m/%Y")


def format_units(quantity: int | float | None) -> str:
    if quantity is None:
        return "0 units"
    return f"{quantity} unit" if quantity == 1 else f"{quantity} units"


def truncate(text: str, max_length: int = 1024) -> str:
    """Truncate text to max_length, adding ellipsis if needed."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."
