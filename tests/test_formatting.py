"""Tests for utils/formatting.py: currency, percent, date and unit formatting."""

from datetime import datetime
from utils.formatting import format_currency, format_date, format_percent, format_units, truncate
from utils.time_utils import parse_iso_date


class TestFormatCurrency:
    def test_thousands_separator(self):
        assert format_currency(1250000) == "₫1.250.000"
        assert format_currency(999) == "₫999"

    def test_rounds_to_whole_dong(self):
        assert format_currency(1500.6) == "₫1.501"

    def test_numeric_string(self):
        assert format_currency("20000") == "₫20.000"

    def test_missing_or_invalid(self):
        assert format_currency(None) == "₫0"
        assert format_currency("") == "₫0"
        assert format_currency("abc") == "₫0"
        assert format_currency(float("inf")) == "₫0"


class TestFormatPercent:
    def test_one_decimal(self):
        assert format_percent(92.46) == "92.5%"
        assert format_percent(100) == "100.0%"

    def test_none(self):
        assert format_percent(None) == "N/A"

    def test_numeric_string(self):
        assert format_percent("92.5") == "92.5%"

    def test_non_numeric(self):
        assert format_percent("105.5%") == "N/A"
        assert format_percent({}) == "N/A"


class TestFormatDate:
    def test_iso_string(self):
        assert format_date("2026-10-15T00:00:00.000Z") == "15/10/2026"
        assert format_date("2026-01-05") == "05/01/2026"

    def test_datetime(self):
        assert format_date(datetime(2026, 3, 9)) == "09/03/2026"

    def test_unparseable(self):
        assert format_date(None) == "N/A"
        assert format_date("not a date") == "N/A"


class TestFormatUnits:
    def test_singular_and_plural(self):
        assert format_units(1) == "1 unit"
        assert format_units(12) == "12 units"
        assert format_units(0) == "0 units"
        assert format_units(None) == "0 units"


class TestTruncate:
    def test_short_text(self):
        assert truncate("Hello", 10) == "Hello"

    def test_long_text(self):
        result = truncate("A" * 20, 10)
        assert len(result) == 10
        assert result.endswith("...")


class TestParseIsoDate:
    def test_zulu_suffix(self):
        parsed = parse_iso_date("2026-10-19T08:00:00Z")
        assert parsed is not None
        assert parsed.utcoffset().total_seconds() == 0

    def test_invalid(self):
        assert parse_iso_date("") is None
        assert parse_iso_date("19/10/2026") is None
        assert parse_iso_date(20261019) is None
