"""
Test suite for transaction date/time extraction.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from receipt_engine.config import Settings
from receipt_engine.services.parser import ReceiptParser
from datetime import datetime, timedelta
import pytest


FIXED_NOW = datetime(2025, 6, 1, 9, 10, 11, 123000)


@pytest.fixture
def parser():
    return ReceiptParser(clock=lambda: FIXED_NOW)


class TestDatePatterns:
    """Each supported format, tried in priority order."""

    @pytest.mark.parametrize("line,expected", [
        ("01/15/2024", datetime(2024, 1, 15)),
        ("Order 2023-12-05", datetime(2023, 12, 5)),
        ("12/05/23", datetime(2023, 12, 5)),
        ("Mar 3, 2024", datetime(2024, 3, 3)),
        ("DATE: JAN 05, 2024", datetime(2024, 1, 5)),
        ("03 Mar 2024", datetime(2024, 3, 3)),
    ])
    def test_supported_formats(self, parser, line, expected):
        assert parser.extract_datetime([line]) == expected

    def test_month_first_wins_when_both_readings_valid(self, parser):
        assert parser.extract_datetime(["03/04/2024"]) == datetime(2024, 3, 4)

    def test_day_first_used_when_month_first_is_invalid(self, parser):
        assert parser.extract_datetime(["15/01/2024"]) == datetime(2024, 1, 15)

    def test_impossible_date_is_not_accepted(self, parser):
        assert parser.extract_datetime(["02/30/2024"]) == FIXED_NOW

    def test_first_matching_line_wins(self, parser):
        lines = ["01/02/2024", "2024-05-06 10:00"]
        assert parser.extract_datetime(lines) == datetime(2024, 1, 2)


class TestTimeComposition:
    """A time on the date's line replaces midnight."""

    def test_twenty_four_hour_time(self, parser):
        lines = ["Shop", "01/15/2024 14:05", "Total $10.00"]
        assert parser.extract_datetime(lines) == datetime(2024, 1, 15, 14, 5)

    @pytest.mark.parametrize("line,hour,minute", [
        ("01/15/2024 2:05 pm", 14, 5),
        ("01/15/2024 12:30 AM", 0, 30),
        ("Mar 3, 2024 7:45PM", 19, 45),
    ])
    def test_twelve_hour_time(self, parser, line, hour, minute):
        result = parser.extract_datetime([line])
        assert (result.hour, result.minute) == (hour, minute)

    def test_invalid_time_keeps_midnight(self, parser):
        assert parser.extract_datetime(["01/15/2024 25:99"]) == datetime(2024, 1, 15)

    def test_time_on_other_line_is_ignored(self, parser):
        lines = ["01/15/2024", "Time 18:20"]
        assert parser.extract_datetime(lines) == datetime(2024, 1, 15)


class TestFallback:
    """Without a date the extractor still returns a datetime."""

    def test_time_only_uses_today(self, parser):
        lines = ["Shop", "Time 18:20"]
        assert parser.extract_datetime(lines) == datetime(2025, 6, 1, 18, 20)

    def test_nothing_found_returns_now(self, parser):
        assert parser.extract_datetime(["Shop", "Total $1.00"]) == FIXED_NOW

    def test_default_clock_is_wall_clock(self):
        result = ReceiptParser().extract_datetime(["no date here"])
        assert result is not None
        assert abs(datetime.now() - result) < timedelta(seconds=5)

    def test_date_after_scan_window_is_ignored(self, parser):
        lines = [f"Line {n}" for n in range(15)] + ["01/15/2024"]
        assert parser.extract_datetime(lines) == FIXED_NOW

    def test_scan_window_is_configurable(self):
        parser = ReceiptParser(config=Settings(DATE_SCAN_LINES=20), clock=lambda: FIXED_NOW)
        lines = [f"Line {n}" for n in range(15)] + ["01/15/2024"]
        assert parser.extract_datetime(lines) == datetime(2024, 1, 15)


class TestLocaleIndependence:
    """Month names and AM/PM are mapped by hand, not through the C locale."""

    def test_no_locale_dependent_directives(self, parser):
        for spec in parser.date_patterns + parser.time_patterns:
            assert '%b' not in spec.parse_format
            assert '%p' not in spec.parse_format

    def test_unknown_month_abbreviation_falls_back(self, parser):
        assert parser.extract_datetime(["Foo 12, 2024"]) == FIXED_NOW
        assert parser.extract_datetime(["12 Foo 2024"]) == FIXED_NOW

    def test_month_abbreviation_with_dot(self, parser):
        assert parser.extract_datetime(["Sep. 9, 2024 12:15 PM"]) == datetime(2024, 9, 9, 12, 15)
