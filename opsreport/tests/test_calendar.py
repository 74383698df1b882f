"""
Tests for period boundaries and date sequences.

Covers:
- parse_ymd: strict "YYYY-MM-DD" parsing into local calendar dates
- date_range: inclusive ranges across month ends, leap days and DST changes
- last_week_range: Monday-Friday of the previous ISO week, including Sundays
- last_month_range / period_for: previous month, January rollover, labels
"""

from datetime import date

import pytest

from opsreport.core.errors import InvalidRangeError
from opsreport.models.enums import ReportKind
from opsreport.services.calendar import (
    date_range,
    format_date,
    last_month_range,
    last_week_range,
    parse_ymd,
    period_for,
    shift_date,
)


class TestParseAndFormat:

    def test_parse_ymd_builds_local_date(self) -> None:
        assert parse_ymd("2024-03-10") == date(2024, 3, 10)

    def test_parse_ymd_passes_dates_through(self) -> None:
        value = date(2026, 1, 31)
        assert parse_ymd(value) is value

    @pytest.mark.parametrize("value", ["2024/03/10", "2024-13-01", "2024-02-30", "abc", ""])
    def test_parse_ymd_rejects_malformed_values(self, value: str) -> None:
        with pytest.raises(InvalidRangeError):
            parse_ymd(value)

    def test_format_date_offsets_from_today(self) -> None:
        assert format_date(-1, today=date(2026, 3, 1)) == "2026-02-28"
        assert format_date(0, today=date(2026, 3, 1)) == "2026-03-01"

    def test_shift_date_crosses_year_end(self) -> None:
        assert shift_date("2025-12-31", 1) == "2026-01-01"
        assert shift_date("2026-01-05", -7) == "2025-12-29"


class TestDateRange:

    def test_single_day(self) -> None:
        assert date_range("2026-10-16", "2026-10-16") == ["2026-10-16"]

    def test_crosses_month_end(self) -> None:
        assert date_range("2024-03-30", "2024-04-02") == [
            "2024-03-30", "2024-03-31", "2024-04-01", "2024-04-02",
        ]

    def test_includes_leap_day(self) -> None:
        assert date_range("2024-02-28", "2024-03-01") == [
            "2024-02-28", "2024-02-29", "2024-03-01",
        ]

    def test_non_leap_february(self) -> None:
        assert date_range("2023-02-27", "2023-03-01") == [
            "2023-02-27", "2023-02-28", "2023-03-01",
        ]

    def test_dst_transition_has_no_gaps_or_duplicates(self) -> None:
        days = date_range("2024-11-01", "2024-11-05")
        assert len(days) == 5
        assert len(set(days)) == 5

    def test_length_matches_day_difference(self) -> None:
        days = date_range("2026-01-01", "2026-12-31")
        assert len(days) == 365
        assert days[0] == "2026-01-01"
        assert days[-1] == "2026-12-31"

    def test_start_after_end_raises(self) -> None:
        with pytest.raises(InvalidRangeError):
            date_range("2026-10-17", "2026-10-16")


class TestLastWeekRange:

    @pytest.mark.parametrize(
        "today, expected",
        [
            # Monday
            (date(2026, 10, 19), ("2026-10-12", "2026-10-16")),
            # Wednesday
            (date(2026, 10, 21), ("2026-10-12", "2026-10-16")),
            # Saturday
            (date(2026, 10, 24), ("2026-10-12", "2026-10-16")),
            # Sunday belongs to the week that started the Monday before
            (date(2026, 10, 25), ("2026-10-12", "2026-10-16")),
        ],
    )
    def test_previous_iso_week(self, today: date, expected) -> None:
        assert last_week_range(today) == expected

    def test_week_spanning_year_end(self) -> None:
        assert last_week_range(date(2026, 1, 7)) == ("2025-12-29", "2026-01-02")

    def test_range_is_monday_to_friday(self) -> None:
        start, end = last_week_range(date(2026, 10, 22))
        assert parse_ymd(start).isoweekday() == 1
        assert parse_ymd(end).isoweekday() == 5


class TestLastMonthRange:

    def test_january_rolls_back_to_december(self) -> None:
        assert last_month_range(date(2026, 1, 15)) == (
            "2025-12-01", "2025-12-31", "dezembro de 2025",
        )

    def test_leap_february(self) -> None:
        start, end, label = last_month_range(date(2024, 3, 1))
        assert (start, end) == ("2024-02-01", "2024-02-29")
        assert label == "fevereiro de 2024"

    def test_thirty_day_month(self) -> None:
        assert last_month_range(date(2026, 10, 1))[:2] == ("2026-09-01", "2026-09-30")


class TestPeriodFor:

    def test_daily_period_is_previous_day(self) -> None:
        period = period_for(ReportKind.DAILY, today=date(2026, 3, 1))
        assert period.start == period.end == date(2026, 2, 28)
        assert period.is_single_day
        assert period.label == "2026-02-28"

    def test_weekly_period_label(self) -> None:
        period = period_for(ReportKind.WEEKLY, today=date(2026, 10, 24))
        assert period.label == "semana_2026-10-12_a_2026-10-16"
        assert period.description == "2026-10-12 até 2026-10-16"
        assert not period.is_single_day

    def test_monthly_period_label(self) -> None:
        period = period_for(ReportKind.MONTHLY, today=date(2026, 10, 1))
        assert period.start == date(2026, 9, 1)
        assert period.end == date(2026, 9, 30)
        assert period.label == "setembro de 2026"
        assert period.description == "setembro de 2026"

    def test_accepts_kind_value(self) -> None:
        assert period_for("weekly", today=date(2026, 10, 24)).kind == ReportKind.WEEKLY
