"""Unit tests for subscription plan date arithmetic."""

from datetime import UTC, datetime

import pytest

from core.plans import add_months, calculate_end_date, duration_days, plan_months


@pytest.mark.parametrize(
    "plan, expected",
    [("monthly", 1), ("quarterly", 3), ("yearly", 12), ("fortnightly", 1)],
)
def test_plan_months(plan, expected):
    assert plan_months(plan) == expected


def test_add_months_simple():
    start = datetime(2025, 3, 15, 9, 30, tzinfo=UTC)
    assert add_months(start, 1) == datetime(2025, 4, 15, 9, 30, tzinfo=UTC)


def test_add_months_rolls_year():
    assert add_months(datetime(2025, 11, 10), 3) == datetime(2026, 2, 10)


def test_month_end_clamps():
    assert add_months(datetime(2025, 1, 31), 1) == datetime(2025, 2, 28)
    assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)
    assert add_months(datetime(2025, 8, 31), 1) == datetime(2025, 9, 30)


def test_leap_day_yearly():
    assert calculate_end_date(datetime(2024, 2, 29), "yearly") == datetime(2025, 2, 28)


def test_quarterly_end_date():
    assert calculate_end_date(datetime(2025, 11, 30), "quarterly") == datetime(2026, 2, 28)


def test_unknown_plan_bills_monthly():
    assert calculate_end_date(datetime(2025, 5, 1), "weekly") == datetime(2025, 6, 1)


def test_duration_days():
    start = datetime(2025, 1, 1)
    assert duration_days(start, calculate_end_date(start, "monthly")) == 31
    assert duration_days(start, calculate_end_date(start, "yearly")) == 365
