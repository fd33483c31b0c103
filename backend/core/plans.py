"""
Subscription plan intervals.

Plans are billed over whole calendar months. The plan name doubles as the
key used to look up a newspaper's price tier.
"""

import calendar
from datetime import datetime

PLAN_MONTHS = {
    "monthly": 1,
    "quarterly": 3,
    "yearly": 12,
}

DEFAULT_PLAN = "monthly"


def plan_months(plan: str) -> int:
    """Number of months covered by ``plan``; unknown plans count as monthly."""
    return PLAN_MONTHS.get(plan, PLAN_MONTHS[DEFAULT_PLAN])


def add_months(start: datetime, months: int) -> datetime:
    """Shift ``start`` forward by calendar months.

    Days past the end of the target month clamp to its last day, so
    January 31 plus one month is February 28 (or 29).
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def calculate_end_date(start: datetime, plan: str) -> datetime:
    return add_months(start, plan_months(plan))


def duration_days(start: datetime, end: datetime) -> int:
    return (end - start).days
