"""
Calendar Month View

Lays out calendar months (Monday-first grid) and places the projected
renewals of each active subscription on their days. The calendar screen
shows many months at once, so every subscription is projected once over
the whole range and its renewals are bucketed by month.
"""

import calendar
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from subtracker.models.cadence import ProjectionWindow
from subtracker.models.subscription import Subscription
from subtracker.projection import project


DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTHS = list(calendar.month_name)[1:]


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def first_weekday(year: int, month: int) -> int:
    """Weekday of the 1st, Monday=0 ... Sunday=6."""
    return calendar.monthrange(year, month)[0]


def month_grid(year: int, month: int) -> list[Optional[int]]:
    """Day numbers preceded by None for the blank cells before the 1st."""
    return [None] * first_weekday(year, month) + list(range(1, days_in_month(year, month) + 1))


def months_between(start: date, end: date) -> list[tuple[int, int]]:
    """(year, month) pairs from start's month through end's month inclusive."""
    months = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        months.append((year, month))
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return months


class RenewalMarker(BaseModel):
    """One subscription renewing on a calendar day."""

    subscription_id: str
    name: str
    price: Decimal
    currency: str
    logo: Optional[str] = None


class CalendarMonth(BaseModel):
    """A month of the calendar with its renewals."""

    year: int
    month: int = Field(ge=1, le=12)
    grid: list[Optional[int]]
    days: dict[int, list[RenewalMarker]] = Field(default_factory=dict)
    total: Decimal = Decimal("0")
    upcoming_total: Decimal = Decimal("0")

    @property
    def title(self) -> str:
        return f"{MONTHS[self.month - 1]} {self.year}"

    def is_current(self, today: date) -> bool:
        return (self.year, self.month) == (today.year, today.month)


def build_calendar(
    subscriptions: Iterable[Subscription],
    start: date,
    end: date,
    today: date,
) -> list[CalendarMonth]:
    """
    Calendar months covering [start, end] with renewals placed on days.

    Renewals outside [start, end] are not shown even when they fall in a
    partially covered month. Cancelled subscriptions are skipped.
    """
    window = ProjectionWindow(start_date=start, end_date=end)
    placed: dict[tuple[int, int], dict[int, list[RenewalMarker]]] = defaultdict(
        lambda: defaultdict(list)
    )
    totals: dict[tuple[int, int], Decimal] = defaultdict(lambda: Decimal("0"))
    upcoming: dict[tuple[int, int], Decimal] = defaultdict(lambda: Decimal("0"))

    for subscription in subscriptions:
        if not subscription.is_active:
            continue
        marker = RenewalMarker(
            subscription_id=subscription.id,
            name=subscription.name,
            price=subscription.price,
            currency=subscription.currency,
            logo=subscription.logo,
        )
        for renewal in project(subscription.cadence, window):
            key = (renewal.year, renewal.month)
            placed[key][renewal.day].append(marker)
            totals[key] += subscription.price
            if renewal >= today:
                upcoming[key] += subscription.price

    return [
        CalendarMonth(
            year=year,
            month=month,
            grid=month_grid(year, month),
            days={day: markers for day, markers in sorted(placed[(year, month)].items())},
            total=totals[(year, month)],
            upcoming_total=upcoming[(year, month)],
        )
        for year, month in months_between(start, end)
    ]


def build_month(
    year: int,
    month: int,
    subscriptions: Iterable[Subscription],
    today: date,
) -> CalendarMonth:
    """A single whole calendar month."""
    window = ProjectionWindow.for_month(year, month)
    return build_calendar(subscriptions, window.start_date, window.end_date, today)[0]
