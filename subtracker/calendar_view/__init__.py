"""Calendar view package."""

from subtracker.calendar_view.month import (
    DAYS,
    MONTHS,
    CalendarMonth,
    RenewalMarker,
    build_calendar,
    build_month,
    days_in_month,
    first_weekday,
    month_grid,
    months_between,
)

__all__ = [
    "DAYS",
    "MONTHS",
    "CalendarMonth",
    "RenewalMarker",
    "build_calendar",
    "build_month",
    "days_in_month",
    "first_weekday",
    "month_grid",
    "months_between",
]
