"""Tests for the calendar month view."""

import pytest
from datetime import date
from decimal import Decimal

from subtracker.calendar_view import (
    DAYS,
    build_calendar,
    build_month,
    days_in_month,
    first_weekday,
    month_grid,
    months_between,
)
from subtracker.models.cadence import InvalidWindow
from subtracker.models.subscription import Subscription


TODAY = date(2025, 3, 15)


def make_subscription(sub_id, price, cycle, next_payment, is_active=True):
    return Subscription(
        id=sub_id,
        name=sub_id.title(),
        price=Decimal(price),
        billing_cycle=cycle,
        next_payment_date=next_payment,
        subscribed_date=date(2024, 1, 1),
        is_active=is_active,
    )


@pytest.fixture
def subscriptions():
    return [
        make_subscription("netflix", "100", "monthly", date(2025, 1, 10)),
        make_subscription("coffee", "10", "weekly", date(2025, 3, 3)),
        make_subscription("cancelled", "999", "monthly", date(2025, 3, 5), is_active=False),
    ]


class TestMonthLayout:
    """Grid helpers."""

    def test_days_in_month(self):
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2025, 2) == 28
        assert days_in_month(2025, 12) == 31

    def test_first_weekday_is_monday_based(self):
        """Test Monday=0 through Sunday=6."""
        assert DAYS[0] == "Mon"
        assert first_weekday(2025, 9) == 0  # Monday 1 September 2025
        assert first_weekday(2025, 6) == 6  # Sunday 1 June 2025

    def test_month_grid_pads_before_first(self):
        grid = month_grid(2025, 6)
        assert grid[:6] == [None] * 6
        assert grid[6] == 1
        assert grid[-1] == 30
        assert len(grid) == 36

    def test_months_between_crosses_year(self):
        assert months_between(date(2024, 11, 15), date(2025, 2, 1)) == [
            (2024, 11), (2024, 12), (2025, 1), (2025, 2),
        ]
        assert months_between(date(2025, 3, 1), date(2025, 3, 31)) == [(2025, 3)]


class TestBuildMonth:
    """Renewals placed on days."""

    def test_renewals_by_day(self, subscriptions):
        month = build_month(2025, 3, subscriptions, TODAY)

        assert month.title == "March 2025"
        assert month.is_current(TODAY)
        assert list(month.days) == [3, 10, 17, 24, 31]
        assert [m.subscription_id for m in month.days[10]] == ["netflix", "coffee"]
        assert month.total == Decimal("150")
        assert month.upcoming_total == Decimal("30")

    def test_cancelled_subscriptions_are_hidden(self, subscriptions):
        month = build_month(2025, 3, subscriptions, TODAY)
        ids = {m.subscription_id for markers in month.days.values() for m in markers}
        assert "cancelled" not in ids

    def test_empty_month(self):
        month = build_month(2025, 4, [], TODAY)
        assert month.days == {}
        assert month.total == Decimal("0")
        assert not month.is_current(TODAY)


class TestBuildCalendar:
    """Several months at once."""

    def test_range_clips_partial_months(self, subscriptions):
        months = build_calendar(subscriptions[:1], date(2025, 1, 15), date(2025, 3, 10), TODAY)

        assert [(m.year, m.month) for m in months] == [(2025, 1), (2025, 2), (2025, 3)]
        # Jan 10 is before the range start
        assert months[0].days == {}
        assert list(months[1].days) == [10]
        assert list(months[2].days) == [10]
        assert months[2].upcoming_total == Decimal("0")

    def test_month_end_renewals_land_on_last_day(self):
        rent = [make_subscription("rent", "1000", "monthly", date(2025, 1, 31))]
        months = build_calendar(rent, date(2025, 1, 1), date(2025, 4, 30), TODAY)
        assert [list(m.days) for m in months] == [[31], [28], [31], [30]]

    def test_reversed_range_fails(self, subscriptions):
        with pytest.raises(InvalidWindow):
            build_calendar(subscriptions, date(2025, 3, 1), date(2025, 2, 1), TODAY)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
