"""
Spending Summaries

DESIGN DECISION: Every figure here is computed from stored subscription
records and projected renewal dates. Nothing is estimated from averages:
a month's total is the sum of the renewals that actually fall inside it.

Two different questions are answered:
- "What does this cost me per month?" -> monthly_cost / total_monthly,
  a normalized rate independent of when renewals happen.
- "What will I pay in this month?" -> month_totals, the sum of prices of
  the renewals projected into that calendar month.
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from subtracker.models.cadence import BillingCadence, BillingCycle, ProjectionWindow
from subtracker.models.subscription import Subscription
from subtracker.projection import next_renewal_on_or_after, project


TWO_PLACES = Decimal("0.01")

# Billing units per year, used to normalize prices to a monthly rate
_UNITS_PER_YEAR = {
    BillingCycle.DAILY: Decimal(365),
    BillingCycle.WEEKLY: Decimal(52),
    BillingCycle.MONTHLY: Decimal(12),
    BillingCycle.YEARLY: Decimal(1),
}


class SortOption(str, Enum):
    """Orderings offered by the subscription list."""
    NEXT = "next"
    NAME = "name"
    PRICE_LOW = "price-low"
    PRICE_HIGH = "price-high"
    GROUP_BY = "group-by"


# =============================================================================
# RESULT MODELS
# =============================================================================

class MonthTotals(BaseModel):
    """What will be charged in one calendar month."""

    year: int
    month: int = Field(ge=1, le=12)
    total: Decimal = Decimal("0")
    upcoming_total: Decimal = Field(
        default=Decimal("0"),
        description="Part of the total charged on or after today"
    )
    renewal_count: int = 0


class UpcomingRenewal(BaseModel):
    """The next renewal of one subscription."""

    subscription_id: str
    name: str
    renewal_date: date
    price: Decimal
    currency: str
    days_until: int


class SpendingSummary(BaseModel):
    """Dashboard figures for the user's subscriptions."""

    generated_for: date
    active_count: int
    cancelled_count: int
    total_monthly: Decimal
    total_yearly: Decimal
    by_category: dict[str, Decimal] = Field(
        default_factory=dict,
        description="Normalized monthly cost per category"
    )
    upcoming: list[UpcomingRenewal] = Field(default_factory=list)
    current_month: Optional[MonthTotals] = None


# =============================================================================
# SINGLE-SUBSCRIPTION HELPERS
# =============================================================================

def monthly_cost(subscription: Subscription) -> Decimal:
    """
    Price normalized to a monthly rate.

    A yearly 1200 is 100/month, a weekly 100 is 433.33/month,
    every 3 months at 300 is 100/month.
    """
    per_year = _UNITS_PER_YEAR[subscription.billing_cycle]
    months = Decimal(12) * subscription.billing_cycle_quantity
    value = subscription.price * per_year / months
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def total_monthly(subscriptions: Iterable[Subscription]) -> Decimal:
    """Sum of normalized monthly cost over active subscriptions."""
    total = sum(
        (monthly_cost(s) for s in subscriptions if s.is_active),
        Decimal("0"),
    )
    return total.quantize(TWO_PLACES)


def total_spent(subscription: Subscription) -> Decimal:
    """Sum of all recorded payments."""
    return sum((record.amount for record in subscription.billing_history), Decimal("0"))


def days_until(day: date, today: date) -> int:
    """Whole days from today until `day` (negative if in the past)."""
    return (day - today).days


def days_since(day: date, today: date) -> int:
    return (today - day).days


def describe_cadence(cadence: BillingCadence) -> str:
    """'Every month', 'Every 2 weeks'."""
    noun = cadence.unit.noun
    if cadence.quantity == 1:
        return f"Every {noun}"
    return f"Every {cadence.quantity} {noun}s"


# =============================================================================
# COLLECTION HELPERS
# =============================================================================

def month_totals(
    subscriptions: Iterable[Subscription],
    year: int,
    month: int,
    today: date,
) -> MonthTotals:
    """
    Charges falling in a calendar month.

    Each active subscription contributes its price once per projected
    renewal inside the month.
    """
    window = ProjectionWindow.for_month(year, month)
    total = Decimal("0")
    upcoming = Decimal("0")
    count = 0

    for subscription in subscriptions:
        if not subscription.is_active:
            continue
        for renewal in project(subscription.cadence, window):
            total += subscription.price
            count += 1
            if renewal >= today:
                upcoming += subscription.price

    return MonthTotals(
        year=year,
        month=month,
        total=total,
        upcoming_total=upcoming,
        renewal_count=count,
    )


def sort_subscriptions(
    subscriptions: Iterable[Subscription],
    option: SortOption = SortOption.NEXT,
) -> list[Subscription]:
    """Order subscriptions for the list screen."""
    option = SortOption(option)
    items = list(subscriptions)

    if option == SortOption.NAME:
        return sorted(items, key=lambda s: s.name.casefold())
    if option == SortOption.PRICE_LOW:
        return sorted(items, key=lambda s: (s.price, s.name.casefold()))
    if option == SortOption.PRICE_HIGH:
        return sorted(items, key=lambda s: (-s.price, s.name.casefold()))
    if option == SortOption.GROUP_BY:
        return sorted(items, key=lambda s: (s.category.casefold(), s.next_payment_date))
    return sorted(items, key=lambda s: (s.next_payment_date, s.name.casefold()))


def group_by_category(subscriptions: Iterable[Subscription]) -> dict[str, list[Subscription]]:
    """Subscriptions grouped by category, categories in alphabetical order."""
    groups: dict[str, list[Subscription]] = defaultdict(list)
    for subscription in sort_subscriptions(subscriptions, SortOption.GROUP_BY):
        groups[subscription.category].append(subscription)
    return dict(groups)


# =============================================================================
# SUMMARIZER
# =============================================================================

class SpendingSummarizer:
    """
    Builds the dashboard summary from a list of subscriptions.

    GUARANTEES:
    - Cancelled subscriptions never contribute to totals
    - Upcoming renewals come from the projector, so a stale
      next_payment_date still yields the correct next renewal
    """

    def __init__(self, upcoming_days: int = 30):
        self._upcoming_days = upcoming_days

    def summarize(
        self,
        subscriptions: Iterable[Subscription],
        today: date,
    ) -> SpendingSummary:
        items = list(subscriptions)
        active = [s for s in items if s.is_active]

        by_category: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for subscription in active:
            by_category[subscription.category] += monthly_cost(subscription)

        monthly = total_monthly(active)

        return SpendingSummary(
            generated_for=today,
            active_count=len(active),
            cancelled_count=len(items) - len(active),
            total_monthly=monthly,
            total_yearly=(monthly * 12).quantize(TWO_PLACES),
            by_category=dict(sorted(by_category.items())),
            upcoming=self._upcoming(active, today),
            current_month=month_totals(active, today.year, today.month, today),
        )

    def _upcoming(
        self,
        subscriptions: list[Subscription],
        today: date,
    ) -> list[UpcomingRenewal]:
        """Next renewal of each subscription within the horizon, soonest first."""
        horizon = today + timedelta(days=self._upcoming_days)
        renewals = []

        for subscription in subscriptions:
            renewal = next_renewal_on_or_after(subscription.cadence, today)
            if renewal is None or renewal > horizon:
                continue
            renewals.append(UpcomingRenewal(
                subscription_id=subscription.id,
                name=subscription.name,
                renewal_date=renewal,
                price=subscription.price,
                currency=subscription.currency,
                days_until=days_until(renewal, today),
            ))

        return sorted(renewals, key=lambda r: (r.renewal_date, r.name))
