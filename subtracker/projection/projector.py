"""
Renewal Date Projector

Given a billing cadence and an inclusive date window, list every renewal
date of the subscription that falls inside the window.

DESIGN DECISION: The walk is iterative over the step index k.
Each occurrence is a single calendar shift of k * quantity units from the
anchor, never a shift of the previous occurrence. Month-end anchors
therefore keep their day (Jan 31 -> Feb 28 -> Mar 31) instead of drifting.

MONTH/YEAR OVERFLOW POLICY: clamp. A shift that lands on a day the target
month does not have uses the last day of that month (dateutil.relativedelta
semantics): Jan 31 + 1 month = Feb 28, Feb 29 + 1 year = Feb 28.

The walk takes one step per occurrence between the anchor and the window,
so its cost grows with that distance as well as with the window span.

The projector is pure: no I/O, no shared state, safe to call concurrently.
"""

from datetime import date, timedelta
from typing import Optional

import structlog
from dateutil.relativedelta import relativedelta

from subtracker.models.cadence import (
    BillingCadence,
    BillingCycle,
    InvalidCadence,
    InvalidWindow,
    ProjectionWindow,
)
from subtracker.models.subscription import Subscription


logger = structlog.get_logger(__name__)


def step_date(value: date, unit: BillingCycle, count: int) -> date:
    """
    Shift `value` by `count` billing units (negative moves backward).

    Raises OverflowError if the result is outside the supported date range.
    """
    unit = BillingCycle.parse(unit)
    try:
        if unit == BillingCycle.DAILY:
            return value + timedelta(days=count)
        if unit == BillingCycle.WEEKLY:
            return value + timedelta(weeks=count)
        if unit == BillingCycle.MONTHLY:
            return value + relativedelta(months=count)
        return value + relativedelta(years=count)
    except (OverflowError, ValueError) as e:
        raise OverflowError(f"{value} shifted by {count} {unit.noun}s is out of range") from e


def occurrence_at(cadence: BillingCadence, k: int) -> date:
    """The k-th occurrence counted from the anchor (k=0 is the anchor)."""
    return step_date(cadence.anchor_date, cadence.unit, k * cadence.quantity)


def _occurrence_or_none(cadence: BillingCadence, k: int) -> Optional[date]:
    try:
        return occurrence_at(cadence, k)
    except OverflowError:
        return None


def _check_inputs(cadence: BillingCadence, window: ProjectionWindow) -> None:
    # Models validate on construction; model_construct() skips that.
    BillingCycle.parse(cadence.unit)
    if isinstance(cadence.quantity, bool) or not isinstance(cadence.quantity, int):
        raise InvalidCadence(f"Quantity must be a positive integer, got {cadence.quantity!r}")
    if cadence.quantity <= 0:
        raise InvalidCadence(f"Quantity must be a positive integer, got {cadence.quantity}")
    if window.start_date > window.end_date:
        raise InvalidWindow(
            f"Window start {window.start_date} is after end {window.end_date}"
        )


def _step_budget(cadence: BillingCadence, window: ProjectionWindow) -> int:
    """
    Upper bound on steps needed to align with the window and enumerate it.

    Consecutive occurrences are at least `min_step_days` apart, so aligning
    takes at most distance / min_step steps and enumerating at most
    span / min_step more.
    """
    low = min(window.start_date, cadence.anchor_date)
    high = max(window.end_date, cadence.anchor_date)
    distance = (high - low).days + window.span_days
    return distance // cadence.min_step_days + 4


def project(cadence: BillingCadence, window: ProjectionWindow) -> list[date]:
    """
    List the renewal dates of `cadence` inside `window`, oldest first.

    Returns an empty list when no renewal falls inside the window.

    Raises:
        InvalidCadence: unknown unit or non-positive quantity
        InvalidWindow: window starts after it ends
    """
    _check_inputs(cadence, window)

    budget = _step_budget(cadence, window)
    steps = 0
    k = 0
    current: Optional[date] = cadence.anchor_date

    # Align: move k to the first occurrence on or after the window start.
    if current >= window.start_date:
        while steps < budget:
            previous = _occurrence_or_none(cadence, k - 1)
            if previous is None or previous < window.start_date:
                break
            k -= 1
            current = previous
            steps += 1
    else:
        while current is not None and current < window.start_date and steps < budget:
            k += 1
            current = _occurrence_or_none(cadence, k)
            steps += 1

    # Enumerate forward until past the window end.
    occurrences: list[date] = []
    while current is not None and current <= window.end_date and steps < budget:
        occurrences.append(current)
        k += 1
        current = _occurrence_or_none(cadence, k)
        steps += 1

    if current is not None and current <= window.end_date:
        logger.warning(
            "projection_step_budget_exhausted",
            unit=cadence.unit.value,
            quantity=cadence.quantity,
            anchor_date=cadence.anchor_date.isoformat(),
            start_date=window.start_date.isoformat(),
            end_date=window.end_date.isoformat(),
            budget=budget,
        )

    return occurrences


def renewal_dates(subscription: Subscription, start: date, end: date) -> list[date]:
    """Renewal dates of a subscription between `start` and `end` inclusive."""
    window = ProjectionWindow(start_date=start, end_date=end)
    return project(subscription.cadence, window)


def next_renewal_on_or_after(cadence: BillingCadence, day: date) -> Optional[date]:
    """
    First occurrence on or after `day`.

    Returns None only when that date is beyond the supported date range.
    """
    try:
        horizon = step_date(day, cadence.unit, 2 * cadence.quantity)
    except OverflowError:
        horizon = date.max
    dates = project(cadence, ProjectionWindow(start_date=day, end_date=horizon))
    return dates[0] if dates else None
