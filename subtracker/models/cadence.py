"""
Billing Cadence and Projection Window Models

A cadence is the recurrence rule of a subscription: every `quantity` units,
anchored at a known renewal date. A window is the inclusive date range a
caller wants renewals for.

Both are immutable value types. Malformed input fails at construction time
with InvalidCadence / InvalidWindow so that the projector never sees it.
"""

import calendar
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


# =============================================================================
# ERRORS
# =============================================================================

# Not ValueError subclasses: pydantic wraps ValueError raised in validators
# into ValidationError, these must reach the caller as themselves.
class ProjectionError(Exception):
    """Base exception for renewal date projection."""
    pass


class InvalidCadence(ProjectionError):
    """Unrecognized billing unit or non-positive quantity."""
    pass


class InvalidWindow(ProjectionError):
    """Projection window starts after it ends."""
    pass


# =============================================================================
# ENUMS
# =============================================================================

class BillingCycle(str, Enum):
    """
    Billing unit of a subscription.

    Values are what the backend stores. The singular unit names
    (day/week/month/year) are accepted as aliases on input.
    """
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def noun(self) -> str:
        """Singular unit name, e.g. 'month'."""
        return _NOUNS[self]

    @classmethod
    def parse(cls, value: Any) -> "BillingCycle":
        """Resolve an enum member, value or alias; raise InvalidCadence otherwise."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key == member.value or key == member.noun:
                    return member
        raise InvalidCadence(
            f"Unrecognized billing unit: {value!r}. "
            f"Expected one of {[m.value for m in cls]}"
        )


_NOUNS = {
    BillingCycle.DAILY: "day",
    BillingCycle.WEEKLY: "week",
    BillingCycle.MONTHLY: "month",
    BillingCycle.YEARLY: "year",
}


def _as_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    return value


# =============================================================================
# VALUE TYPES
# =============================================================================

class BillingCadence(BaseModel):
    """
    Recurrence rule: renew every `quantity` `unit`s, anchored at `anchor_date`.

    The anchor is any known renewal date (usually the next payment date).
    Every occurrence is anchor_date + k * quantity * unit for an integer k.
    """
    model_config = ConfigDict(frozen=True)

    unit: BillingCycle
    quantity: int
    anchor_date: date

    @model_validator(mode='before')
    @classmethod
    def validate_cadence(cls, data: Any) -> Any:
        """Reject unknown units and non-positive or non-integer quantities."""
        if not isinstance(data, dict):
            return data

        data = dict(data)
        if "unit" in data:
            data["unit"] = BillingCycle.parse(data["unit"])

        quantity = data.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidCadence(f"Quantity must be a positive integer, got {quantity!r}")
        if quantity <= 0:
            raise InvalidCadence(f"Quantity must be a positive integer, got {quantity}")

        if "anchor_date" in data:
            data["anchor_date"] = _as_date(data["anchor_date"])
        return data

    @property
    def min_step_days(self) -> int:
        """Fewest days a single step can advance (28-day months, 365-day years)."""
        per_unit = {
            BillingCycle.DAILY: 1,
            BillingCycle.WEEKLY: 7,
            BillingCycle.MONTHLY: 28,
            BillingCycle.YEARLY: 365,
        }
        return per_unit[self.unit] * self.quantity


class ProjectionWindow(BaseModel):
    """Inclusive date range [start_date, end_date]."""
    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date

    @model_validator(mode='before')
    @classmethod
    def normalize_dates(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = {key: _as_date(value) for key, value in data.items()}
        return data

    @model_validator(mode='after')
    def validate_order(self) -> 'ProjectionWindow':
        """Window must not start after it ends."""
        if self.start_date > self.end_date:
            raise InvalidWindow(
                f"Window start {self.start_date} is after end {self.end_date}"
            )
        return self

    @classmethod
    def for_month(cls, year: int, month: int) -> 'ProjectionWindow':
        """Window covering a whole calendar month."""
        last_day = calendar.monthrange(year, month)[1]
        return cls(start_date=date(year, month, 1), end_date=date(year, month, last_day))

    @property
    def span_days(self) -> int:
        return (self.end_date - self.start_date).days

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date
