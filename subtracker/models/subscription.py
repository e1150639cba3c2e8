"""
Subscription Models

These models define the schema of a tracked subscription as the app
stores it: price, billing cycle, next payment date and history.

DESIGN DECISION: We use Pydantic v2. Billing fields are validated here so
that any record coming out of the data layer can always be turned into a
BillingCadence without further checks.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from subtracker.models.cadence import BillingCadence, BillingCycle, InvalidCadence


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class NotificationOption(str, Enum):
    """When to remind the user before a renewal."""
    NONE = "none"
    ONE_DAY = "1 day before"
    THREE_DAYS = "3 days before"
    ONE_WEEK = "1 week before"
    ONE_MONTH = "1 month before"
    THREE_MONTHS = "3 months before"


class SubscriptionList(str, Enum):
    """Which list a subscription is filed under."""
    PERSONAL = "Personal"
    BUSINESS = "Business"


# =============================================================================
# HISTORY RECORDS
# =============================================================================

class BillingRecord(BaseModel):
    """A payment that was actually made."""

    date: date
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount charged"
    )


class PriceRecord(BaseModel):
    """A price the subscription switched to on a given day."""

    date: date
    price: Decimal = Field(
        ...,
        ge=0,
        description="New price from this date"
    )


# =============================================================================
# CORE SUBSCRIPTION MODEL
# =============================================================================

class Subscription(BaseModel):
    """
    A recurring payment tracked by the user.

    `next_payment_date` is the anchor of the billing cadence: every past and
    future renewal is derived from it by whole billing steps.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    # Identity
    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Unique subscription ID"
    )

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name, e.g. 'Netflix'"
    )
    logo: Optional[str] = None

    # Billing
    price: Decimal = Field(
        ...,
        ge=0,
        description="Price charged per renewal"
    )
    currency: str = Field(
        default="₹",
        min_length=1,
        max_length=5
    )
    billing_cycle: BillingCycle = Field(
        default=BillingCycle.MONTHLY,
        description="Billing unit"
    )
    billing_cycle_quantity: int = Field(
        default=1,
        ge=1,
        description="Renew every N billing units"
    )
    next_payment_date: date = Field(
        ...,
        description="Next renewal date (cadence anchor)"
    )

    category: str = Field(
        default="Other",
        min_length=1,
        max_length=50
    )
    subscribed_date: date = Field(
        default_factory=date.today,
        description="When the user subscribed"
    )
    is_active: bool = True

    billing_history: list[BillingRecord] = Field(default_factory=list)
    price_history: list[PriceRecord] = Field(default_factory=list)

    # Preferences
    notification: Optional[NotificationOption] = None
    payment_method: Optional[str] = Field(default=None, max_length=50)
    free_trial: Optional[bool] = None
    subscription_list: Optional[SubscriptionList] = None
    url: Optional[str] = Field(default=None, max_length=500)

    # Timestamps (set by the backend)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator('billing_cycle', mode='before')
    @classmethod
    def parse_billing_cycle(cls, v):
        """Accept unit aliases such as 'month'."""
        try:
            return BillingCycle.parse(v)
        except InvalidCadence as e:
            raise ValueError(str(e)) from e

    @property
    def cadence(self) -> BillingCadence:
        """Billing cadence anchored at the next payment date."""
        return BillingCadence(
            unit=self.billing_cycle,
            quantity=self.billing_cycle_quantity,
            anchor_date=self.next_payment_date,
        )


# Subscription fields that have no None value
REQUIRED_FIELDS = (
    "name",
    "price",
    "currency",
    "billing_cycle",
    "billing_cycle_quantity",
    "next_payment_date",
    "category",
    "subscribed_date",
    "is_active",
    "billing_history",
    "price_history",
)


class SubscriptionUpdate(BaseModel):
    """
    Partial update to a subscription.

    Only fields that were explicitly set are applied
    (see model_dump(exclude_unset=True)).
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    logo: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=1, max_length=5)
    billing_cycle: Optional[BillingCycle] = None
    billing_cycle_quantity: Optional[int] = Field(default=None, ge=1)
    next_payment_date: Optional[date] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    subscribed_date: Optional[date] = None
    is_active: Optional[bool] = None
    billing_history: Optional[list[BillingRecord]] = None
    price_history: Optional[list[PriceRecord]] = None
    notification: Optional[NotificationOption] = None
    payment_method: Optional[str] = Field(default=None, max_length=50)
    free_trial: Optional[bool] = None
    subscription_list: Optional[SubscriptionList] = None
    url: Optional[str] = Field(default=None, max_length=500)

    @field_validator('billing_cycle', mode='before')
    @classmethod
    def parse_billing_cycle(cls, v):
        if v is None:
            return v
        try:
            return BillingCycle.parse(v)
        except InvalidCadence as e:
            raise ValueError(str(e)) from e

    @model_validator(mode='after')
    def validate_required_not_cleared(self) -> 'SubscriptionUpdate':
        """Fields a Subscription requires may be changed but not set to None."""
        cleared = sorted(
            field for field in REQUIRED_FIELDS
            if field in self.model_fields_set and getattr(self, field) is None
        )
        if cleared:
            raise ValueError(f"Cannot clear required fields: {', '.join(cleared)}")
        return self

    def apply_to(self, subscription: Subscription) -> Subscription:
        """Return a copy of `subscription` with the set fields replaced."""
        changes = self.model_dump(exclude_unset=True)
        return Subscription.model_validate({**subscription.model_dump(), **changes})
