"""Subscription schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import ConfigDict, Field, StringConstraints, field_validator

from src.dates import ensure_utc
from src.models.enums import Category, Currency, Frequency, PaymentMethod, SubscriptionStatus
from src.schemas.common import CamelModel

SubscriptionName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)
]


class SubscriptionBase(CamelModel):
    """Fields a subscription owner controls."""

    name: SubscriptionName
    price: float = Field(..., ge=0)
    frequency: Frequency = Frequency.MONTHLY
    category: Category = Category.OTHER
    payment_method: PaymentMethod = PaymentMethod.CARD
    start_date: datetime

    @field_validator("payment_method", mode="before")
    @classmethod
    def normalize_payment_method(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("start_date")
    @classmethod
    def start_date_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class SubscriptionCreate(SubscriptionBase):
    """Create a new subscription for the caller."""

    currency: Currency = Currency.KES


class SubscriptionUpdate(SubscriptionBase):
    """Full-field update of a subscription.

    Currency, status and owner are not writable through an update.
    """


class SubscriptionResponse(CamelModel):
    """Subscription response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    currency: Currency
    frequency: Frequency
    category: Category
    payment_method: PaymentMethod
    status: SubscriptionStatus
    start_date: datetime
    renewal_date: datetime | None
    user_id: int
    created_at: datetime
    updated_at: datetime
