"""Subscription model."""

from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.enums import Category, Currency, Frequency, PaymentMethod, SubscriptionStatus
from src.models.mixins import TimestampMixin


def _enum_column(enum_cls, name: str, default):
    return Column(
        Enum(enum_cls, name=name, values_callable=lambda x: [e.value for e in x]),
        default=default,
        nullable=False,
    )


class Subscription(Base, TimestampMixin):
    """A recurring payment owned by exactly one user.

    ``renewal_date`` and ``status`` are derived by the subscription service
    before every write; see ``src.services.subscription_service``.
    """

    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    price = Column(Float, nullable=False)
    currency = _enum_column(Currency, "currency", Currency.KES)
    frequency = _enum_column(Frequency, "frequency", Frequency.MONTHLY)
    category = _enum_column(Category, "category", Category.OTHER)
    payment_method = _enum_column(PaymentMethod, "paymentmethod", PaymentMethod.CARD)
    status = _enum_column(SubscriptionStatus, "subscriptionstatus", SubscriptionStatus.ACTIVE)
    start_date = Column(DateTime(timezone=True), nullable=False)
    renewal_date = Column(DateTime(timezone=True), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    user = relationship("User", back_populates="subscriptions")
