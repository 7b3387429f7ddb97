"""SQLAlchemy models."""

from src.models.subscription import Subscription
from src.models.user import User

__all__ = [
    "User",
    "Subscription",
]
