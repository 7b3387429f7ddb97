"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import AuthData, UserLogin, UserRegister, UserResponse
from src.schemas.common import Envelope
from src.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionResponse,
    SubscriptionUpdate,
)
from src.schemas.user import UserUpdate

__all__ = [
    "Envelope",
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "UserUpdate",
    "AuthData",
    "SubscriptionCreate",
    "SubscriptionUpdate",
    "SubscriptionResponse",
]
