"""FastAPI dependencies for authentication, database and services."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.exceptions import UnauthenticatedError
from src.models.user import User
from src.services.authorization import identity_from_token
from src.services.email_service import EmailService, get_email_service
from src.services.subscription_service import SubscriptionService

TOKEN_COOKIE = "token"  # noqa: S105

security = HTTPBearer(auto_error=False)


def get_token(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    """Bearer token from the Authorization header, falling back to the token cookie."""
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(TOKEN_COOKIE)


def get_current_user(
    token: Annotated[str | None, Depends(get_token)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    user_id = identity_from_token(token)

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UnauthenticatedError("User not found")

    return user


def get_subscription_service(
    db: Annotated[Session, Depends(get_db)],
) -> SubscriptionService:
    """Get subscription service with dependencies."""
    return SubscriptionService(db)


def get_mailer() -> EmailService:
    """Get email service instance."""
    return get_email_service()
