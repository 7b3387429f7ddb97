"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from sqlalchemy.orm import Session

from src.api.dependencies import TOKEN_COOKIE, get_current_user, get_mailer
from src.database import get_db
from src.models.user import User
from src.schemas.auth import AuthData, UserLogin, UserRegister, UserResponse
from src.schemas.common import Envelope
from src.services.auth import authenticate_user, register_user
from src.services.email_service import EmailService
from src.services.email_templates import NotificationEvent

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/signup", response_model=Envelope[AuthData], status_code=status.HTTP_201_CREATED)
async def sign_up(
    user_data: UserRegister,
    background_tasks: BackgroundTasks,
    db: Annotated[Session, Depends(get_db)],
    mailer: Annotated[EmailService, Depends(get_mailer)],
):
    """Register a new user and issue their first token."""
    user, token = register_user(db, user_data.name, user_data.email, user_data.password)

    # Welcome email goes out after the user row has committed
    background_tasks.add_task(
        mailer.dispatch_quietly,
        NotificationEvent.WELCOME,
        user.email,
        user_name=user.name,
        user_email=user.email,
    )

    return Envelope(
        message="User created successfully",
        data=AuthData(user=UserResponse.model_validate(user), token=token),
    )


@router.post("/signin", response_model=Envelope[AuthData])
async def sign_in(
    credentials: UserLogin,
    db: Annotated[Session, Depends(get_db)],
):
    """Sign in with email and password."""
    user, token = authenticate_user(db, credentials.email, credentials.password)

    return Envelope(
        message="Successfully signed in",
        data=AuthData(user=UserResponse.model_validate(user), token=token),
    )


@router.post("/signout", response_model=Envelope[dict])
async def sign_out(response: Response):
    """Sign out (client should discard token; it stays valid until it expires)."""
    response.delete_cookie(TOKEN_COOKIE)
    return Envelope(message="User signed out successfully")


@router.get("/me", response_model=Envelope[UserResponse])
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return Envelope(data=UserResponse.model_validate(current_user))
