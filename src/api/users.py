"""User API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user
from src.database import get_db
from src.exceptions import NotFoundError
from src.models.user import User
from src.schemas.auth import UserResponse
from src.schemas.common import Envelope
from src.schemas.user import UserUpdate
from src.services.auth import update_profile
from src.services.authorization import authorize_owner

router = APIRouter(prefix="/api/v1/users", tags=["users"])


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


@router.get("", response_model=Envelope[list[UserResponse]])
async def get_users(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """List all users."""
    users = db.query(User).order_by(User.id).all()
    return Envelope(data=[UserResponse.model_validate(u) for u in users])


@router.get("/{user_id}", response_model=Envelope[UserResponse])
async def get_user(
    user_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a single user."""
    return Envelope(data=UserResponse.model_validate(_get_user(db, user_id)))


@router.put("/{user_id}", response_model=Envelope[UserResponse])
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update the caller's own profile."""
    user = _get_user(db, user_id)
    authorize_owner(user.id, current_user.id)

    user = update_profile(db, user, user_data.name, user_data.email, user_data.password)
    return Envelope(message="User updated successfully", data=UserResponse.model_validate(user))
