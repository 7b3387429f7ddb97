"""Authentication schemas."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator

UserName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


class UserRegister(BaseModel):
    """User registration request."""

    name: UserName
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=72)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserLogin(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=72)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class UserResponse(BaseModel):
    """User summary returned by auth and user endpoints."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class AuthData(BaseModel):
    """Authentication payload with token and user info."""

    user: UserResponse
    token: str
