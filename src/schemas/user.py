"""User profile schemas."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.schemas.auth import UserName


class UserUpdate(BaseModel):
    """Update the caller's own profile. Omitted fields are left unchanged."""

    name: UserName | None = None
    email: EmailStr | None = Field(None, max_length=255)
    password: str | None = Field(None, min_length=1, max_length=72)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else value
