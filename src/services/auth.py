"""Authentication service for JWT and password handling."""

import logging
import uuid
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.exceptions import (
    ConflictError,
    InternalError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from src.models.user import User

logger = logging.getLogger(__name__)

settings = get_settings()

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


def normalize_email(email: str) -> str:
    """Trim and lowercase an email address."""
    return email.strip().lower()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(user_id: int) -> str:
    """Create a signed JWT access token for a user."""
    now = datetime.now(UTC)
    to_encode = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expiration_minutes),
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload
    except JWTError:
        return None


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == normalize_email(email)).first()


def register_user(db: Session, name: str, email: str, password: str) -> tuple[User, str]:
    """Create a user and issue their first token.

    The insert and the token issuance share one transaction: if either fails
    the session is rolled back and no user row is left behind.
    """
    if not name or not name.strip() or not email or not password:
        raise ValidationError("Name, email and password are required")

    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise ConflictError("User already exists")

    try:
        user = User(name=name.strip(), email=email, password_hash=get_password_hash(password))
        db.add(user)
        db.flush()  # Get user.id
        token = create_access_token(user.id)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("User already exists") from e
    except Exception as e:
        db.rollback()
        logger.error(f"Registration failed for {email}: {e}", exc_info=True)
        raise InternalError("Failed to create user") from e

    db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user, token


def authenticate_user(db: Session, email: str, password: str) -> tuple[User, str]:
    """Check a user's credentials and issue a fresh token."""
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = get_user_by_email(db, email)
    if not user:
        raise NotFoundError("User not found")
    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()

    return user, create_access_token(user.id)


def update_profile(
    db: Session,
    user: User,
    name: str | None = None,
    email: str | None = None,
    password: str | None = None,
) -> User:
    """Apply a profile update; omitted fields are left unchanged."""
    if name is not None and not name.strip():
        raise ValidationError("Name must not be empty")
    if email is not None:
        email = normalize_email(email)
        if email != user.email and get_user_by_email(db, email):
            raise ConflictError("Email already in use")
        user.email = email
    if name is not None:
        user.name = name.strip()
    if password is not None:
        user.password_hash = get_password_hash(password)

    db.commit()
    db.refresh(user)
    logger.info(f"Updated profile of user {user.id}")
    return user
