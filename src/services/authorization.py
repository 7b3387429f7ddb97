"""Token identity and ownership checks guarding every protected endpoint."""

from src.exceptions import ForbiddenError, UnauthenticatedError
from src.services.auth import decode_access_token


def identity_from_token(token: str | None) -> int:
    """Return the user id asserted by a signed token."""
    if not token:
        raise UnauthenticatedError("Authentication required")

    payload = decode_access_token(token)
    if payload is None:
        raise UnauthenticatedError()

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise UnauthenticatedError()
    return int(subject)


def authorize_owner(owner_id: int, caller_id: int) -> None:
    """Allow the operation only when the caller owns the resource."""
    if owner_id != caller_id:
        raise ForbiddenError()
