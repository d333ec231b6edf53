from dataclasses import dataclass

from jose import JWTError, jwt
from expense_tracker.config import settings
from expense_tracker.core.exceptions import UnauthorizedException
from expense_tracker.models.role import UserRole


@dataclass(frozen=True)
class TokenIdentity:
    """Verified identity carried by an access token."""

    auth_user_id: str
    role: UserRole
    phone: str | None = None


def decode_jwt(token: str) -> dict:
    """
    Decode and validate JWT token using shared SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub' (user_id), 'exp', 'role', etc.

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")

    # Validate expiration (jose checks this automatically)
    if payload.get("exp") is None:
        raise UnauthorizedException("Token missing expiration")

    if payload.get("sub") is None:
        raise UnauthorizedException("Token missing user identifier")

    return payload


def extract_identity(token: str) -> TokenIdentity:
    """Extract subject, role and phone claims from a JWT token"""
    payload = decode_jwt(token)

    raw_role = payload.get("role", UserRole.USER.value)
    try:
        role = UserRole(raw_role)
    except ValueError:
        raise UnauthorizedException(f"Token carries unknown role '{raw_role}'")

    return TokenIdentity(
        auth_user_id=str(payload["sub"]),
        role=role,
        phone=payload.get("phone"),
    )
