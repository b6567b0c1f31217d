from jose import JWTError, jwt
from schoolcore.config import settings
from schoolcore.core.exceptions import UnauthorizedException


def decode_jwt(token: str) -> dict:
    """
    Decode and validate a session token using the shared SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub' (principal id), 'school_id', 'exp'

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")

    # jose validates exp when present but does not require it
    if payload.get("exp") is None:
        raise UnauthorizedException("Token missing expiration")

    if payload.get("sub") is None:
        raise UnauthorizedException("Token missing user identifier")

    if payload.get("school_id") is None:
        raise UnauthorizedException("Token missing school identifier")

    return payload


def extract_session_claims(token: str) -> tuple[int, int]:
    """Extract (principal_id, school_id) from a session token"""
    payload = decode_jwt(token)
    try:
        return int(payload["sub"]), int(payload["school_id"])
    except (TypeError, ValueError):
        raise UnauthorizedException("Token carries malformed identifiers")
