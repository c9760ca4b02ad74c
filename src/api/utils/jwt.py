from datetime import UTC, datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from config import ApplicationConfig


def generate_jwt(user_id: str, role: str, expires_delta: timedelta = timedelta(minutes=15)) -> str:
    """
    Generate JWT access token

    Access tokens are normally issued by the identity provider; this helper
    mints compatible tokens for local tooling and tests.

    Args:
        user_id: Subject id of the caller
        role: Caller role (HR_Admin, HR_Manager, manager, employee)
        expires_delta: Token lifetime

    Returns:
        JWT token string (HS256)
    """
    now = datetime.now(UTC)
    payload = {
        "user_id": str(user_id),
        "role": role,
        "exp": now + expires_delta,
        "iat": now,
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify and decode JWT token

    Args:
        token: JWT token string

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        payload = jwt.decode(
            token, ApplicationConfig.JWT_SECRET, algorithms=["HS256"]
        )
    except JWTError:
        return None
    if not payload.get("user_id") and payload.get("sub"):
        payload["user_id"] = payload["sub"]
    return payload
