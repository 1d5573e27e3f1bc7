"""
Authentication against the backend-as-a-service.

Sessions are issued by the BaaS auth service; this API only verifies the
HS256 access token it hands to the browser and reads the user id from `sub`.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from .config import get_settings

settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthUser:
    """The authenticated caller, as described by the access token."""
    id: str
    email: Optional[str] = None
    role: Optional[str] = None


def verify_token(token: str) -> Optional[dict]:
    """Verify a BaaS access token and return its payload."""
    try:
        return jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
        )
    except JWTError:
        return None


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[AuthUser]:
    """Get the current user from the bearer token (optional auth)."""
    if not credentials:
        return None

    payload = verify_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        return None

    return AuthUser(
        id=str(payload["sub"]),
        email=payload.get("email"),
        role=payload.get("role"),
    )


def get_required_user(
    current_user: Optional[AuthUser] = Depends(get_current_user),
) -> AuthUser:
    """Get the current user, raising 401 if not authenticated."""
    if not current_user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user
