"""FastAPI dependencies for authentication."""

from typing import Optional

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.errors import AuthError
from src.services.auth_service import AuthService

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service() -> AuthService:
    """Build the AuthService used by route handlers."""
    return AuthService()


def get_current_user_id(
    access_token: Optional[str] = Cookie(default=None, alias=ACCESS_TOKEN_COOKIE),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> str:
    """Return the user id from the access token cookie or Bearer header.

    Raises:
        AuthError: If no token is present or it fails verification
    """
    token = access_token or (credentials.credentials if credentials else None)
    if not token:
        raise AuthError("Not authenticated")
    return auth_service.tokens.verify_access_token(token)
