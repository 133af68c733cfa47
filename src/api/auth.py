"""Authentication API endpoints."""

from typing import Optional

import structlog
from fastapi import APIRouter, Cookie, Depends, status
from fastapi.responses import RedirectResponse, Response

from src.api.dependencies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_auth_service,
    get_current_user_id,
)
from src.config import get_settings
from src.models.auth import (
    ForgotPasswordRequest,
    MessageResponse,
    RefreshResponse,
    ResetPasswordRequest,
    SignInRequest,
    SignUpRequest,
)
from src.models.user import UserProfile
from src.services.auth_service import AuthService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _set_token_cookie(response: Response, name: str, value: str, max_age: int) -> None:
    """Attach a token cookie with httpOnly, secure and SameSite=strict flags."""
    response.set_cookie(
        key=name,
        value=value,
        max_age=max_age,
        httponly=True,
        secure=get_settings().cookie_secure,
        samesite="strict",
        path="/",
    )


def _clear_token_cookie(response: Response, name: str) -> None:
    response.delete_cookie(
        key=name,
        path="/",
        httponly=True,
        secure=get_settings().cookie_secure,
        samesite="strict",
    )


@router.post("/sign-up", status_code=status.HTTP_201_CREATED)
async def sign_up(
    request: SignUpRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Register a new user.

    Raises:
        ConflictError 500: If the username is taken (generic body)
    """
    await auth_service.sign_up(
        username=request.username,
        password=request.password,
        name=request.name,
        image=request.image,
    )
    return MessageResponse(message="User created successfully")


@router.post("/sign-in")
async def sign_in(
    request: SignInRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """Sign in, set the token cookies and redirect to the landing page.

    Raises:
        NotFoundError 404: If the username is unknown
        AuthError 401: If the password is wrong
    """
    _, pair = await auth_service.sign_in(request.username, request.password)

    response = RedirectResponse(
        url=get_settings().sign_in_redirect_url,
        status_code=status.HTTP_303_SEE_OTHER,
    )
    _set_token_cookie(
        response,
        ACCESS_TOKEN_COOKIE,
        pair.access_token,
        auth_service.tokens.access_max_age,
    )
    _set_token_cookie(
        response,
        REFRESH_TOKEN_COOKIE,
        pair.refresh_token,
        auth_service.tokens.refresh_max_age,
    )
    return response


@router.api_route("/logout", methods=["GET", "POST"])
async def logout() -> RedirectResponse:
    """Clear both token cookies and redirect to the sign-in page."""
    response = RedirectResponse(
        url=get_settings().sign_out_redirect_url,
        status_code=status.HTTP_303_SEE_OTHER,
    )
    _clear_token_cookie(response, ACCESS_TOKEN_COOKIE)
    _clear_token_cookie(response, REFRESH_TOKEN_COOKIE)
    logger.info("user_logged_out")
    return response


@router.post("/refresh")
async def refresh(
    response: Response,
    refresh_token: Optional[str] = Cookie(default=None, alias=REFRESH_TOKEN_COOKIE),
    auth_service: AuthService = Depends(get_auth_service),
) -> RefreshResponse:
    """Exchange the refresh token cookie for a new access token.

    Raises:
        AuthError 401: If the cookie is missing, tampered with or expired
    """
    access_token = auth_service.refresh(refresh_token)
    _set_token_cookie(
        response,
        ACCESS_TOKEN_COOKIE,
        access_token,
        auth_service.tokens.access_max_age,
    )
    return RefreshResponse(access_token=access_token)


@router.post("/forgot-password")
async def forgot_password(
    request: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Send a password reset OTP. The response never reveals whether the user exists."""
    message = await auth_service.forgot_password(request.username)
    return MessageResponse(message=message)


@router.post("/reset-password")
async def reset_password(
    request: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Reset a password with a single-use OTP.

    Raises:
        AuthError 403: If the OTP is invalid or expired
    """
    await auth_service.reset_password(
        username=request.username,
        otp=request.otp,
        new_password=request.new_password,
    )
    return MessageResponse(message="Password reset successfully")


@router.get("/profile/{username}")
async def get_profile(
    username: str,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserProfile:
    """Public profile of ``username``.

    Raises:
        NotFoundError 404: If the username is unknown
    """
    return await auth_service.get_profile(username)


@router.get("/me")
async def get_me(
    user_id: str = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserProfile:
    """Profile of the user carried by the access token."""
    return await auth_service.get_profile_by_id(user_id)
