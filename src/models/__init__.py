"""Models package exports."""

from src.models.auth import (
    ForgotPasswordRequest,
    MessageResponse,
    RefreshResponse,
    ResetPasswordRequest,
    SignInRequest,
    SignUpRequest,
)
from src.models.user import OTPEntry, User, UserProfile

__all__ = [
    "ForgotPasswordRequest",
    "MessageResponse",
    "OTPEntry",
    "RefreshResponse",
    "ResetPasswordRequest",
    "SignInRequest",
    "SignUpRequest",
    "User",
    "UserProfile",
]
