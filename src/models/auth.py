"""Auth request and response models with validation."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

PASSWORD_MIN_LENGTH = 8
# bcrypt only reads the first 72 bytes of its input
PASSWORD_MAX_BYTES = 72


def _not_blank(value: str, field: str) -> str:
    if not value.strip():
        raise ValueError(f"{field} cannot be empty or whitespace only")
    return value


def _check_password(value: str) -> str:
    _not_blank(value, "Password")
    if len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password cannot be longer than {PASSWORD_MAX_BYTES} bytes")
    return value


class SignUpRequest(BaseModel):
    """New account registration.

    Attributes:
        username: Unique login name, also the OTP delivery address (1-100 chars)
        password: Plain-text password (min 8 chars, max 72 bytes in UTF-8)
        name: Display name (1-255 chars)
        image: Optional avatar URL
    """

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_BYTES)
    name: str = Field(..., min_length=1, max_length=255)
    image: Optional[str] = Field(default=None, max_length=2048)

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, v: str) -> str:
        """Ensure username is not whitespace only."""
        return _not_blank(v, "Username")

    @field_validator("password")
    @classmethod
    def password_valid(cls, v: str) -> str:
        """Ensure password is not whitespace only and fits bcrypt's input."""
        return _check_password(v)


class SignInRequest(BaseModel):
    """Login credentials."""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)


class ForgotPasswordRequest(BaseModel):
    """Request an OTP for resetting a password."""

    username: str = Field(..., min_length=1, max_length=100)


class ResetPasswordRequest(BaseModel):
    """Reset a password using a previously issued OTP.

    The new password is accepted as either ``newPassword`` or ``new_password``.
    """

    username: str = Field(..., min_length=1, max_length=100)
    otp: str = Field(..., min_length=1, max_length=32)
    new_password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LENGTH,
        max_length=PASSWORD_MAX_BYTES,
        validation_alias=AliasChoices("newPassword", "new_password"),
    )

    @field_validator("new_password")
    @classmethod
    def new_password_valid(cls, v: str) -> str:
        """Ensure the new password is not whitespace only and fits bcrypt's input."""
        return _check_password(v)


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class RefreshResponse(BaseModel):
    """Newly minted access token."""

    access_token: str
