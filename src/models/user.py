"""User and OTP models."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class User(BaseModel):
    """A registered user. The password hash is kept out of this model."""

    id: UUID
    username: str
    name: str
    image: Optional[str] = None
    created_at: datetime


class UserProfile(BaseModel):
    """Public-safe projection of a user returned by the profile endpoints."""

    id: UUID
    username: str
    name: str
    image: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(
            id=user.id,
            username=user.username,
            name=user.name,
            image=user.image,
            created_at=user.created_at,
        )


class OTPEntry(BaseModel):
    """A live one-time password awaiting use."""

    username: str
    code: str
    expires_at: datetime
