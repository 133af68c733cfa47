"""Signed access and refresh tokens (JWT)."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
import structlog

from src.config import Settings
from src.errors import AuthError

logger = structlog.get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class TokenConfig:
    """Signing keys and lifetimes handed to the TokenIssuer."""

    access_secret: str
    refresh_secret: str
    access_ttl: timedelta = timedelta(hours=1)
    refresh_ttl: timedelta = timedelta(days=7)
    algorithm: str = "HS256"

    def __post_init__(self):
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("Access and refresh signing keys must both be set")

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        return cls(
            access_secret=settings.jwt_access_secret,
            refresh_secret=settings.jwt_refresh_secret,
            access_ttl=timedelta(seconds=settings.access_token_ttl_seconds),
            refresh_ttl=timedelta(seconds=settings.refresh_token_ttl_seconds),
            algorithm=settings.jwt_algorithm,
        )


class TokenIssuer:
    """Creates and verifies tokens carrying a user id in the ``sub`` claim."""

    def __init__(self, config: TokenConfig):
        self.config = config

    def _secret(self, token_type: str) -> str:
        if token_type == ACCESS_TOKEN_TYPE:
            return self.config.access_secret
        return self.config.refresh_secret

    def _ttl(self, token_type: str) -> timedelta:
        if token_type == ACCESS_TOKEN_TYPE:
            return self.config.access_ttl
        return self.config.refresh_ttl

    def _create(self, user_id: str, token_type: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "type": token_type,
            "iat": now,
            "exp": now + self._ttl(token_type),
        }
        token = jwt.encode(
            payload, self._secret(token_type), algorithm=self.config.algorithm
        )
        logger.debug(
            "token_created",
            user_id=user_id,
            token_type=token_type,
            expires_seconds=int(self._ttl(token_type).total_seconds()),
        )
        return token

    def _verify(self, token: str, token_type: str) -> str:
        try:
            payload = jwt.decode(
                token,
                self._secret(token_type),
                algorithms=[self.config.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.info("token_rejected", token_type=token_type, reason=str(e))
            raise AuthError("Invalid token")

        if payload.get("type") != token_type:
            raise AuthError("Invalid token")

        return payload["sub"]

    def create_access_token(self, user_id: str) -> str:
        """Create a short-lived access token for ``user_id``."""
        return self._create(user_id, ACCESS_TOKEN_TYPE)

    def create_refresh_token(self, user_id: str) -> str:
        """Create a long-lived refresh token for ``user_id``."""
        return self._create(user_id, REFRESH_TOKEN_TYPE)

    def create_token_pair(self, user_id: str) -> TokenPair:
        """Create an access and a refresh token for ``user_id``."""
        return TokenPair(
            access_token=self.create_access_token(user_id),
            refresh_token=self.create_refresh_token(user_id),
        )

    def verify_access_token(self, token: str) -> str:
        """Return the user id carried by a valid access token.

        Raises:
            AuthError: If the token is malformed, tampered with, expired or
                not an access token
        """
        return self._verify(token, ACCESS_TOKEN_TYPE)

    def verify_refresh_token(self, token: str) -> str:
        """Return the user id carried by a valid refresh token.

        Raises:
            AuthError: If the token is malformed, tampered with, expired or
                not a refresh token
        """
        return self._verify(token, REFRESH_TOKEN_TYPE)

    @property
    def access_max_age(self) -> int:
        """Access token lifetime in seconds, for cookie max-age."""
        return int(self.config.access_ttl.total_seconds())

    @property
    def refresh_max_age(self) -> int:
        """Refresh token lifetime in seconds, for cookie max-age."""
        return int(self.config.refresh_ttl.total_seconds())
