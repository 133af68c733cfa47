"""Authentication service: sign-up, sign-in, token refresh and password reset."""

from typing import Optional
from uuid import UUID

import structlog

from src.config import get_settings
from src.errors import AuthError, NotFoundError, ValidationError
from src.models.user import User, UserProfile
from src.services.email_service import EmailService
from src.services.otp_service import OTPStore, build_otp_store
from src.services.password_service import BcryptPasswordHasher, PasswordHasher
from src.services.token_service import TokenConfig, TokenIssuer, TokenPair
from src.services.user_service import UserService

logger = structlog.get_logger(__name__)

FORGOT_PASSWORD_MESSAGE = (
    "If the user is registered, you will receive an OTP within 5 minutes"
)


class AuthService:
    """Orchestrates the credential store, OTP store, token issuer and mailer.

    Every collaborator can be injected; anything omitted is built from
    application settings.
    """

    def __init__(
        self,
        users: Optional[UserService] = None,
        otp_store: Optional[OTPStore] = None,
        tokens: Optional[TokenIssuer] = None,
        hasher: Optional[PasswordHasher] = None,
        mailer: Optional[EmailService] = None,
    ):
        self.users = users if users is not None else UserService()
        if otp_store is None:
            otp_store = build_otp_store(get_settings())
        if tokens is None:
            tokens = TokenIssuer(TokenConfig.from_settings(get_settings()))
        if hasher is None:
            hasher = BcryptPasswordHasher(rounds=get_settings().bcrypt_rounds)
        self.otp_store = otp_store
        self.tokens = tokens
        self.hasher = hasher
        self.mailer = mailer if mailer is not None else EmailService()

    def _hash_password(self, password: str) -> str:
        try:
            return self.hasher.hash(password)
        except ValueError as e:
            logger.info("password_rejected_by_hasher", error=str(e))
            raise ValidationError() from e

    async def sign_up(
        self,
        username: str,
        password: str,
        name: str,
        image: Optional[str] = None,
    ) -> User:
        """Register a new user.

        Raises:
            ValidationError: If the hasher cannot accept the password
            ConflictError: If the username is already taken
            PersistenceError: If the store fails
        """
        password_hash = self._hash_password(password)
        return await self.users.create_user(
            username=username,
            password_hash=password_hash,
            name=name,
            image=image,
        )

    async def sign_in(self, username: str, password: str) -> tuple[User, TokenPair]:
        """Check credentials and issue an access/refresh token pair.

        Raises:
            NotFoundError: If no user has this username
            AuthError: If the password does not match
        """
        result = await self.users.get_by_username(username)
        if result is None:
            logger.info("sign_in_unknown_user", username=username)
            raise NotFoundError()

        user, password_hash = result

        if not self.hasher.verify(password, password_hash):
            logger.info("sign_in_failed", username=username, user_id=str(user.id))
            raise AuthError("Invalid password")

        pair = self.tokens.create_token_pair(str(user.id))
        logger.info("user_signed_in", user_id=str(user.id), username=username)
        return user, pair

    def refresh(self, refresh_token: Optional[str]) -> str:
        """Mint a new access token from a refresh token.

        The refresh token itself is not rotated.

        Raises:
            AuthError: If the token is missing, invalid or expired
        """
        if not refresh_token:
            raise AuthError("Invalid token")

        user_id = self.tokens.verify_refresh_token(refresh_token)
        access_token = self.tokens.create_access_token(user_id)
        logger.info("access_token_refreshed", user_id=user_id)
        return access_token

    async def forgot_password(self, username: str) -> str:
        """Issue and dispatch an OTP if the user exists.

        Returns the same message whether or not the user is registered.
        """
        result = await self.users.get_by_username(username)

        if result is None:
            logger.info("forgot_password_unknown_user", username=username)
            return FORGOT_PASSWORD_MESSAGE

        code = self.otp_store.generate()
        await self.otp_store.store(username, code)
        await self.mailer.send_otp_email(username, code)

        logger.info("forgot_password_otp_issued", username=username)
        return FORGOT_PASSWORD_MESSAGE

    async def reset_password(self, username: str, otp: str, new_password: str) -> None:
        """Replace the password of ``username`` using a single-use OTP.

        The new password is hashed before the OTP is consumed, so a password
        the hasher rejects leaves the code usable.

        Raises:
            ValidationError: If the hasher cannot accept the new password
            AuthError (403): If the OTP is wrong or expired, or the user is gone
        """
        password_hash = self._hash_password(new_password)

        if not await self.otp_store.consume(username, otp):
            raise AuthError("Invalid OTP", status_code=403)

        if await self.users.get_by_username(username) is None:
            raise AuthError("Invalid credentials", status_code=403)

        if not await self.users.update_password(username, password_hash):
            raise AuthError("Invalid credentials", status_code=403)

        logger.info("password_reset", username=username)

    async def get_profile(self, username: str) -> UserProfile:
        """Return the public profile of ``username``.

        Raises:
            NotFoundError: If no user has this username
        """
        profile = await self.users.get_profile(username)
        if profile is None:
            raise NotFoundError()
        return profile

    async def get_profile_by_id(self, user_id: str) -> UserProfile:
        """Return the public profile for the user id carried by a token.

        Raises:
            AuthError: If the id is malformed or the user no longer exists
        """
        try:
            uid = UUID(user_id)
        except ValueError:
            raise AuthError("Invalid token")

        user = await self.users.get_by_id(uid)
        if user is None:
            raise AuthError("User not found")
        return UserProfile.from_user(user)
