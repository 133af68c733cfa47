"""Domain exceptions raised by the auth services.

Each exception carries the HTTP status it maps to and a message that is
safe to return to clients. Internal details belong in the log, not here.
"""


class AuthServiceError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AuthServiceError):
    """Input the schema accepted but the services cannot process."""

    status_code = 400
    default_message = "Invalid data"


class NotFoundError(AuthServiceError):
    """No user with the requested username."""

    status_code = 404
    default_message = "User not found"


class ConflictError(AuthServiceError):
    """Username already taken.

    Rendered exactly like any other failed insert, so a response never
    reveals whether a username is registered.
    """

    status_code = 500
    default_message = "Failed to create user"


class AuthError(AuthServiceError):
    """Bad password, invalid or expired token, or invalid OTP."""

    status_code = 401
    default_message = "Invalid credentials"


class PersistenceError(AuthServiceError):
    """The credential or OTP store failed."""

    status_code = 500
    default_message = "Internal server error"
