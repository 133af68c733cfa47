"""Services package exports."""

from src.services.auth_service import AuthService
from src.services.logging_service import configure_logging, get_logger

__all__ = [
    "AuthService",
    "configure_logging",
    "get_logger",
]
