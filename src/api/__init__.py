"""API package exports."""

from src.api.auth import router
from src.api.middleware import CorrelationIdMiddleware

__all__ = ["router", "CorrelationIdMiddleware"]
