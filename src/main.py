"""FastAPI application initialization."""

from contextlib import asynccontextmanager
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.api.auth import router as auth_router
from src.api.middleware import CORRELATION_HEADER, CorrelationIdMiddleware
from src.config import get_settings
from src.errors import AuthServiceError
from src.services.logging_service import configure_logging, get_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = get_logger("main")

    try:
        from src.database import init_database

        await init_database()
        logger.info("database_initialized")
    except Exception as e:
        logger.warning(
            "database_initialization_failed",
            error=str(e),
            note="Continuing without database - auth endpoints will return 500",
        )

    if settings.otp_store_backend.lower() == "redis":
        from src.services.redis_service import get_redis

        if await get_redis() is None:
            logger.warning(
                "redis_initialization_failed",
                note="Continuing without Redis - password resets will fail",
            )
        else:
            logger.info("redis_initialized")

    logger.info(
        "application_started",
        otp_store_backend=settings.otp_store_backend,
        log_level=settings.log_level,
    )

    yield

    from src.database import close_database
    from src.services.redis_service import close_redis

    await close_database()
    await close_redis()

    logger.info("application_shutdown")


app = FastAPI(
    title="Account Auth API",
    description="Registration, sign-in, token refresh and OTP password reset",
    version="0.1.0",
    lifespan=lifespan,
)


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or str(uuid4())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors as 400 Bad Request."""
    correlation_id = _correlation_id(request)
    logger = structlog.get_logger()

    errors = exc.errors()
    if errors:
        first_error = errors[0]
        field = ".".join(str(loc) for loc in first_error.get("loc", ["unknown"]))
        message = first_error.get("msg", "Validation failed")
        detail = f"Field '{field}': {message}"
    else:
        detail = "Request validation failed"

    logger.warning("validation_error", detail=detail)

    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid data",
            "detail": detail,
            "correlation_id": correlation_id,
        },
        headers={CORRELATION_HEADER: correlation_id},
    )


@app.exception_handler(AuthServiceError)
async def auth_service_exception_handler(
    request: Request, exc: AuthServiceError
) -> JSONResponse:
    """Render domain errors with their status code and client-safe message."""
    logger = structlog.get_logger()
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "request_failed",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        detail=exc.message,
        exc_info=exc if exc.status_code >= 500 else False,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and hide their details from the client."""
    correlation_id = _correlation_id(request)
    structlog.get_logger().error(
        "unhandled_exception",
        correlation_id=correlation_id,
        error_type=type(exc).__name__,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "correlation_id": correlation_id},
        headers={CORRELATION_HEADER: correlation_id},
    )


@app.get("/health")
async def health() -> dict:
    """Report database and Redis connectivity."""
    from src.database import health_check as database_health
    from src.services.redis_service import health_check as redis_health

    database_ok = await database_health()
    redis_ok = await redis_health()
    return {
        "status": "ok" if database_ok else "degraded",
        "database": database_ok,
        "redis": redis_ok,
    }


# Correlation ID middleware for request tracking and observability
app.add_middleware(CorrelationIdMiddleware)

app.include_router(auth_router)
