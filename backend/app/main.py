# backend/app/main.py

import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as SA_TimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import models  # noqa: F401  registers tables on Base.metadata
from .api import api_booking, api_business, api_movers
from .core.config import settings
from .core.observability import setup_logging
from .database import Base, engine
from .utils.redis_cache import close_redis_client

setup_logging()
logger = logging.getLogger(__name__)

# Always use ORJSONResponse for JSON payloads to ensure consistent, fast
# serialization across all endpoints.
app = FastAPI(title="Haulers Booking API", default_response_class=ORJSONResponse)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    # Browsers reject a wildcard origin combined with credentials.
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.info("CORS origins set to: %s", settings.CORS_ORIGINS)


@app.middleware("http")
async def catch_exceptions(request: Request, call_next):
    """Return JSON responses for HTTP errors and log them."""
    try:
        response = await call_next(request)
    except StarletteHTTPException as exc:  # return the original status and detail
        logger.error(
            "HTTP error %s at %s: %s", exc.status_code, request.url.path, exc.detail
        )
        response = ORJSONResponse(
            status_code=exc.status_code, content={"detail": exc.detail}
        )
    except SA_TimeoutError as exc:  # DB pool timeout -> 503 to reduce retry storms
        logger.error("DB timeout at %s: %s", request.url.path, str(exc))
        response = ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Database busy, please retry"},
        )
    except Exception as exc:  # pragma: no cover - generic handler
        logger.exception("Unhandled error: %s", exc)
        response = ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error"},
        )
    return response


def _jsonable_errors(errors):
    # pydantic v2 keeps the raw exception under ctx["error"]
    cleaned = []
    for err in errors:
        err = dict(err)
        ctx = err.get("ctx")
        if isinstance(ctx, dict) and "error" in ctx:
            err["ctx"] = {**ctx, "error": str(ctx["error"])}
        cleaned.append(err)
    return cleaned


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return validation errors with details and log them for debugging."""
    errors = exc.errors()
    logger.warning("Validation error at %s: %s", request.url.path, errors)
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": _jsonable_errors(errors)},
    )


api_prefix = settings.API_V1_STR  # usually something like "/api/v1"

app.include_router(api_booking.router, prefix=f"{api_prefix}/bookings", tags=["bookings"])
app.include_router(api_business.router, prefix=f"{api_prefix}/businesses", tags=["businesses"])
app.include_router(api_movers.router, prefix=f"{api_prefix}/movers", tags=["movers"])


@app.get("/healthz", tags=["health"])
async def healthz():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"message": "Welcome to Haulers Booking API"}


@app.on_event("startup")
def create_local_tables() -> None:
    """Create tables for local SQLite runs; hosted databases manage their own schema."""
    if os.getenv("SKIP_DB_BOOTSTRAP", "0") == "1":
        return
    if not settings.SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
        return
    try:
        Base.metadata.create_all(bind=engine)
    except OperationalError as exc:
        logger.warning("Local table bootstrap skipped: %s", exc)


@app.on_event("shutdown")
def shutdown_redis_client() -> None:
    """Close Redis connections when the application shuts down."""
    logger.info("Closing Redis client")
    close_redis_client()
