"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import redis.asyncio as redis  # type: ignore[import-untyped]
from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi_limiter import FastAPILimiter
from secure import Secure
from starlette.staticfiles import StaticFiles

from petmanager.api import api_router
from petmanager.core.config import get_settings
from petmanager.core.logging import configure_logging
from petmanager.services.error_translator import GENERIC_MESSAGE, log_failure

logger = logging.getLogger(__name__)

settings = get_settings()
configure_logging()

_ALLOWED_ORIGINS = [origin for origin in settings.cors_allow_origins if origin]
if not _ALLOWED_ORIGINS:
    _ALLOWED_ORIGINS = ["http://localhost:5173"]


@asynccontextmanager
async def lifespan(_: FastAPI):
    redis_pool = None
    if settings.redis_url:
        try:
            redis_pool = redis.from_url(
                settings.redis_url, encoding="utf-8", decode_responses=True
            )
            await FastAPILimiter.init(redis_pool)
        except Exception:  # pragma: no cover - limiter startup is best effort
            logger.exception("Failed to initialize rate limiter")
            FastAPILimiter.redis = None
    try:
        yield
    finally:
        if redis_pool is not None:
            try:
                await FastAPILimiter.close()
            except Exception:  # pragma: no cover - limiter shutdown
                logger.exception("Failed to close rate limiter")
            finally:
                await redis_pool.aclose()


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_ALLOWED_ORIGINS,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID", "X-Invalidate-Paths", "Location"],
)
app.add_middleware(CorrelationIdMiddleware, header_name="X-Request-ID")

_secure_headers = Secure()


@app.middleware("http")
async def _apply_security_headers(request, call_next):  # type: ignore[no-untyped-def]
    response = await call_next(request)
    _secure_headers.set_headers(response)
    return response


@app.exception_handler(Exception)
async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    log_failure(exc, f"{request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": GENERIC_MESSAGE})


app.include_router(api_router)

if not settings.storage_public_base_url and not settings.s3_endpoint_url:
    # serve the local bucket under the same path public_image_url produces
    _bucket_dir = (settings.storage_root or Path.cwd() / ".storage") / settings.s3_bucket
    _bucket_dir.mkdir(parents=True, exist_ok=True)
    app.mount(
        f"/{settings.s3_bucket}",
        StaticFiles(directory=_bucket_dir),
        name="pet-images",
    )


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Return a simple welcome message."""
    return {"message": settings.app_name}
