"""Main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import select
from starlette.concurrency import run_in_threadpool

from .core import BaseError, get_settings
from .infrastructure.database import engine, AsyncSessionFactory
from .deps import SessionDep
from .models import Base
from .api.v1.api import api_v1_router
from .api.v1.middleware import (
    base_error_handler,
    validation_exception_handler,
    ratelimit_handler,
    unhandled_exception_handler,
)
from .rate_limit import limiter
from .services.auth_service import AuthService
from . import storage

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    if settings.DB_CREATE_ALL:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    # Ensure the configured admin account exists
    async with AsyncSessionFactory() as s:
        await AuthService(s).ensure_admin(settings)
        await s.commit()

    logger.info("Turismo API started")
    yield

    # Shutdown
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Turismo API",
    description="Tour package catalog and booking API",
    version="1.0.0",
    lifespan=lifespan
)

# Attach rate-limiter
app.state.limiter = limiter

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"]
)

# Rate limiting
app.add_exception_handler(RateLimitExceeded, ratelimit_handler)
app.add_middleware(SlowAPIMiddleware)

# Exception handling
app.add_exception_handler(BaseError, base_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Include v1 API with all endpoints
app.include_router(api_v1_router, prefix="/api/v1")


# Health check
@app.get("/healthz")
async def healthz(sess: SessionDep):
    """Health check endpoint."""
    status = {"db": "ok", "s3": "ok"}

    try:
        await sess.scalar(select(1))
    except Exception:
        logger.exception("Database health check failed")
        status["db"] = "error"

    try:
        await run_in_threadpool(storage.get_client().bucket_exists, settings.S3_BUCKET)
    except Exception as exc:
        logger.warning("Storage health check failed: %s", exc)
        status["s3"] = "error"

    return status


# Root endpoint
@app.get("/")
async def root():
    """API root."""
    return {
        "message": "Welcome to Turismo API",
        "docs": "/docs",
        "health": "/healthz"
    }
