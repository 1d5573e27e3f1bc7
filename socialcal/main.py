"""
SocialCal API - FastAPI application entry point.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import get_settings
from .database import engine, Base
from .logging_config import api_logger
from .middleware import SecurityHeadersMiddleware, RequestLoggingMiddleware
from .limiter import limiter
from .responses import api_exception_handler
from .routes import (
    upload_router,
    drafts_router,
    schedule_router,
    accounts_router,
    publish_router,
    cron_router,
    health_router,
)

settings = get_settings()

# Create tables (in production, use migrations instead)
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown"""
    api_logger.info(
        "SocialCal API starting",
        environment=settings.environment,
        platform_api=settings.platform_api_base_url,
    )
    yield
    api_logger.info("SocialCal API stopped")


app = FastAPI(
    title="SocialCal API",
    description="Multi-platform post publishing and scheduling",
    version=__version__,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# JSON error bodies
app.add_exception_handler(StarletteHTTPException, api_exception_handler)
app.add_exception_handler(Exception, api_exception_handler)

# Security headers middleware
app.add_middleware(SecurityHeadersMiddleware)

# Request logging middleware (only in debug mode)
if settings.debug:
    app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
        "X-Request-ID",
    ],
    max_age=3600,  # Cache preflight requests for 1 hour
)

# Routes
app.include_router(upload_router)
app.include_router(drafts_router)
app.include_router(schedule_router)
app.include_router(accounts_router)
app.include_router(publish_router)
app.include_router(cron_router)
app.include_router(health_router)


@app.get("/")
def root():
    """API index."""
    return {
        "message": "SocialCal API",
        "docs": "/api/docs" if settings.debug else "Disabled in production",
    }
