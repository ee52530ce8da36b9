"""ContentFlow - FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from config import DEFAULT_JWT_SECRET, get_settings
from database import engine
from middleware.errors import register_exception_handlers
from middleware.rate_limit import limiter, rate_limit_exceeded_handler
from models import Base
from routers import (
    auth_router,
    clients_router,
    content_router,
    hashtags_router,
    notifications_router,
    social_router,
    users_router,
    workspaces_router,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - create tables on startup, release the pool on shutdown."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # Security check: Warn if using default JWT secret in production
    if not settings.debug and settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning(
            "SECURITY WARNING: Using default JWT secret in production! "
            "Set JWT_SECRET environment variable to a secure random value."
        )

    logger.info(f"{settings.app_name} started")

    yield

    await engine.dispose()


app = FastAPI(
    title="ContentFlow API",
    description="Content planning and approval platform for creators, agencies and their clients",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Error bodies
register_exception_handlers(app)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(workspaces_router)
app.include_router(clients_router)
app.include_router(content_router)
app.include_router(hashtags_router)
app.include_router(notifications_router)
app.include_router(social_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "contentflow"}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "ContentFlow API",
        "version": "0.1.0",
        "docs": "/docs",
    }
