"""Routers package."""

from .auth import router as auth_router
from .clients import router as clients_router
from .content import router as content_router
from .hashtags import router as hashtags_router
from .notifications import router as notifications_router
from .social import router as social_router
from .users import router as users_router
from .workspaces import router as workspaces_router

__all__ = [
    "auth_router",
    "clients_router",
    "content_router",
    "hashtags_router",
    "notifications_router",
    "social_router",
    "users_router",
    "workspaces_router",
]
