"""Version 1 API endpoints."""

from .endpoints import (
    follows_router,
    message_requests_router,
    notifications_router,
    threads_router,
    users_router,
)

__all__ = [
    "follows_router",
    "message_requests_router",
    "notifications_router",
    "threads_router",
    "users_router",
]
