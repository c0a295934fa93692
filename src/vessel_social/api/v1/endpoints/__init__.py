"""API v1 endpoint routers."""

from .follows import router as follows_router
from .message_requests import router as message_requests_router
from .notifications import router as notifications_router
from .threads import router as threads_router
from .users import router as users_router

__all__ = [
    "follows_router",
    "message_requests_router",
    "notifications_router",
    "threads_router",
    "users_router",
]
