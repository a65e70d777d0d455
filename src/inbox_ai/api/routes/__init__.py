"""API routers."""

from .actions import router as actions_router
from .analytics import router as analytics_router
from .auth import router as auth_router
from .calendar import router as calendar_router
from .chat import router as chat_router
from .dashboard import router as dashboard_router
from .emails import router as emails_router
from .sync import router as sync_router
from .tasks import router as tasks_router

__all__ = [
    "actions_router",
    "analytics_router",
    "auth_router",
    "calendar_router",
    "chat_router",
    "dashboard_router",
    "emails_router",
    "sync_router",
    "tasks_router",
]
