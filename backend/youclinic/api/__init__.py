"""
API route controllers for YouClinic CRM.

Contains FastAPI routers for different endpoints.
Routes handle HTTP requests and delegate to services for business logic.
"""

from .health import router as health_router
from .auth import router as auth_router
from .users import router as users_router
from .leads import router as leads_router
from .files import router as files_router
from .transfers import router as transfers_router
from .logs import router as logs_router
from .calendar import router as calendar_router
from .proforma import router as proforma_router, link_router as proforma_link_router
from .webhooks import router as webhooks_router

__all__ = [
    "health_router",
    "auth_router",
    "users_router",
    "leads_router",
    "files_router",
    "transfers_router",
    "logs_router",
    "calendar_router",
    "proforma_router",
    "proforma_link_router",
    "webhooks_router",
]
