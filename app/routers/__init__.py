# app/routers/__init__.py

from .activity_router import router as activity_router
from .announcements_router import router as announcements_router
from .catalog import router as catalog_router
from .pricing import router as pricing_router

__all__ = [
    "activity_router",
    "announcements_router",
    "catalog_router",
    "pricing_router",
]
