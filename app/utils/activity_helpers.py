# app/utils/activity_helpers.py
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_models import CatalogActivity

logger = logging.getLogger("app.activity")

SYSTEM_USER = "system"


async def log_catalog_activity(db: AsyncSession, user=None, message: str = ""):
    """
    Adds a catalog audit row for the acting admin to the session.
    The caller commits, so the row lands in the same transaction as the change it describes.
    Writes without an authenticated user (scripts, tests) are recorded as "system".
    """
    username = user.username if user is not None else SYSTEM_USER
    db.add(CatalogActivity(username=username, message=message))
    logger.info("[%s] %s", username, message)
