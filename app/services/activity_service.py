# app/services/activity_service.py
from sqlalchemy import select, desc, asc, func
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional, Tuple

from app.core.exceptions import store_errors
from app.models.activity_models import CatalogActivity

ALLOWED_SORT_FIELDS = {"id", "username", "created_at"}


async def get_catalog_activities(
    db: AsyncSession,
    username: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
    sort_by: str = "created_at",
    order: str = "desc"
) -> Tuple[int, List[CatalogActivity]]:
    if sort_by not in ALLOWED_SORT_FIELDS:
        sort_by = "created_at"

    sort_column = getattr(CatalogActivity, sort_by)
    sort_order = desc(sort_column) if order.lower() == "desc" else asc(sort_column)

    filters = []
    if username:
        filters.append(CatalogActivity.username.ilike(f"%{username}%"))

    stmt = select(CatalogActivity).where(*filters)
    count_stmt = select(func.count(CatalogActivity.id)).where(*filters)

    async with store_errors(db, "fetching activities"):
        total = (await db.execute(count_stmt)).scalar() or 0

        # Newest id last among equal timestamps
        stmt = stmt.order_by(sort_order, desc(CatalogActivity.id)).offset((page - 1) * page_size).limit(page_size)
        activities = (await db.execute(stmt)).scalars().all()

    return total, list(activities)
