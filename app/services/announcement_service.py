# --------------------------
# File: app/services/announcement_service.py
# Description: Announcement CRUD and display reads joined to the book title
# --------------------------

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import asc, desc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.exceptions import BookNotFound, InvalidRange, NotFound, store_errors
from app.models.announcement_models import Announcement
from app.models.book_models import Book
from app.schemas.announcement_schemas import AnnouncementCreate, AnnouncementOut, AnnouncementUpdate
from app.utils.activity_helpers import log_catalog_activity

logger = logging.getLogger(__name__)


def _select_announcements():
    # Books can be deleted underneath an announcement, so always reload the link
    return select(Announcement).execution_options(populate_existing=True)


async def _validate(db: AsyncSession, data: AnnouncementCreate):
    if data.start_date >= data.end_date:
        raise InvalidRange("End date must be after start date")
    if data.book_id is not None:
        book = (await db.execute(select(Book.id).where(Book.id == data.book_id))).scalars().first()
        if not book:
            raise BookNotFound("Referenced book does not exist")


async def get_announcement_or_404(db: AsyncSession, announcement_id: int) -> Announcement:
    result = await db.execute(_select_announcements().where(Announcement.id == announcement_id))
    announcement = result.scalars().first()
    if not announcement:
        raise NotFound("Announcement not found")
    return announcement


async def _list(db: AsyncSession, *conditions, operation: str):
    stmt = _select_announcements().where(*conditions).order_by(desc(Announcement.start_date), asc(Announcement.id))
    async with store_errors(db, operation):
        rows = (await db.execute(stmt)).scalars().all()
    return [AnnouncementOut.model_validate(a) for a in rows]


# --------------------------
# CREATE
# --------------------------
async def create_announcement(db: AsyncSession, data: AnnouncementCreate, current_user=None):
    async with store_errors(db, "creating announcement"):
        await _validate(db, data)

        announcement = Announcement(**data.model_dump())
        db.add(announcement)
        await db.flush()

        await log_catalog_activity(
            db,
            user=current_user,
            message=f"Created announcement '{announcement.title}' (ID: {announcement.id})",
        )
        await db.commit()
        announcement = await get_announcement_or_404(db, announcement.id)

    return {"message": "Announcement created successfully", "data": AnnouncementOut.model_validate(announcement)}


# --------------------------
# READ
# --------------------------
async def get_announcement(db: AsyncSession, announcement_id: int):
    async with store_errors(db, "fetching announcement"):
        announcement = await get_announcement_or_404(db, announcement_id)
    return {"message": "Announcement fetched successfully", "data": AnnouncementOut.model_validate(announcement)}


async def list_announcements(db: AsyncSession):
    return await _list(db, operation="listing announcements")


async def list_active_announcements(db: AsyncSession, now: datetime, category: Optional[str] = None):
    """Switched-on announcements whose window contains `now`, optionally for one category."""
    conditions = [
        Announcement.is_active == True,  # noqa: E712
        Announcement.start_date <= now,
        Announcement.end_date >= now,
    ]
    if category is not None:
        conditions.append(Announcement.category == category)
    return await _list(db, *conditions, operation="listing active announcements")


async def list_announcements_by_book(db: AsyncSession, book_id: int):
    return await _list(db, Announcement.book_id == book_id, operation="listing announcements by book")


async def list_announcement_categories(db: AsyncSession):
    stmt = (
        select(Announcement.category)
        .where(Announcement.category != None)  # noqa: E711
        .distinct()
        .order_by(asc(Announcement.category))
    )
    async with store_errors(db, "listing announcement categories"):
        return list((await db.execute(stmt)).scalars().all())


# --------------------------
# UPDATE (full replacement)
# --------------------------
async def update_announcement(db: AsyncSession, announcement_id: int, data: AnnouncementUpdate, current_user=None):
    async with store_errors(db, "updating announcement"):
        announcement = await get_announcement_or_404(db, announcement_id)
        await _validate(db, data)

        for key, value in data.model_dump().items():
            setattr(announcement, key, value)

        await log_catalog_activity(
            db,
            user=current_user,
            message=f"Updated announcement '{announcement.title}' (ID: {announcement.id})",
        )
        await db.commit()
        announcement = await get_announcement_or_404(db, announcement_id)

    return {"message": "Announcement updated successfully", "data": AnnouncementOut.model_validate(announcement)}


async def toggle_announcement(db: AsyncSession, announcement_id: int, current_user=None):
    async with store_errors(db, "toggling announcement"):
        announcement = await get_announcement_or_404(db, announcement_id)
        announcement.is_active = not announcement.is_active
        state = "active" if announcement.is_active else "inactive"

        await log_catalog_activity(
            db,
            user=current_user,
            message=f"Announcement '{announcement.title}' (ID: {announcement.id}) is now {state}",
        )
        await db.commit()

    return {"message": f"Announcement is now {state}", "data": AnnouncementOut.model_validate(announcement)}


# --------------------------
# DELETE
# --------------------------
async def delete_announcement(db: AsyncSession, announcement_id: int, current_user=None):
    async with store_errors(db, "deleting announcement"):
        announcement = await get_announcement_or_404(db, announcement_id)
        title = announcement.title
        await db.delete(announcement)

        await log_catalog_activity(
            db,
            user=current_user,
            message=f"Deleted announcement '{title}' (ID: {announcement_id})",
        )
        await db.commit()

    logger.info("Deleted announcement %s", announcement_id)
    return {"message": "Announcement deleted successfully"}
