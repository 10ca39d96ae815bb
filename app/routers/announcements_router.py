from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.exceptions import NotFound
from app.schemas.announcement_schemas import (
    AnnouncementCreate,
    AnnouncementListResponse,
    AnnouncementResponse,
    AnnouncementUpdate,
    CategoryListResponse,
)
from app.schemas.book_schemas import MessageResponse
from app.services import announcement_service
from app.utils.check_roles import require_admin
from app.utils.get_user import get_current_user
from app.utils.time_helpers import utc_now

router = APIRouter(prefix="/announcements", tags=["Announcements"])


def _non_empty(data, detail: str):
    if not data:
        raise NotFound(detail)
    return data


@router.get("/", response_model=AnnouncementListResponse)
async def list_announcements_route(db: AsyncSession = Depends(get_db)):
    data = _non_empty(await announcement_service.list_announcements(db), "No announcements found")
    return {"message": "Announcements fetched successfully", "data": data}


@router.get("/active", response_model=AnnouncementListResponse)
async def list_active_announcements_route(db: AsyncSession = Depends(get_db), now: datetime = Depends(utc_now)):
    data = _non_empty(
        await announcement_service.list_active_announcements(db, now),
        "No active announcements found",
    )
    return {"message": "Active announcements fetched successfully", "data": data}


@router.get("/categories", response_model=CategoryListResponse)
async def list_announcement_categories_route(db: AsyncSession = Depends(get_db)):
    categories = await announcement_service.list_announcement_categories(db)
    return {"message": "Announcement categories fetched successfully", "data": categories}


@router.get("/category/{category}", response_model=AnnouncementListResponse)
async def list_announcements_by_category_route(
    category: str,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(utc_now),
):
    data = _non_empty(
        await announcement_service.list_active_announcements(db, now, category=category),
        f"No active announcements found for category: {category}",
    )
    return {"message": "Announcements fetched successfully", "data": data}


@router.get("/book/{book_id}", response_model=AnnouncementListResponse)
async def list_announcements_by_book_route(book_id: int, db: AsyncSession = Depends(get_db)):
    data = _non_empty(
        await announcement_service.list_announcements_by_book(db, book_id),
        f"No announcements found for book ID: {book_id}",
    )
    return {"message": "Announcements fetched successfully", "data": data}


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
async def get_announcement_route(announcement_id: int, db: AsyncSession = Depends(get_db)):
    return await announcement_service.get_announcement(db, announcement_id)


@router.post("/", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
@require_admin
async def create_announcement_route(
    payload: AnnouncementCreate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await announcement_service.create_announcement(db, payload, _user)


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
@require_admin
async def update_announcement_route(
    announcement_id: int,
    payload: AnnouncementUpdate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await announcement_service.update_announcement(db, announcement_id, payload, _user)


@router.patch("/{announcement_id}/toggle-active", response_model=AnnouncementResponse)
@require_admin
async def toggle_announcement_route(
    announcement_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await announcement_service.toggle_announcement(db, announcement_id, _user)


@router.delete("/{announcement_id}", response_model=MessageResponse)
@require_admin
async def delete_announcement_route(
    announcement_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await announcement_service.delete_announcement(db, announcement_id, _user)
