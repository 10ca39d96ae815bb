from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.exceptions import NotFound
from app.schemas.book_schemas import MessageResponse
from app.schemas.discount_schemas import (
    DiscountCreate,
    DiscountListResponse,
    DiscountResponse,
    DiscountUpdate,
    ReconcileResponse,
)
from app.services.pricing_services import discount_service
from app.utils.check_roles import require_admin
from app.utils.get_user import get_current_user
from app.utils.time_helpers import utc_now

router = APIRouter(prefix="/discounts", tags=["Discounts"])


@router.post("/", response_model=DiscountResponse, status_code=status.HTTP_201_CREATED)
@require_admin
async def route_create_discount(
    payload: DiscountCreate,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(utc_now),
    _user=Depends(get_current_user),
):
    """
    Create a discount for a book. With is_on_sale the book goes on sale
    immediately; a book can only have one active discount at a time.
    """
    return await discount_service.create_discount(db, payload, now, _user)


@router.get("/", response_model=DiscountListResponse)
async def route_get_all_discounts(
    db: AsyncSession = Depends(get_db),
    book_id: Optional[int] = Query(None, description="Only discounts for this book"),
):
    result = await discount_service.list_discounts(db, book_id)
    if not result["data"]:
        raise NotFound("No discounts found")
    return result


@router.get("/active", response_model=DiscountListResponse)
async def route_get_active_discounts(db: AsyncSession = Depends(get_db), now: datetime = Depends(utc_now)):
    result = await discount_service.list_active_discounts(db, now)
    if not result["data"]:
        raise NotFound("No active discounts found")
    return result


@router.post("/reconcile", response_model=ReconcileResponse)
@require_admin
async def route_reconcile_expired_sales(
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(utc_now),
    _user=Depends(get_current_user),
):
    """Clear stored sale flags whose end date has passed. Never runs on its own."""
    return await discount_service.reconcile_expired_sales(db, now, _user)


@router.get("/{discount_id}", response_model=DiscountResponse)
async def route_get_discount(discount_id: int, db: AsyncSession = Depends(get_db)):
    """Fetch a single discount by ID."""
    return await discount_service.get_discount(db, discount_id)


@router.put("/{discount_id}", response_model=DiscountResponse)
@require_admin
async def route_update_discount(
    discount_id: int,
    payload: DiscountUpdate,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(utc_now),
    _user=Depends(get_current_user),
):
    """Update percentage, dates or activation; the book's sale price follows."""
    return await discount_service.update_discount(db, discount_id, payload, now, _user)


@router.delete("/{discount_id}", response_model=MessageResponse)
@require_admin
async def route_delete_discount(
    discount_id: int,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(utc_now),
    _user=Depends(get_current_user),
):
    return await discount_service.delete_discount(db, discount_id, now, _user)
