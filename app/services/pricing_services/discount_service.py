# --------------------------
# File: app/services/pricing_services/discount_service.py
# Description: Discount persistence. Every mutation re-derives the owning
# book's sale fields through the discount ledger inside the same transaction.
# --------------------------

import logging
from datetime import datetime

from sqlalchemy import desc, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.exceptions import (
    BookNotFound,
    ConflictingActiveDiscount,
    InvalidRange,
    NotFound,
    ValidationError,
    store_errors,
)
from app.models.book_models import Book
from app.models.discount_models import Discount
from app.schemas.discount_schemas import DiscountCreate, DiscountOut, DiscountUpdate
from app.services.pricing_services.discount_ledger import (
    apply_discount,
    clear_sale,
    is_active,
    is_driving,
    resync_sale,
)
from app.utils.activity_helpers import log_catalog_activity

logger = logging.getLogger(__name__)


def _validate_period(start_date: datetime, end_date: datetime):
    if start_date >= end_date:
        raise InvalidRange("Start date must be before end date")


async def get_discount_or_404(db: AsyncSession, discount_id: int) -> Discount:
    result = await db.execute(select(Discount).where(Discount.id == discount_id))
    discount = result.scalars().first()
    if not discount:
        raise NotFound("Discount not found")
    return discount


async def find_active_discount(db: AsyncSession, book_id: int, now: datetime, exclude_id: int | None = None):
    stmt = select(Discount).where(
        Discount.book_id == book_id,
        Discount.is_on_sale == True,  # noqa: E712
        Discount.end_date > now,
    )
    if exclude_id is not None:
        stmt = stmt.where(Discount.id != exclude_id)
    return (await db.execute(stmt)).scalars().first()


# -----------------------
# CREATE
# -----------------------
async def create_discount(db: AsyncSession, payload: DiscountCreate, now: datetime, current_user=None):
    """
    Record a discount for a book. An activated discount that has not ended
    drives the book's sale fields straight away; an existing active discount
    is never silently replaced.
    """
    _validate_period(payload.start_date, payload.end_date)

    async with store_errors(db, "creating discount"):
        book = (await db.execute(select(Book).where(Book.id == payload.book_id))).scalars().first()
        if not book:
            raise BookNotFound()

        existing = await find_active_discount(db, book.id, now)
        if existing:
            logger.warning("Book %s already has active discount %s", book.id, existing.id)
            raise ConflictingActiveDiscount()

        discount = Discount(**payload.model_dump(), created_at=now, updated_at=now)
        discount.book = book
        db.add(discount)

        if is_active(discount, now):
            apply_discount(book, discount).write_to(book)
            book.updated_at = now
            logger.info("Applied %s%% discount to book %s, sale price %s", discount.percentage, book.id, book.discount_price)

        await db.flush()
        await log_catalog_activity(
            db,
            user=current_user,
            message=f"Created {discount.percentage}% discount (ID: {discount.id}) for '{book.title}'",
        )

        await db.commit()
        await db.refresh(discount)

    return {"message": "Discount created successfully", "data": DiscountOut.model_validate(discount)}


# -----------------------
# READ
# -----------------------
async def get_discount(db: AsyncSession, discount_id: int):
    async with store_errors(db, "fetching discount"):
        discount = await get_discount_or_404(db, discount_id)
    return {"message": "Discount fetched successfully", "data": DiscountOut.model_validate(discount)}


async def list_discounts(db: AsyncSession, book_id: int | None = None):
    stmt = select(Discount).order_by(desc(Discount.start_date), Discount.id)
    if book_id is not None:
        stmt = stmt.where(Discount.book_id == book_id)
    async with store_errors(db, "listing discounts"):
        discounts = (await db.execute(stmt)).scalars().all()
    return {"message": "Discounts fetched successfully", "data": [DiscountOut.model_validate(d) for d in discounts]}


async def list_active_discounts(db: AsyncSession, now: datetime):
    """Switched-on discounts whose window contains `now`."""
    stmt = (
        select(Discount)
        .where(
            Discount.is_on_sale == True,  # noqa: E712
            Discount.start_date <= now,
            Discount.end_date > now,
        )
        .order_by(Discount.end_date, Discount.id)
    )
    async with store_errors(db, "listing active discounts"):
        discounts = (await db.execute(stmt)).scalars().all()
    return {"message": "Active discounts fetched successfully", "data": [DiscountOut.model_validate(d) for d in discounts]}


# -----------------------
# UPDATE
# -----------------------
async def update_discount(db: AsyncSession, discount_id: int, payload: DiscountUpdate, now: datetime, current_user=None):
    """
    Partial update. An active result re-prices the book from its current price;
    a discount that stops being active hands the book back to whatever else is active.
    """
    update_data = payload.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        if value is None:
            raise ValidationError(f"{key} cannot be null")

    async with store_errors(db, "updating discount"):
        discount = await get_discount_or_404(db, discount_id)

        if "book_id" in update_data and update_data["book_id"] != discount.book_id:
            raise ValidationError("A discount cannot be moved to another book")

        _validate_period(
            update_data.get("start_date", discount.start_date),
            update_data.get("end_date", discount.end_date),
        )

        book = discount.book
        was_driving = is_driving(discount, book.discounts, now)

        will_be_active = (
            update_data.get("is_on_sale", discount.is_on_sale)
            and update_data.get("end_date", discount.end_date) > now
        )
        if will_be_active and await find_active_discount(db, book.id, now, exclude_id=discount.id):
            logger.warning("Refused to activate discount %s: book %s has another active discount", discount.id, book.id)
            raise ConflictingActiveDiscount()

        for key, value in update_data.items():
            setattr(discount, key, value)
        discount.updated_at = now

        if is_active(discount, now):
            apply_discount(book, discount).write_to(book)
            book.updated_at = now
            logger.info("Re-applied discount %s to book %s, sale price %s", discount.id, book.id, book.discount_price)
        elif was_driving:
            resync_sale(book, book.discounts, now).write_to(book)
            book.updated_at = now
            logger.info("Discount %s no longer drives book %s, sale fields resynced", discount.id, book.id)

        await log_catalog_activity(
            db,
            user=current_user,
            message=f"Updated discount (ID: {discount.id}) for '{book.title}'",
        )
        await db.commit()
        await db.refresh(discount)

    return {"message": "Discount updated successfully", "data": DiscountOut.model_validate(discount)}


# -----------------------
# DELETE
# -----------------------
async def delete_discount(db: AsyncSession, discount_id: int, now: datetime, current_user=None):
    """
    Remove a discount. If it was switched on, the book's sale fields are
    re-derived from the remaining discounts, which clears them when none is active.
    """
    async with store_errors(db, "deleting discount"):
        discount = await get_discount_or_404(db, discount_id)
        book = discount.book
        was_on_sale = discount.is_on_sale

        remaining = [d for d in book.discounts if d.id != discount.id]
        await db.delete(discount)

        if was_on_sale:
            resync_sale(book, remaining, now).write_to(book)
            book.updated_at = now
            logger.info("Deleted switched-on discount %s, book %s on_sale=%s", discount_id, book.id, book.on_sale)

        await log_catalog_activity(
            db,
            user=current_user,
            message=f"Deleted discount (ID: {discount_id}) for '{book.title}'",
        )
        await db.commit()
        await db.refresh(book)

    return {"message": "Discount deleted successfully"}


# -----------------------
# RECONCILE (on demand only)
# -----------------------
async def reconcile_expired_sales(db: AsyncSession, now: datetime, current_user=None):
    """
    Clear stored sale fields on books whose sale has already ended.
    Reads treat such sales as over anyway; this only brings the stored flags in line.
    """
    stmt = select(Book).where(
        Book.on_sale == True,  # noqa: E712
        or_(Book.discount_end_date == None, Book.discount_end_date <= now),  # noqa: E711
    )
    async with store_errors(db, "reconciling expired sales"):
        books = (await db.execute(stmt)).scalars().all()
        for book in books:
            clear_sale().write_to(book)
            book.updated_at = now

        if books:
            await log_catalog_activity(
                db,
                user=current_user,
                message=f"Cleared expired sales on {len(books)} book(s)",
            )
        await db.commit()

    logger.info("Reconciled expired sales on %d book(s)", len(books))
    return {"message": "Expired sales reconciled", "books_cleared": len(books)}
