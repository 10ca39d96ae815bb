# --------------------------
# File: app/services/catalog_services/book_service.py
# Description: Book CRUD with uniqueness checks and sale-field consistency
# --------------------------

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.exceptions import (
    DuplicateISBN,
    DuplicateTitle,
    NotFound,
    ValidationError,
    store_errors,
)
from app.models.book_models import Book
from app.schemas.book_schemas import BookCreate, BookUpdate
from app.services.catalog_services.book_query import to_book_out
from app.services.pricing_services.discount_ledger import (
    apply_discount,
    clear_sale,
    compute_discount_price,
    is_sale_live,
    select_driving_discount,
    validate_sale_fields,
)
from app.utils.activity_helpers import log_catalog_activity

logger = logging.getLogger(__name__)

SALE_FIELDS = ("on_sale", "discount_price", "discount_end_date")
NULLABLE_FIELDS = {"discount_price", "discount_end_date"}


async def get_book_or_404(db: AsyncSession, book_id: int) -> Book:
    result = await db.execute(select(Book).where(Book.id == book_id))
    book = result.scalars().first()
    if not book:
        raise NotFound("Book not found")
    return book


async def ensure_unique(db: AsyncSession, title: str | None = None, isbn: str | None = None, exclude_id: int | None = None):
    """
    Read-before-write uniqueness. The store's unique index on ISBN stays the
    authoritative check for writes racing past this one.
    """
    if title is not None:
        stmt = select(Book.id).where(Book.title == title)
        if exclude_id is not None:
            stmt = stmt.where(Book.id != exclude_id)
        if (await db.execute(stmt)).scalars().first():
            logger.warning("Rejected duplicate book title '%s'", title)
            raise DuplicateTitle(f"Book title '{title}' already exists")

    if isbn is not None:
        stmt = select(Book.id).where(Book.isbn == isbn)
        if exclude_id is not None:
            stmt = stmt.where(Book.id != exclude_id)
        if (await db.execute(stmt)).scalars().first():
            logger.warning("Rejected duplicate ISBN '%s'", isbn)
            raise DuplicateISBN(f"Book ISBN '{isbn}' already exists")


# ---------------------------------------------------
# CREATE BOOK
# ---------------------------------------------------
async def create_book(db: AsyncSession, data: BookCreate, now: datetime, current_user=None):
    """
    Create a new book and log the creation in the activity log.
    """
    validate_sale_fields(data.on_sale, data.price, data.discount_price, data.discount_end_date, now)

    async with store_errors(db, "creating book"):
        await ensure_unique(db, title=data.title, isbn=data.isbn)

        book = Book(**data.model_dump())
        if not book.on_sale:
            book.discount_price = None
            book.discount_end_date = None
        book.added_date = data.added_date or now
        book.created_at = now
        db.add(book)
        await db.flush()  # ensures book.id is available

        await log_catalog_activity(
            db,
            user=current_user,
            message=f"Created book '{book.title}' (ID: {book.id})",
        )

        await db.commit()
        await db.refresh(book)

    logger.info("Created book %s '%s'", book.id, book.title)
    return {"message": "Book created successfully", "data": to_book_out(book, now)}


# ---------------------------------------------------
# GET SINGLE BOOK
# ---------------------------------------------------
async def get_book(db: AsyncSession, book_id: int, now: datetime):
    async with store_errors(db, "fetching book"):
        book = await get_book_or_404(db, book_id)
    return {"message": "Book fetched successfully", "data": to_book_out(book, now)}


# ---------------------------------------------------
# UPDATE BOOK
# ---------------------------------------------------
async def update_book(db: AsyncSession, book_id: int, data: BookUpdate, now: datetime, current_user=None):
    """
    Partial update. A price change re-prices the book's live discount so the
    sale price never goes stale. Stored sale fields whose end date has passed
    are cleared rather than blocking the update.
    """
    update_data = data.model_dump(exclude_unset=True)

    for key, value in update_data.items():
        if value is None and key not in NULLABLE_FIELDS:
            raise ValidationError(f"{key} cannot be null")

    async with store_errors(db, "updating book"):
        book = await get_book_or_404(db, book_id)

        if "sales_count" in update_data and update_data["sales_count"] < book.sales_count:
            raise ValidationError("sales_count cannot decrease")

        if "title" in update_data and update_data["title"] != book.title:
            await ensure_unique(db, title=update_data["title"], exclude_id=book_id)
        if "isbn" in update_data and update_data["isbn"] != book.isbn:
            await ensure_unique(db, isbn=update_data["isbn"], exclude_id=book_id)

        merged = {f: update_data.get(f, getattr(book, f)) for f in SALE_FIELDS + ("price",)}
        price_changed = "price" in update_data and Decimal(str(update_data["price"])) != book.price
        sale_written = any(f in update_data for f in SALE_FIELDS)

        # Untouched sale fields either follow the live discount or, once the sale
        # has lapsed, are cleared on the way through
        driving = None
        lapsed = False
        if merged["on_sale"] and not sale_written:
            live_discount = select_driving_discount(book.discounts, now)
            if live_discount is None and not is_sale_live(book, now):
                lapsed = True
                merged.update(on_sale=False, discount_price=None, discount_end_date=None)
            elif live_discount is not None and price_changed:
                driving = live_discount
                merged["discount_price"] = compute_discount_price(merged["price"], driving.percentage)
                merged["discount_end_date"] = driving.end_date

        validate_sale_fields(
            merged["on_sale"], merged["price"], merged["discount_price"], merged["discount_end_date"], now
        )

        # Track changes
        changes = []
        for key, value in update_data.items():
            old_val = getattr(book, key)
            if old_val != value:
                changes.append(f"{key}: {old_val} → {value}")
                setattr(book, key, value)

        if lapsed:
            clear_sale().write_to(book)
            changes.append("expired sale cleared")

        if not book.on_sale:
            book.discount_price = None
            book.discount_end_date = None
        elif driving is not None:
            apply_discount(book, driving).write_to(book)
            changes.append(f"discount_price re-priced to {book.discount_price}")

        book.updated_at = now

        if changes:
            await log_catalog_activity(
                db,
                user=current_user,
                message=f"Updated book '{book.title}' (ID: {book.id}): {', '.join(changes)}",
            )
        await db.commit()
        await db.refresh(book)

    logger.info("Updated book %s (%d changes)", book.id, len(changes))
    return {"message": "Book updated successfully", "data": to_book_out(book, now)}


# ---------------------------------------------------
# UPDATE STOCK
# ---------------------------------------------------
async def update_stock(db: AsyncSession, book_id: int, quantity: int, now: datetime, current_user=None):
    if quantity < 0:
        raise ValidationError("Stock quantity must be non-negative")

    async with store_errors(db, "updating stock"):
        book = await get_book_or_404(db, book_id)
        old_quantity = book.stock_quantity
        book.stock_quantity = quantity
        book.updated_at = now

        await log_catalog_activity(
            db,
            user=current_user,
            message=f"Stock for '{book.title}' (ID: {book.id}): {old_quantity} → {quantity}",
        )
        await db.commit()
        await db.refresh(book)

    return {"message": "Stock updated successfully", "data": to_book_out(book, now)}


# ---------------------------------------------------
# DELETE BOOK
# ---------------------------------------------------
async def delete_book(db: AsyncSession, book_id: int, current_user=None):
    """
    Hard delete. The book's discounts go with it; announcements are unlinked.
    """
    async with store_errors(db, "deleting book"):
        book = await get_book_or_404(db, book_id)
        title = book.title
        await db.delete(book)

        await log_catalog_activity(
            db,
            user=current_user,
            message=f"Deleted book '{title}' (ID: {book_id})",
        )
        await db.commit()

    logger.info("Deleted book %s '%s'", book_id, title)
    return {"message": "Book deleted successfully"}
