# --------------------------
# File: app/services/catalog_services/book_query.py
# Description: Filtered, sorted, paginated catalog reads
# --------------------------

import logging
import math
from datetime import datetime
from typing import List

from sqlalchemy import asc, desc, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.exceptions import InvalidRange, ValidationError, store_errors
from app.models.book_models import Book
from app.schemas.book_schemas import BookFilter, BookOut, BookPage
from app.services.catalog_services.category_classifier import classify, is_coming_soon

logger = logging.getLogger(__name__)

# --------------------------
# Allowed fields for sorting
# --------------------------
SORT_COLUMNS = {
    "title": Book.title,
    "price": Book.price,
    "year": Book.year_published,
    "dateadded": Book.added_date,
}
DEFAULT_SORT = "title"

LIKE_ESCAPE = "\\"


def like_pattern(term: str) -> str:
    """Substring pattern with LIKE wildcards in the user's term matched literally."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def contains(column, term: str):
    return column.ilike(like_pattern(term), escape=LIKE_ESCAPE)


def to_book_out(book: Book, now: datetime) -> BookOut:
    """Serialize a book with the categories it holds at `now`."""
    out = BookOut.model_validate(book)
    out.categories = sorted(classify(book, now))
    out.is_coming_soon = is_coming_soon(book, now)
    return out


def build_conditions(filters: BookFilter) -> list:
    """
    AND-combined predicates for every supplied filter. Empty values are treated as absent.
    """
    conditions = []

    if filters.genre:
        conditions.append(Book.genre == filters.genre)

    # Search across title, description and ISBN
    if filters.search:
        conditions.append(
            or_(
                contains(Book.title, filters.search),
                contains(Book.description, filters.search),
                contains(Book.isbn, filters.search),
            )
        )

    if filters.author:
        conditions.append(contains(Book.author, filters.author))

    # Matches the stored flag; a lapsed sale still matches until it is reconciled
    if filters.on_sale is not None:
        conditions.append(Book.on_sale == filters.on_sale)

    # Inclusive price bounds
    if filters.min_price is not None:
        conditions.append(Book.price >= filters.min_price)
    if filters.max_price is not None:
        conditions.append(Book.price <= filters.max_price)

    if filters.language:
        conditions.append(Book.language == filters.language)
    if filters.format:
        conditions.append(Book.format == filters.format)
    if filters.publisher:
        conditions.append(Book.publisher == filters.publisher)

    return conditions


def resolve_sort(sort_by: str | None, sort_order: str | None):
    """
    Returns (order_by clauses, warning). Unknown sort fields fall back to title
    ascending instead of failing; the warning tells the caller it happened.
    """
    key = (sort_by or DEFAULT_SORT).strip().lower()
    warning = None
    if key not in SORT_COLUMNS:
        warning = f"sort_by '{sort_by}' is invalid, defaulted to '{DEFAULT_SORT}' ascending"
        column, direction = SORT_COLUMNS[DEFAULT_SORT], asc
    else:
        column = SORT_COLUMNS[key]
        direction = desc if (sort_order or "asc").lower() == "desc" else asc

    # Creation order breaks ties so pages stay reproducible
    return [direction(column), asc(Book.id)], warning


def validate_filters(filters: BookFilter) -> None:
    if filters.page < 1:
        raise ValidationError("page must be >= 1")
    if filters.page_size < 1:
        raise ValidationError("page_size must be >= 1")
    if (
        filters.min_price is not None
        and filters.max_price is not None
        and filters.min_price > filters.max_price
    ):
        raise InvalidRange("min_price must not be greater than max_price")


# --------------------------
# LIST BOOKS (filters + sorting + pagination)
# --------------------------
async def list_books(db: AsyncSession, filters: BookFilter, now: datetime) -> BookPage:
    """
    One page of books matching every supplied filter.

    A page past the end is empty rather than an error; an empty result is
    returned with zero counts and the caller decides whether that means 404.
    """
    validate_filters(filters)
    conditions = build_conditions(filters)
    order_by, warning = resolve_sort(filters.sort_by, filters.sort_order)

    async with store_errors(db, "listing books"):
        count_stmt = select(func.count(Book.id)).where(*conditions)
        total = (await db.execute(count_stmt)).scalar() or 0

        stmt = (
            select(Book)
            .where(*conditions)
            .order_by(*order_by)
            .offset((filters.page - 1) * filters.page_size)
            .limit(filters.page_size)
        )
        books = (await db.execute(stmt)).scalars().all()

    total_pages = math.ceil(total / filters.page_size)
    if warning:
        logger.info(warning)

    return BookPage(
        total_count=total,
        page=filters.page,
        page_size=filters.page_size,
        total_pages=total_pages,
        has_previous_page=filters.page > 1,
        has_next_page=filters.page < total_pages,
        books=[to_book_out(b, now) for b in books],
        warning=warning,
    )


async def list_all_books(db: AsyncSession, now: datetime) -> List[BookOut]:
    async with store_errors(db, "listing books"):
        result = await db.execute(select(Book).order_by(asc(Book.id)))
        books = result.scalars().all()
    return [to_book_out(b, now) for b in books]


async def list_books_by_author(db: AsyncSession, author: str, now: datetime) -> List[BookOut]:
    async with store_errors(db, "listing books by author"):
        result = await db.execute(
            select(Book).where(contains(Book.author, author)).order_by(asc(Book.title), asc(Book.id))
        )
        books = result.scalars().all()
    return [to_book_out(b, now) for b in books]


async def list_authors(db: AsyncSession) -> List[str]:
    async with store_errors(db, "listing authors"):
        result = await db.execute(select(Book.author).distinct().order_by(asc(Book.author)))
        return list(result.scalars().all())
