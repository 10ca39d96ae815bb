from datetime import datetime
from typing import Dict, List

from sqlalchemy import asc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.exceptions import store_errors
from app.models.book_models import Book
from app.schemas.book_schemas import BookOut
from app.services.catalog_services.book_query import to_book_out
from app.services.catalog_services.category_classifier import (
    category_counts,
    in_category,
    normalize_category,
)


async def _all_books(db: AsyncSession) -> List[Book]:
    # Categories are time-derived, so every call classifies the whole catalog
    result = await db.execute(select(Book).order_by(asc(Book.title), asc(Book.id)))
    return list(result.scalars().all())


async def list_books_in_category(db: AsyncSession, name: str, now: datetime) -> List[BookOut]:
    category = normalize_category(name)
    async with store_errors(db, f"listing category '{category}'"):
        books = await _all_books(db)
    return [to_book_out(b, now) for b in books if in_category(b, category, now)]


async def get_category_counts(db: AsyncSession, now: datetime) -> Dict[str, int]:
    async with store_errors(db, "counting categories"):
        books = await _all_books(db)
    return category_counts(books, now)
