from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.book_schemas import BookListResponse, CategoryCountsResponse
from app.services.catalog_services import category_service
from app.utils.time_helpers import utc_now

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=CategoryCountsResponse)
async def category_counts_route(db: AsyncSession = Depends(get_db), now: datetime = Depends(utc_now)):
    counts = await category_service.get_category_counts(db, now)
    return {"message": "Category counts fetched successfully", "data": counts}


@router.get("/{name}", response_model=BookListResponse)
async def list_category_route(name: str, db: AsyncSession = Depends(get_db), now: datetime = Depends(utc_now)):
    """
    Books in a derived category: all, bestsellers, award-winners, new-releases,
    new-arrivals, coming-soon or deals. An empty category is a 200 with no books.
    """
    books = await category_service.list_books_in_category(db, name, now)
    return {"message": f"Books in '{name}' fetched successfully", "data": books}
