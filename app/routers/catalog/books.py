from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.db import get_db
from app.core.exceptions import NotFound
from app.schemas.book_schemas import (
    AuthorListResponse,
    BookCreate,
    BookFilter,
    BookListResponse,
    BookPageResponse,
    BookResponse,
    BookUpdate,
    MessageResponse,
    StockUpdate,
)
from app.services.catalog_services import book_query, book_service
from app.utils.check_roles import require_admin
from app.utils.get_user import get_current_user
from app.utils.time_helpers import utc_now

router = APIRouter(prefix="/books", tags=["Books"])


# GET FILTERED, SORTED, PAGINATED
@router.get("/", response_model=BookPageResponse)
async def list_books_route(
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(utc_now),
    genre: Optional[str] = Query(None, description="Exact genre"),
    search: Optional[str] = Query(None, description="Substring of title, description or ISBN (case-insensitive)"),
    author: Optional[str] = Query(None, description="Substring of author (case-insensitive)"),
    on_sale: Optional[bool] = Query(None, description="Stored on-sale flag; a lapsed sale matches until reconciled (see the deals category for live sales)"),
    min_price: Optional[Decimal] = Query(None, ge=0, description="Inclusive lower price bound"),
    max_price: Optional[Decimal] = Query(None, ge=0, description="Inclusive upper price bound"),
    language: Optional[str] = Query(None),
    format: Optional[str] = Query(None),
    publisher: Optional[str] = Query(None),
    sort_by: str = Query("title", description="title, price, year or dateAdded; anything else sorts by title"),
    sort_order: str = Query("asc", description="asc or desc"),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
):
    """
    Example:
    /catalog/books?genre=Fantasy&min_price=5&max_price=20&sort_by=price&sort_order=desc&page=2
    """
    filters = BookFilter(
        genre=genre,
        search=search,
        author=author,
        on_sale=on_sale,
        min_price=min_price,
        max_price=max_price,
        language=language,
        format=format,
        publisher=publisher,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=page_size,
    )
    result = await book_query.list_books(db, filters, now)
    if result.total_count == 0:
        raise NotFound("No books match the criteria")
    return BookPageResponse(message="Books fetched successfully", **result.model_dump())


@router.get("/all", response_model=BookListResponse)
async def list_all_books_route(db: AsyncSession = Depends(get_db), now: datetime = Depends(utc_now)):
    books = await book_query.list_all_books(db, now)
    if not books:
        raise NotFound("No books found")
    return {"message": "Books fetched successfully", "data": books}


@router.get("/authors", response_model=AuthorListResponse)
async def list_authors_route(db: AsyncSession = Depends(get_db)):
    authors = await book_query.list_authors(db)
    if not authors:
        raise NotFound("No authors found")
    return {"message": "Authors fetched successfully", "data": authors}


@router.get("/by-author/{author_name}", response_model=BookListResponse)
async def list_books_by_author_route(
    author_name: str,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(utc_now),
):
    books = await book_query.list_books_by_author(db, author_name, now)
    if not books:
        raise NotFound(f"No books found for author: {author_name}")
    return {"message": "Books fetched successfully", "data": books}


# GET SINGLE
@router.get("/{book_id}", response_model=BookResponse)
async def get_book_route(book_id: int, db: AsyncSession = Depends(get_db), now: datetime = Depends(utc_now)):
    return await book_service.get_book(db, book_id, now)


# CREATE
@router.post("/", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
@require_admin
async def create_book_route(
    payload: BookCreate,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(utc_now),
    _user=Depends(get_current_user),
):
    return await book_service.create_book(db, payload, now, _user)


# UPDATE
@router.put("/{book_id}", response_model=BookResponse)
@require_admin
async def update_book_route(
    book_id: int,
    payload: BookUpdate,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(utc_now),
    _user=Depends(get_current_user),
):
    return await book_service.update_book(db, book_id, payload, now, _user)


@router.patch("/{book_id}/stock", response_model=BookResponse)
@require_admin
async def update_stock_route(
    book_id: int,
    payload: StockUpdate,
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(utc_now),
    _user=Depends(get_current_user),
):
    return await book_service.update_stock(db, book_id, payload.quantity, now, _user)


# DELETE
@router.delete("/{book_id}", response_model=MessageResponse)
@require_admin
async def delete_book_route(
    book_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await book_service.delete_book(db, book_id, _user)
