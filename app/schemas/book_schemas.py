# app/schemas/book_schemas.py

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Dict, List, Optional
from typing_extensions import Annotated
from datetime import datetime
from decimal import Decimal

from app.core.config import DEFAULT_PAGE_SIZE
from app.utils.time_helpers import ensure_utc

NonNegativeDecimal = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]
NonNegativeInt = Annotated[int, Field(ge=0)]

DATETIME_FIELDS = ("published_date", "discount_end_date", "added_date")


# --------------------------
# Schema for creating Book
# --------------------------
class BookCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    author: str = Field(..., min_length=1, max_length=100)
    image_url: str = ""
    isbn: str = Field(..., min_length=1, max_length=13)
    description: str
    genre: str = Field(..., min_length=1)
    price: NonNegativeDecimal
    year_published: int
    published_date: datetime
    publisher: str
    language: str
    format: str
    stock_quantity: NonNegativeInt
    is_available: bool = True
    on_sale: bool = False
    discount_price: Optional[NonNegativeDecimal] = None
    discount_end_date: Optional[datetime] = None
    added_date: Optional[datetime] = None
    is_bestseller: bool = False
    is_award_winner: bool = False
    sales_count: NonNegativeInt = 0

    @field_validator(*DATETIME_FIELDS)
    @classmethod
    def as_utc(cls, value):
        return ensure_utc(value)

    @model_validator(mode="after")
    def sale_fields_consistent(self):
        """
        On-sale books need a discount price no higher than the price and an end date.
        Whether the end date lies in the future is checked against the request clock.
        """
        if self.on_sale:
            if self.discount_price is None or self.discount_end_date is None:
                raise ValueError("on_sale requires discount_price and discount_end_date")
            if self.discount_price > self.price:
                raise ValueError("discount_price must not exceed price")
        return self


# --------------------------
# Schema for updating Book
# --------------------------
class BookUpdate(BaseModel):
    """
    All fields optional for partial updates.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    author: Optional[str] = Field(None, min_length=1, max_length=100)
    image_url: Optional[str] = None
    isbn: Optional[str] = Field(None, min_length=1, max_length=13)
    description: Optional[str] = None
    genre: Optional[str] = None
    price: Optional[NonNegativeDecimal] = None
    year_published: Optional[int] = None
    published_date: Optional[datetime] = None
    publisher: Optional[str] = None
    language: Optional[str] = None
    format: Optional[str] = None
    stock_quantity: Optional[NonNegativeInt] = None
    is_available: Optional[bool] = None
    on_sale: Optional[bool] = None
    discount_price: Optional[NonNegativeDecimal] = None
    discount_end_date: Optional[datetime] = None
    added_date: Optional[datetime] = None
    is_bestseller: Optional[bool] = None
    is_award_winner: Optional[bool] = None
    sales_count: Optional[NonNegativeInt] = None

    @field_validator(*DATETIME_FIELDS)
    @classmethod
    def as_utc(cls, value):
        return ensure_utc(value)


class StockUpdate(BaseModel):
    quantity: NonNegativeInt


# --------------------------
# Query configuration for the catalog listing
# --------------------------
class BookFilter(BaseModel):
    genre: Optional[str] = None
    search: Optional[str] = None
    author: Optional[str] = None
    on_sale: Optional[bool] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    language: Optional[str] = None
    format: Optional[str] = None
    publisher: Optional[str] = None
    sort_by: str = "title"
    sort_order: str = "asc"
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


# --------------------------
# Output schema for single Book
# --------------------------
class BookOut(BaseModel):
    id: int
    title: str
    author: str
    image_url: str
    isbn: str
    description: str
    genre: str
    price: Decimal
    year_published: int
    published_date: datetime
    publisher: str
    language: str
    format: str
    stock_quantity: int
    is_available: bool
    on_sale: bool
    discount_price: Optional[Decimal] = None
    discount_end_date: Optional[datetime] = None
    added_date: datetime
    is_bestseller: bool
    is_award_winner: bool
    sales_count: int

    # Derived at read time for the request clock
    is_coming_soon: bool = False
    categories: List[str] = []

    class Config:
        from_attributes = True


# --------------------------
# Response schemas
# --------------------------
class BookResponse(BaseModel):
    message: str
    data: Optional[BookOut] = None


class BookListResponse(BaseModel):
    message: str
    data: List[BookOut]


class BookPage(BaseModel):
    total_count: int
    page: int
    page_size: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool
    books: List[BookOut]
    warning: Optional[str] = None


class BookPageResponse(BookPage):
    message: str


class AuthorListResponse(BaseModel):
    message: str
    data: List[str]


class CategoryCountsResponse(BaseModel):
    message: str
    data: Dict[str, int]


# --------------------------
# Generic Message Response
# --------------------------
class MessageResponse(BaseModel):
    message: str
