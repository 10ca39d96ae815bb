from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from typing_extensions import Annotated
from datetime import datetime
from decimal import Decimal

from app.utils.time_helpers import ensure_utc

Percentage = Annotated[Decimal, Field(ge=0, le=100, max_digits=5, decimal_places=2)]


class DiscountBase(BaseModel):
    book_id: int
    percentage: Percentage
    start_date: datetime
    end_date: datetime
    is_on_sale: bool = False

    @field_validator("start_date", "end_date")
    @classmethod
    def as_utc(cls, value):
        return ensure_utc(value)


class DiscountCreate(DiscountBase):
    pass


class DiscountUpdate(BaseModel):
    book_id: Optional[int] = None
    percentage: Optional[Percentage] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_on_sale: Optional[bool] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def as_utc(cls, value):
        return ensure_utc(value)


class DiscountOut(DiscountBase):
    id: int
    book_title: str = ""
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DiscountResponse(BaseModel):
    message: str
    data: Optional[DiscountOut] = None


class DiscountListResponse(BaseModel):
    message: str
    data: List[DiscountOut]


class ReconcileResponse(BaseModel):
    message: str
    books_cleared: int
