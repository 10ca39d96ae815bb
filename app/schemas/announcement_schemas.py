# app/schemas/announcement_schemas.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from app.utils.time_helpers import ensure_utc


class AnnouncementBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    category: Optional[str] = None
    book_id: Optional[int] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def as_utc(cls, value):
        return ensure_utc(value)


class AnnouncementCreate(AnnouncementBase):
    pass


class AnnouncementUpdate(AnnouncementBase):
    """Full replacement: every field is written."""
    pass


class AnnouncementOut(AnnouncementBase):
    id: int
    book_title: Optional[str] = None

    class Config:
        from_attributes = True


class AnnouncementResponse(BaseModel):
    message: str
    data: Optional[AnnouncementOut] = None


class AnnouncementListResponse(BaseModel):
    message: str
    data: List[AnnouncementOut]


class CategoryListResponse(BaseModel):
    message: str
    data: List[str]
