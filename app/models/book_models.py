# app/models/book_models.py
from sqlalchemy import (
    Column, Integer, String, Text, Numeric, Boolean, CheckConstraint, Index
)
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.types import UTCDateTime


class Book(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False, index=True)
    author = Column(String(100), nullable=False, index=True)
    image_url = Column(String(500), nullable=False, default="")
    isbn = Column(String(13), unique=True, nullable=False)
    description = Column(Text, nullable=False)
    genre = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    year_published = Column(Integer, nullable=False)
    published_date = Column(UTCDateTime, nullable=False)
    publisher = Column(String(200), nullable=False)
    language = Column(String(50), nullable=False)
    format = Column(String(50), nullable=False)
    stock_quantity = Column(Integer, default=0, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)

    # Public sale fields, written by the discount ledger
    on_sale = Column(Boolean, default=False, nullable=False)
    discount_price = Column(Numeric(10, 2), nullable=True)
    discount_end_date = Column(UTCDateTime, nullable=True)

    added_date = Column(UTCDateTime, nullable=False)
    is_bestseller = Column(Boolean, default=False, nullable=False)
    is_award_winner = Column(Boolean, default=False, nullable=False)
    sales_count = Column(Integer, default=0, nullable=False)

    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=True)

    discounts = relationship(
        "Discount",
        back_populates="book",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(price >= 0, name="check_book_price_non_negative"),
        CheckConstraint(stock_quantity >= 0, name="check_book_stock_non_negative"),
        CheckConstraint(sales_count >= 0, name="check_book_sales_count_non_negative"),
        CheckConstraint(
            "discount_price IS NULL OR discount_price <= price",
            name="check_book_discount_price_not_above_price",
        ),
        Index("ix_book_genre_language_format", "genre", "language", "format"),
    )

    def __repr__(self):
        return f"<Book(id={self.id}, title='{self.title}')>"
