from sqlalchemy import Column, Integer, Numeric, Boolean, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.types import UTCDateTime


class Discount(Base):
    __tablename__ = "discounts"

    id = Column(Integer, primary_key=True, index=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    percentage = Column(Numeric(5, 2), nullable=False)
    start_date = Column(UTCDateTime, nullable=False)
    end_date = Column(UTCDateTime, nullable=False)
    is_on_sale = Column(Boolean, default=False, nullable=False)

    created_at = Column(UTCDateTime, nullable=False)
    updated_at = Column(UTCDateTime, nullable=False)

    book = relationship("Book", back_populates="discounts", lazy="selectin")

    __table_args__ = (
        CheckConstraint("percentage >= 0 AND percentage <= 100", name="check_discount_percentage_range"),
        CheckConstraint("end_date > start_date", name="check_discount_valid_period"),
        Index("ix_discount_book_sale_end", "book_id", "is_on_sale", "end_date"),
    )

    @property
    def book_title(self):
        return self.book.title if self.book else ""

    def __repr__(self):
        return f"<Discount(id={self.id}, book_id={self.book_id}, percentage={self.percentage})>"
