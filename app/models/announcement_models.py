from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.types import UTCDateTime


class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    start_date = Column(UTCDateTime, nullable=False)
    end_date = Column(UTCDateTime, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    category = Column(String(100), nullable=True, index=True)

    # Checked at write time only; a deleted book leaves the announcement unlinked
    book_id = Column(Integer, ForeignKey("books.id", ondelete="SET NULL"), nullable=True)
    book = relationship("Book", lazy="selectin")

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="check_announcement_valid_period"),
    )

    @property
    def book_title(self):
        return self.book.title if self.book else None
