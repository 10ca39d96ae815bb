# app/models/activity_models.py
from sqlalchemy import Column, Integer, String
from app.core.db import Base
from app.models.types import UTCDateTime
from app.utils.time_helpers import utc_now


class CatalogActivity(Base):
    __tablename__ = "catalog_activity"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, nullable=False)
    message = Column(String, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
