# app/models/types.py
from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from app.utils.time_helpers import ensure_utc


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware DateTime that always stores and returns UTC.
    SQLite drops tzinfo on the way back, so naive results are re-tagged as UTC.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        value = ensure_utc(value)
        if value is not None and dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        return ensure_utc(value)
