# app/core/exceptions.py
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, OperationalError

logger = logging.getLogger(__name__)


class CatalogError(HTTPException):
    """Base for every catalog error; rendered by FastAPI as {"detail": ...}."""
    status_code = 500
    default_detail = "Catalog error"

    def __init__(self, detail: str | None = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class ValidationError(CatalogError):
    status_code = 422
    default_detail = "Invalid field value"


class NotFound(CatalogError):
    status_code = 404
    default_detail = "Resource not found"


class BookNotFound(NotFound):
    default_detail = "Book not found"


class Conflict(CatalogError):
    status_code = 409
    default_detail = "Conflicting record already exists"


class DuplicateTitle(Conflict):
    default_detail = "Book title already exists"


class DuplicateISBN(Conflict):
    default_detail = "Book ISBN already exists"


class ConflictingActiveDiscount(Conflict):
    default_detail = "Book already has an active discount"


class InvalidRange(CatalogError):
    status_code = 400
    default_detail = "Invalid range"


class InvalidCategory(CatalogError):
    status_code = 400
    default_detail = "Unknown category"


class Unavailable(CatalogError):
    status_code = 503
    default_detail = "Catalog store is unavailable"


def translate_store_error(exc: Exception, operation: str) -> HTTPException:
    """
    Map a store-level failure onto the catalog taxonomy.
    Unique constraint violations become Conflict, connectivity and timeouts become Unavailable.
    """
    if isinstance(exc, IntegrityError):
        return Conflict(f"Integrity error while {operation}: {exc.orig}")
    if isinstance(exc, (OperationalError, asyncio.TimeoutError)):
        logger.error("Store unavailable while %s", operation, exc_info=exc)
        return Unavailable(f"Catalog store is unavailable while {operation}")
    logger.exception("Unexpected error while %s", operation)
    return HTTPException(status_code=500, detail=f"Error {operation}: {exc}")


@asynccontextmanager
async def store_errors(db, operation: str):
    """
    Wrap a unit of work: catalog errors roll back and propagate unchanged,
    everything else rolls back and is translated.
    """
    try:
        yield
    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        raise translate_store_error(e, operation) from e
