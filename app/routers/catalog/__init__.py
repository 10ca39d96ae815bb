from fastapi import APIRouter

from .books import router as books_router
from .categories import router as categories_router

router = APIRouter(prefix="/catalog")

router.include_router(books_router)
router.include_router(categories_router)
