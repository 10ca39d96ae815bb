from fastapi import APIRouter

from .discounts import router as discounts_router

router = APIRouter(prefix="/pricing")

router.include_router(discounts_router)
