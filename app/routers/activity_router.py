# app/routers/activity_router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from app.core.db import get_db
from app.services.activity_service import get_catalog_activities
from app.schemas.activity_schemas import ActivityOut, ActivityListResponse
from app.utils.get_user import get_current_user
from app.utils.check_roles import require_admin

router = APIRouter(prefix="/activity", tags=["Catalog Activity"])


@router.get("/", response_model=ActivityListResponse)
@require_admin
async def list_catalog_activities(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    username: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    sort_by: str = Query("created_at"),
    order: str = Query("desc")
):
    """
    Audit trail of catalog mutations, newest first by default.
    """
    total, activities = await get_catalog_activities(
        db=db,
        username=username,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        order=order
    )

    return ActivityListResponse(
        message="Catalog activities fetched successfully",
        total=total,
        data=[ActivityOut.model_validate(a) for a in activities]
    )
