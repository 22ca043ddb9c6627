from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_async_session
from app.schemas import (
    EvacuationCenterCreate,
    EvacuationCenterCreatedResponse,
    EvacuationCenterListResponse,
)
from app.services.evacuation import (
    fetch_evacuation_centers,
    process_new_evacuation_center,
)

router = APIRouter(prefix="/api/evacuation", tags=["evacuation"])


@router.get("", response_model=EvacuationCenterListResponse)
async def get_evacuation_centers(
    search: str = "",
    status_filter: str = Query(default="", alias="status"),
    min_capacity: str | None = Query(default=None, alias="minCapacity"),
    max_capacity: str | None = Query(default=None, alias="maxCapacity"),
    session: AsyncSession = Depends(get_async_session),
) -> EvacuationCenterListResponse:
    return await fetch_evacuation_centers(
        session,
        search=search,
        status=status_filter,
        min_capacity=min_capacity,
        max_capacity=max_capacity,
    )


@router.post(
    "",
    response_model=EvacuationCenterCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_evacuation_center(
    payload: EvacuationCenterCreate,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_async_session),
) -> EvacuationCenterCreatedResponse:
    return await process_new_evacuation_center(session, payload, background_tasks)
