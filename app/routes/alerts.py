from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_async_session
from app.schemas import AlertCreate, AlertCreatedResponse, AlertListResponse
from app.services.alerts import fetch_alerts, process_new_alert

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get("", response_model=AlertListResponse)
async def get_alerts(
    search: str = "",
    alert_level: str = "",
    session: AsyncSession = Depends(get_async_session),
) -> AlertListResponse:
    return await fetch_alerts(session, search=search, alert_level=alert_level)


@router.post(
    "",
    response_model=AlertCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_alert(
    payload: AlertCreate,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_async_session),
) -> AlertCreatedResponse:
    return await process_new_alert(session, payload, background_tasks)
