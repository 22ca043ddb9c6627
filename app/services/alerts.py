import logging

from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import ALERT_LEVEL_MEDIUM, ALERT_LEVELS
from app.db_ops import create_alert, list_alerts, list_user_phone_numbers
from app.errors import ApiError, BadRequestError
from app.schemas import (
    AlertCreate,
    AlertCreatedResponse,
    AlertListResponse,
    AlertRead,
)
from app.services.notifications import notify_phone_numbers
from app.services.templates import format_new_alert_sms

logger = logging.getLogger(__name__)


def _validate_alert(payload: AlertCreate) -> tuple[str, str, str]:
    title = (payload.title or "").strip()
    if not title:
        raise BadRequestError("Title is required")
    content = (payload.content or "").strip()
    if not content:
        raise BadRequestError("Content is required")
    alert_level = payload.alert_level or ALERT_LEVEL_MEDIUM
    if alert_level not in ALERT_LEVELS:
        raise BadRequestError("Invalid alert level")
    return title, content, alert_level


async def fetch_alerts(
    session: AsyncSession, search: str = "", alert_level: str = ""
) -> AlertListResponse:
    try:
        alerts = await list_alerts(session, search=search, alert_level=alert_level)
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch alerts")
        raise ApiError("Failed to fetch alerts", details=str(exc)) from exc

    data = [AlertRead.model_validate(alert) for alert in alerts]
    return AlertListResponse(data=data, total=len(data))


async def process_new_alert(
    session: AsyncSession,
    payload: AlertCreate,
    background_tasks: BackgroundTasks,
) -> AlertCreatedResponse:
    title, content, alert_level = _validate_alert(payload)

    try:
        async with session.begin():
            alert = await create_alert(session, title, content, alert_level)
            phone_numbers = await list_user_phone_numbers(session)
    except SQLAlchemyError as exc:
        logger.exception("Failed to create alert")
        raise ApiError("Failed to create alert", details=str(exc)) from exc

    logger.info(
        "Alert created",
        extra={"alert_id": alert.id, "alert_level": alert.alert_level},
    )
    background_tasks.add_task(
        notify_phone_numbers,
        phone_numbers,
        format_new_alert_sms(alert.title, alert.content),
    )

    return AlertCreatedResponse(
        data=AlertRead.model_validate(alert),
        message="Alert created successfully",
    )
