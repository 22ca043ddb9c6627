import logging
import math

from fastapi import BackgroundTasks
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import EVACUATION_STATUS_OPEN, EVACUATION_STATUSES
from app.db_ops import (
    create_evacuation_center,
    list_evacuation_centers,
    list_user_phone_numbers,
)
from app.errors import ApiError, BadRequestError
from app.schemas import (
    EvacuationCenterCreate,
    EvacuationCenterCreatedResponse,
    EvacuationCenterListResponse,
    EvacuationCenterRead,
)
from app.services.notifications import notify_phone_numbers
from app.services.templates import format_new_evacuation_center_sms

logger = logging.getLogger(__name__)


def parse_capacity_bound(value: str | None) -> int | None:
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _coordinate(value: object) -> float | None:
    # JSON booleans and numeric strings are not coordinates.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def _validate_center(
    payload: EvacuationCenterCreate,
) -> tuple[str, str, float, float, str]:
    name = (payload.name or "").strip()
    if not name:
        raise BadRequestError("Name is required")
    address = (payload.address or "").strip()
    if not address:
        raise BadRequestError("Address is required")
    latitude = _coordinate(payload.latitude)
    longitude = _coordinate(payload.longitude)
    if latitude is None or longitude is None:
        raise BadRequestError("Valid latitude and longitude are required")
    status = payload.status or EVACUATION_STATUS_OPEN
    if status not in EVACUATION_STATUSES:
        raise BadRequestError("Invalid evacuation status")
    return name, address, latitude, longitude, status


async def fetch_evacuation_centers(
    session: AsyncSession,
    search: str = "",
    status: str = "",
    min_capacity: str | None = None,
    max_capacity: str | None = None,
) -> EvacuationCenterListResponse:
    try:
        centers = await list_evacuation_centers(
            session,
            search=search,
            status=status,
            min_capacity=parse_capacity_bound(min_capacity),
            max_capacity=parse_capacity_bound(max_capacity),
        )
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch evacuation centers")
        raise ApiError("Failed to fetch evacuation centers", details=str(exc)) from exc

    data = [EvacuationCenterRead.model_validate(center) for center in centers]
    return EvacuationCenterListResponse(data=data, total=len(data))


async def process_new_evacuation_center(
    session: AsyncSession,
    payload: EvacuationCenterCreate,
    background_tasks: BackgroundTasks,
) -> EvacuationCenterCreatedResponse:
    name, address, latitude, longitude, status = _validate_center(payload)

    try:
        async with session.begin():
            center = await create_evacuation_center(
                session,
                name=name,
                address=address,
                latitude=latitude,
                longitude=longitude,
                status=status,
                capacity=payload.capacity,
                current_occupancy=payload.current_occupancy,
                contact_name=payload.contact_name,
                contact_phone=payload.contact_phone,
                photos=payload.photos,
                created_by=payload.created_by,
            )
            phone_numbers = await list_user_phone_numbers(session)
    except SQLAlchemyError as exc:
        logger.exception("Failed to create evacuation center")
        raise ApiError(
            "Failed to create evacuation center", details=str(exc)
        ) from exc

    logger.info(
        "Evacuation center created",
        extra={"center_id": center.id, "status": center.status},
    )
    background_tasks.add_task(
        notify_phone_numbers,
        phone_numbers,
        format_new_evacuation_center_sms(
            center.address,
            center.current_occupancy,
            center.capacity,
            center.contact_name,
            center.contact_phone,
        ),
    )

    return EvacuationCenterCreatedResponse(
        data=EvacuationCenterRead.model_validate(center),
        message="Evacuation center created successfully",
    )
