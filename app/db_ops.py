from __future__ import annotations

from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import (
    ALERT_LEVEL_MEDIUM,
    ALERT_LEVELS,
    EVACUATION_STATUS_OPEN,
    EVACUATION_STATUSES,
    USER_ROLE_USER,
)
from app.models import Alert, EvacuationCenter, User


def _validate_alert_level(alert_level: str) -> None:
    if alert_level not in ALERT_LEVELS:
        raise ValueError(f"Invalid alert level: {alert_level}")


def _validate_evacuation_status(status: str) -> None:
    if status not in EVACUATION_STATUSES:
        raise ValueError(f"Invalid evacuation status: {status}")


def _contains(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


async def create_user(
    session: AsyncSession,
    phone_number: str | None,
    role: str = USER_ROLE_USER,
) -> User:
    user = User(phone_number=phone_number, role=role)
    session.add(user)
    await session.flush()
    return user


async def list_user_phone_numbers(
    session: AsyncSession, role: str = USER_ROLE_USER
) -> list[str]:
    result = await session.execute(
        select(User.phone_number)
        .where(User.role == role, User.phone_number.is_not(None))
        .order_by(User.created_at)
    )
    return [number for number in result.scalars().all() if number and number.strip()]


async def create_alert(
    session: AsyncSession,
    title: str,
    content: str,
    alert_level: str = ALERT_LEVEL_MEDIUM,
) -> Alert:
    _validate_alert_level(alert_level)
    alert = Alert(title=title, content=content, alert_level=alert_level)
    session.add(alert)
    await session.flush()
    return alert


async def list_alerts(
    session: AsyncSession,
    search: str = "",
    alert_level: str = "",
) -> list[Alert]:
    query = (
        select(Alert)
        .where(Alert.deleted_at.is_(None))
        .order_by(Alert.created_at.desc())
    )
    if search:
        pattern = _contains(search)
        query = query.where(
            or_(
                Alert.content.ilike(pattern, escape="\\"),
                Alert.title.ilike(pattern, escape="\\"),
            )
        )
    if alert_level and alert_level != "all":
        query = query.where(Alert.alert_level == alert_level)

    result = await session.execute(query)
    return list(result.scalars().all())


async def create_evacuation_center(
    session: AsyncSession,
    name: str,
    address: str,
    latitude: float,
    longitude: float,
    status: str = EVACUATION_STATUS_OPEN,
    **fields: Any,
) -> EvacuationCenter:
    _validate_evacuation_status(status)
    center = EvacuationCenter(
        name=name,
        address=address,
        latitude=latitude,
        longitude=longitude,
        status=status,
        **fields,
    )
    session.add(center)
    await session.flush()
    return center


async def list_evacuation_centers(
    session: AsyncSession,
    search: str = "",
    status: str = "",
    min_capacity: int | None = None,
    max_capacity: int | None = None,
) -> list[EvacuationCenter]:
    query = select(EvacuationCenter).order_by(EvacuationCenter.created_at.desc())
    if search:
        pattern = _contains(search.lower())
        query = query.where(
            or_(
                EvacuationCenter.name.ilike(pattern, escape="\\"),
                EvacuationCenter.address.ilike(pattern, escape="\\"),
            )
        )
    if status and status != "all" and status in EVACUATION_STATUSES:
        query = query.where(EvacuationCenter.status == status)
    if min_capacity is not None:
        query = query.where(EvacuationCenter.capacity >= min_capacity)
    if max_capacity is not None:
        query = query.where(EvacuationCenter.capacity <= max_capacity)

    result = await session.execute(query)
    return list(result.scalars().all())
