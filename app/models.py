from __future__ import annotations

import datetime
import uuid
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.config import (
    ALERT_LEVEL_MEDIUM,
    ALERT_LEVELS_SQL,
    EVACUATION_STATUS_OPEN,
    EVACUATION_STATUSES_SQL,
    USER_ROLE_USER,
)

# JSONB on Postgres, plain JSON elsewhere.
JsonType = JSON().with_variant(JSONB, "postgresql")


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def _new_id() -> str:
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )


class User(Base):
    __tablename__ = "users"
    __table_args__ = (Index("ix_users_role", "role"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    role: Mapped[str] = mapped_column(
        String(16), default=USER_ROLE_USER, nullable=False
    )


class Alert(Base):
    __tablename__ = "alert"
    __table_args__ = (
        CheckConstraint(
            f"alert_level in ({ALERT_LEVELS_SQL})",
            name="ck_alert_alert_level",
        ),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    alert_level: Mapped[str] = mapped_column(
        String(16), default=ALERT_LEVEL_MEDIUM, nullable=False
    )
    deleted_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class EvacuationCenter(Base):
    __tablename__ = "evacuation_centers"
    __table_args__ = (
        CheckConstraint(
            f"status in ({EVACUATION_STATUSES_SQL})",
            name="ck_evacuation_centers_status",
        ),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_occupancy: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), default=EVACUATION_STATUS_OPEN, nullable=False
    )
    contact_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    photos: Mapped[list[Any] | None] = mapped_column(JsonType, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(32), nullable=True)
