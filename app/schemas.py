import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class ErrorResponse(BaseModel):
    success: Literal[False] = False
    error: str
    details: str | None = None


# /api/sms wire models


class SmsSendRequest(CamelModel):
    to: str | None = None
    message: str | None = None
    # Accepted for client compatibility; the gateway has no test mode.
    use_test: bool = False
    use_messaging_service: bool = True


class SmsMessageData(CamelModel):
    id: str | None = None
    status: str
    recipients: list[str]
    message: str
    created_at: str | None = None


class SmsResponse(CamelModel):
    success: bool
    data: SmsMessageData | None = None
    message: str | None = None
    error: str | None = None
    details: str | None = None


class SmsStatusData(CamelModel):
    configured: bool
    api_key_configured: bool
    device_id_configured: bool
    environment: str
    provider: str


class SmsStatusResponse(CamelModel):
    success: bool
    data: SmsStatusData | None = None
    message: str | None = None
    error: str | None = None
    details: str | None = None


class GatewaySmsBatch(BaseModel):
    """`data` object of the gateway's send-sms response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = Field(default=None, alias="_id")
    status: str = "pending"
    recipients: list[str] = Field(default_factory=list)
    message: str = ""
    created_at: str | None = Field(default=None, alias="createdAt")


class BulkSmsResult(CamelModel):
    to: str
    success: bool
    id: str | None = None
    error: str | None = None


class BulkSmsResponse(CamelModel):
    success: bool
    total_sent: int
    total_failed: int
    results: list[BulkSmsResult]


class PhoneValidation(BaseModel):
    valid: bool
    formatted: str | None = None
    error: str | None = None


class FormattedMessage(BaseModel):
    message: str
    segments: int


# CRUD models


class AlertCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    content: str | None = None
    alert_level: str | None = None


class AlertRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    content: str
    alert_level: str
    created_at: datetime.datetime
    deleted_at: datetime.datetime | None = None


class AlertListResponse(BaseModel):
    success: Literal[True] = True
    data: list[AlertRead]
    total: int


class AlertCreatedResponse(BaseModel):
    success: Literal[True] = True
    data: AlertRead
    message: str


class EvacuationCenterCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    address: str | None = None
    # Checked in the service so bad input gets the coordinate error message.
    latitude: Any = None
    longitude: Any = None
    capacity: int | None = None
    current_occupancy: int | None = None
    status: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    photos: list[str] | None = None
    created_by: str | None = None


class EvacuationCenterRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    address: str
    latitude: float
    longitude: float
    capacity: int | None = None
    current_occupancy: int | None = None
    status: str
    contact_name: str | None = None
    contact_phone: str | None = None
    photos: list[str] | None = None
    created_by: str | None = None
    created_at: datetime.datetime


class EvacuationCenterListResponse(BaseModel):
    success: Literal[True] = True
    data: list[EvacuationCenterRead]
    total: int


class EvacuationCenterCreatedResponse(BaseModel):
    success: Literal[True] = True
    data: EvacuationCenterRead
    message: str
