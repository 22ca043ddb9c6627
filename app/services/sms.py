"""TextBee gateway calls behind /api/sms."""

import logging
import math
import re

import httpx
from pydantic import ValidationError

from app.config import (
    SMS_PROVIDER_NAME,
    SMS_SEGMENT_LENGTH,
    ConfigurationError,
    get_app_env,
    get_sms_timeout_seconds,
    get_textbee_config,
)
from app.errors import (
    SMS_SEND_FAILED,
    ApiError,
    SmsConfigurationError,
    SmsGatewayResponseError,
    SmsGatewayUnavailableError,
    SmsRequestError,
    SmsValidationError,
)
from app.schemas import (
    FormattedMessage,
    GatewaySmsBatch,
    PhoneValidation,
    SmsMessageData,
    SmsStatusData,
)

logger = logging.getLogger(__name__)

PHONE_NUMBER_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")
_WHITESPACE = re.compile(r"\s+")
_NON_DIALABLE = re.compile(r"[^\d+]")

MISSING_FIELDS_MESSAGE = "Missing required fields: to and message are required"
INVALID_PHONE_MESSAGE = (
    "Invalid phone number format. Use international format (e.g., +1234567890)"
)


def _with_plus(number: str) -> str:
    return number if number.startswith("+") else f"+{number}"


def validate_phone_number(phone_number: str) -> PhoneValidation:
    """Loose check for user-entered numbers: drops everything but digits and '+'."""
    cleaned = _NON_DIALABLE.sub("", phone_number)
    if not PHONE_NUMBER_PATTERN.match(cleaned):
        return PhoneValidation(valid=False, error=INVALID_PHONE_MESSAGE)
    return PhoneValidation(valid=True, formatted=_with_plus(cleaned))


def format_message(message: str, max_length: int = SMS_SEGMENT_LENGTH) -> FormattedMessage:
    if len(message) <= max_length:
        return FormattedMessage(message=message, segments=1)
    return FormattedMessage(message=message, segments=math.ceil(len(message) / max_length))


def normalize_recipient(to: str | None, message: str | None) -> str:
    """Validate a send request and return the E.164 recipient."""
    if not to or not message:
        raise SmsValidationError(MISSING_FIELDS_MESSAGE)

    compact = _WHITESPACE.sub("", to)
    if not PHONE_NUMBER_PATTERN.match(compact):
        raise SmsValidationError(INVALID_PHONE_MESSAGE)
    return _with_plus(compact)


def _gateway_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=get_sms_timeout_seconds())


def _gateway_error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return SMS_SEND_FAILED
    if not isinstance(body, dict):
        return SMS_SEND_FAILED

    message = body.get("message") or body.get("error")
    if isinstance(message, list):
        message = "; ".join(str(item) for item in message)
    return str(message) if message else SMS_SEND_FAILED


async def send_sms(to: str | None, message: str | None) -> SmsMessageData:
    """Send one SMS through the gateway.

    Raises an ApiError subclass carrying the HTTP status to report: 400 for
    invalid input (before any network call), the gateway's own status for
    non-2xx answers, 503 when the gateway cannot be reached, 500 otherwise.
    """
    recipient = normalize_recipient(to, message)

    try:
        config = get_textbee_config()
    except ConfigurationError as exc:
        logger.error("SMS gateway is not configured", extra={"error": str(exc)})
        raise SmsConfigurationError(details=str(exc)) from exc

    url = f"{config.base_url}/gateway/devices/{config.device_id}/send-sms"
    try:
        async with _gateway_client() as client:
            response = await client.post(
                url,
                json={"recipients": [recipient], "message": message},
                headers={"x-api-key": config.api_key},
            )
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        error = _gateway_error_message(exc.response)
        logger.warning(
            "SMS gateway rejected message",
            extra={
                "to": recipient,
                "status_code": exc.response.status_code,
                "error": error,
            },
        )
        raise SmsGatewayResponseError(
            error, status_code=exc.response.status_code, details=str(exc)
        ) from exc
    except (httpx.UnsupportedProtocol, httpx.InvalidURL) as exc:
        logger.error("Could not build SMS gateway request", extra={"error": str(exc)})
        raise SmsRequestError(details=str(exc)) from exc
    except httpx.RequestError as exc:
        logger.error(
            "SMS gateway unreachable", extra={"to": recipient, "error": str(exc)}
        )
        raise SmsGatewayUnavailableError(details=str(exc)) from exc

    # Only a missing `data` object is fatal; the gateway may omit the batch id.
    try:
        body = response.json()
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise ValueError("Gateway response has no data object")
        batch = GatewaySmsBatch.model_validate(data)
    except (ValueError, ValidationError) as exc:
        logger.error(
            "Unexpected SMS gateway response",
            extra={"to": recipient, "error": str(exc)},
        )
        raise ApiError(SMS_SEND_FAILED, details=str(exc)) from exc

    logger.info(
        "SMS sent",
        extra={"to": recipient, "sms_id": batch.id, "status": batch.status},
    )
    return SmsMessageData(
        id=batch.id,
        status=batch.status,
        recipients=batch.recipients or [recipient],
        message=batch.message or message,
        created_at=batch.created_at,
    )


def get_sms_status() -> SmsStatusData:
    try:
        get_textbee_config()
    except ConfigurationError as exc:
        raise SmsConfigurationError(details=str(exc)) from exc

    return SmsStatusData(
        configured=True,
        api_key_configured=True,
        device_id_configured=True,
        environment=get_app_env(),
        provider=SMS_PROVIDER_NAME,
    )
