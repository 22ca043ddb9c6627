"""Client for the /api/sms endpoint, with bulk and templated sends."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx
from pydantic import ValidationError

from app.config import (
    ALERT_LEVEL_CRITICAL,
    CRITICAL_BATCH_DELAY_SECONDS,
    CRITICAL_BATCH_SIZE,
    DEFAULT_BATCH_DELAY_SECONDS,
    DEFAULT_BATCH_SIZE,
    SMS_SEGMENT_LENGTH,
    get_sms_api_base_url,
    get_sms_timeout_seconds,
)
from app.schemas import (
    BulkSmsResponse,
    BulkSmsResult,
    FormattedMessage,
    PhoneValidation,
    SmsResponse,
    SmsSendRequest,
    SmsStatusResponse,
)
from app.services import sms as sms_service
from app.services.templates import (
    format_emergency_alert,
    format_evacuation_notification,
)

logger = logging.getLogger(__name__)

SMS_PATH = "/api/sms"

Sleep = Callable[[float], Awaitable[None]]


class SmsClient:
    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._base_url = base_url
        self._transport = transport
        self._sleep = sleep

    @property
    def base_url(self) -> str:
        return self._base_url or get_sms_api_base_url()

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            transport=self._transport,
            timeout=get_sms_timeout_seconds(),
        )

    async def send_sms(
        self,
        to: str,
        message: str,
        use_test: bool = False,
        use_messaging_service: bool = True,
    ) -> SmsResponse:
        request = SmsSendRequest(
            to=to,
            message=message,
            use_test=use_test,
            use_messaging_service=use_messaging_service,
        )
        try:
            async with self._client() as client:
                response = await client.post(
                    SMS_PATH, json=request.model_dump(by_alias=True)
                )
            return SmsResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as exc:
            logger.error("SMS service error", extra={"to": to, "error": str(exc)})
            return SmsResponse(
                success=False, error="Failed to send SMS", details=str(exc)
            )

    async def send_bulk_sms(
        self,
        recipients: list[str],
        message: str,
        use_test: bool = False,
        use_messaging_service: bool = True,
        batch_size: int = DEFAULT_BATCH_SIZE,
        delay_between_batches: float = DEFAULT_BATCH_DELAY_SECONDS,
    ) -> BulkSmsResponse:
        """Send `message` to every recipient, `batch_size` at a time.

        Sends within a batch run concurrently; the client sleeps
        `delay_between_batches` seconds between batches, never after the last.
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1.")

        async def _send_one(to: str) -> BulkSmsResult:
            result = await self.send_sms(
                to,
                message,
                use_test=use_test,
                use_messaging_service=use_messaging_service,
            )
            return BulkSmsResult(
                to=to,
                success=result.success,
                id=result.data.id if result.data else None,
                error=result.error,
            )

        results: list[BulkSmsResult] = []
        for start in range(0, len(recipients), batch_size):
            batch = recipients[start : start + batch_size]
            results.extend(await asyncio.gather(*(_send_one(to) for to in batch)))

            if start + batch_size < len(recipients):
                await self._sleep(delay_between_batches)

        total_sent = sum(1 for result in results if result.success)
        total_failed = len(results) - total_sent
        logger.info(
            "Bulk SMS finished",
            extra={
                "recipient_count": len(recipients),
                "total_sent": total_sent,
                "total_failed": total_failed,
            },
        )
        return BulkSmsResponse(
            success=total_failed == 0,
            total_sent=total_sent,
            total_failed=total_failed,
            results=results,
        )

    async def check_status(self) -> SmsStatusResponse:
        try:
            async with self._client() as client:
                response = await client.get(SMS_PATH)
            return SmsStatusResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as exc:
            logger.error("SMS status check error", extra={"error": str(exc)})
            return SmsStatusResponse(
                success=False,
                error="Failed to check SMS service status",
                details=str(exc),
            )

    async def send_emergency_alert(
        self,
        recipients: list[str],
        alert_title: str,
        alert_message: str,
        priority: str,
        use_test: bool = False,
    ) -> BulkSmsResponse:
        message = format_emergency_alert(alert_title, alert_message, priority)
        critical = priority == ALERT_LEVEL_CRITICAL
        return await self.send_bulk_sms(
            recipients,
            message,
            use_test=use_test,
            batch_size=CRITICAL_BATCH_SIZE if critical else DEFAULT_BATCH_SIZE,
            delay_between_batches=(
                CRITICAL_BATCH_DELAY_SECONDS if critical else DEFAULT_BATCH_DELAY_SECONDS
            ),
        )

    async def send_evacuation_notification(
        self,
        recipients: list[str],
        center_name: str,
        center_address: str,
        status: str,
        capacity: int | None = None,
        current_occupancy: int | None = None,
        use_test: bool = False,
    ) -> BulkSmsResponse:
        message = format_evacuation_notification(
            center_name, center_address, status, capacity, current_occupancy
        )
        return await self.send_bulk_sms(recipients, message, use_test=use_test)

    @staticmethod
    def validate_phone_number(phone_number: str) -> PhoneValidation:
        return sms_service.validate_phone_number(phone_number)

    @staticmethod
    def format_message(
        message: str, max_length: int = SMS_SEGMENT_LENGTH
    ) -> FormattedMessage:
        return sms_service.format_message(message, max_length)


sms_client = SmsClient()
