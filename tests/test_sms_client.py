import json
import math

import httpx
import pytest
from httpx import ASGITransport

from app.main import app
from app.services.sms_client import SmsClient
from app.services.templates import format_emergency_alert
from conftest import FakeGateway


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _sms_api(failing: set[str] | None = None) -> tuple[httpx.MockTransport, list[dict]]:
    """Fake /api/sms endpoint answering in the service's envelope."""
    failing = failing or set()
    received: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"success": True})
        payload = json.loads(request.content)
        received.append(payload)
        if payload["to"] in failing:
            return httpx.Response(
                400, json={"success": False, "error": "Invalid phone number format"}
            )
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": {
                    "id": f"id-{payload['to']}",
                    "status": "pending",
                    "recipients": [payload["to"]],
                    "message": payload["message"],
                    "createdAt": "2026-10-19T00:00:00.000Z",
                },
                "message": "SMS sent successfully",
            },
        )

    return httpx.MockTransport(handler), received


def _recipients(count: int) -> list[str]:
    return [f"+6391700000{index:02d}" for index in range(count)]


@pytest.mark.asyncio
async def test_send_sms_returns_envelope() -> None:
    transport, received = _sms_api()
    client = SmsClient(base_url="http://sms.test", transport=transport)

    result = await client.send_sms("+639170000000", "hello", use_test=True)

    assert result.success is True
    assert result.data is not None
    assert result.data.recipients == ["+639170000000"]
    assert received == [
        {
            "to": "+639170000000",
            "message": "hello",
            "useTest": True,
            "useMessagingService": True,
        }
    ]


@pytest.mark.asyncio
async def test_send_sms_reports_error_envelope() -> None:
    transport, _ = _sms_api(failing={"+639170000000"})
    client = SmsClient(base_url="http://sms.test", transport=transport)

    result = await client.send_sms("+639170000000", "hello")

    assert result.success is False
    assert result.error == "Invalid phone number format"


@pytest.mark.asyncio
async def test_send_sms_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    client = SmsClient(base_url="http://sms.test", transport=httpx.MockTransport(handler))

    result = await client.send_sms("+639170000000", "hello")

    assert result.success is False
    assert result.error == "Failed to send SMS"
    assert result.details == "connection refused"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("count", "batch_size"),
    [(0, 10), (1, 10), (10, 10), (11, 10), (25, 10), (7, 3), (5, 1)],
)
async def test_bulk_sleeps_between_batches_only(count: int, batch_size: int) -> None:
    transport, received = _sms_api()
    sleep = SleepRecorder()
    client = SmsClient(base_url="http://sms.test", transport=transport, sleep=sleep)

    result = await client.send_bulk_sms(
        _recipients(count), "hello", batch_size=batch_size, delay_between_batches=2.5
    )

    expected_delays = max(math.ceil(count / batch_size) - 1, 0)
    assert sleep.delays == [2.5] * expected_delays
    assert len(received) == count
    assert result.total_sent == count
    assert result.total_failed == 0
    assert result.success is True


@pytest.mark.asyncio
async def test_bulk_tallies_failures_in_recipient_order() -> None:
    recipients = _recipients(6)
    failing = {recipients[1], recipients[4]}
    transport, _ = _sms_api(failing=failing)
    client = SmsClient(
        base_url="http://sms.test", transport=transport, sleep=SleepRecorder()
    )

    result = await client.send_bulk_sms(recipients, "hello", batch_size=4)

    assert result.success is False
    assert result.total_sent == 4
    assert result.total_failed == 2
    assert result.total_sent + result.total_failed == len(recipients)
    assert [item.to for item in result.results] == recipients
    assert [item.success for item in result.results] == [
        True, False, True, True, False, True,
    ]
    assert result.results[0].id == f"id-{recipients[0]}"
    assert result.results[1].id is None
    assert result.results[1].error == "Invalid phone number format"


@pytest.mark.asyncio
async def test_bulk_rejects_non_positive_batch_size() -> None:
    transport, _ = _sms_api()
    client = SmsClient(base_url="http://sms.test", transport=transport)

    with pytest.raises(ValueError):
        await client.send_bulk_sms(_recipients(2), "hello", batch_size=0)


@pytest.mark.asyncio
async def test_bulk_response_uses_camel_case() -> None:
    transport, _ = _sms_api()
    client = SmsClient(base_url="http://sms.test", transport=transport)

    result = await client.send_bulk_sms(_recipients(1), "hello")

    dumped = result.model_dump(by_alias=True, exclude_none=True)
    assert set(dumped) == {"success", "totalSent", "totalFailed", "results"}


@pytest.mark.asyncio
async def test_emergency_alert_critical_uses_larger_faster_batches() -> None:
    transport, received = _sms_api()
    sleep = SleepRecorder()
    client = SmsClient(base_url="http://sms.test", transport=transport, sleep=sleep)

    result = await client.send_emergency_alert(
        _recipients(45), "Flood", "Evacuate now", "critical"
    )

    assert result.total_sent == 45
    assert sleep.delays == [0.5, 0.5]
    assert received[0]["message"] == format_emergency_alert(
        "Flood", "Evacuate now", "critical"
    )


@pytest.mark.asyncio
async def test_emergency_alert_default_batches() -> None:
    transport, _ = _sms_api()
    sleep = SleepRecorder()
    client = SmsClient(base_url="http://sms.test", transport=transport, sleep=sleep)

    await client.send_emergency_alert(_recipients(25), "Storm", "Stay indoors", "high")

    assert sleep.delays == [1.0, 1.0]


@pytest.mark.asyncio
async def test_evacuation_notification_message() -> None:
    transport, received = _sms_api()
    client = SmsClient(base_url="http://sms.test", transport=transport)

    result = await client.send_evacuation_notification(
        _recipients(2),
        "Covered Court",
        "123 Rizal St",
        "open",
        capacity=200,
        current_occupancy=50,
    )

    assert result.total_sent == 2
    assert "Capacity: 50/200 (25%)" in received[0]["message"]


@pytest.mark.asyncio
async def test_check_status_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    client = SmsClient(base_url="http://sms.test", transport=httpx.MockTransport(handler))

    result = await client.check_status()

    assert result.success is False
    assert result.error == "Failed to check SMS service status"


@pytest.mark.asyncio
async def test_client_against_app(gateway: FakeGateway) -> None:
    sleep = SleepRecorder()
    client = SmsClient(
        base_url="http://test", transport=ASGITransport(app=app), sleep=sleep
    )
    gateway.failing_numbers = {"+639170000002"}

    status = await client.check_status()
    assert status.success is True
    assert status.data is not None
    assert status.data.provider == "TextBee"

    recipients = _recipients(3) + ["not-a-number"]
    result = await client.send_bulk_sms(recipients, "hello", batch_size=2)

    assert result.total_sent == 2
    assert result.total_failed == 2
    assert sleep.delays == [1.0]
    assert len(gateway.requests) == 3
    assert result.results[3].error.startswith("Invalid phone number format")
    assert result.results[2].error == "Recipient rejected"


def test_validate_phone_number() -> None:
    assert SmsClient.validate_phone_number("(63) 917-123-4567").formatted == "+639171234567"
    assert SmsClient.validate_phone_number("+1 234 567 890").valid is True

    invalid = SmsClient.validate_phone_number("0917")
    assert invalid.valid is False
    assert invalid.formatted is None
    assert invalid.error.startswith("Invalid phone number format")


def test_format_message_segments() -> None:
    assert SmsClient.format_message("a" * 160).segments == 1
    assert SmsClient.format_message("a" * 161).segments == 2
    assert SmsClient.format_message("a" * 25, max_length=10).segments == 3
