import logging
from dataclasses import dataclass

from app.errors import ApiError
from app.services import sms as sms_service

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NotificationSummary:
    sent: int = 0
    failed: int = 0


async def notify_phone_numbers(
    phone_numbers: list[str], message: str
) -> NotificationSummary:
    """Send `message` to each number in turn; failures are logged, not raised."""
    summary = NotificationSummary()
    if not phone_numbers:
        logger.info("No users found for SMS notifications")
        return summary

    logger.info(
        "Sending SMS notifications", extra={"recipient_count": len(phone_numbers)}
    )
    for phone_number in phone_numbers:
        try:
            sent = await sms_service.send_sms(phone_number, message)
        except ApiError as exc:
            summary.failed += 1
            logger.error(
                "Failed to send SMS notification",
                extra={"to": phone_number, "error": exc.error},
            )
        except Exception:
            summary.failed += 1
            logger.exception(
                "Error sending SMS notification", extra={"to": phone_number}
            )
        else:
            summary.sent += 1
            logger.info(
                "SMS notification sent",
                extra={"to": phone_number, "sms_id": sent.id},
            )

    logger.info(
        "SMS notifications finished",
        extra={"sent": summary.sent, "failed": summary.failed},
    )
    return summary
