"""SMS message templates for alerts and evacuation centers."""

import math

from app.config import (
    EVACUATION_STATUS_CLOSED,
    EVACUATION_STATUS_FULL,
    EVACUATION_STATUS_MAINTENANCE,
    EVACUATION_STATUS_OPEN,
)

PRIORITY_EMOJI = {
    "low": "🔵",
    "medium": "🟡",
    "high": "🟠",
    "critical": "🔴",
}

EVACUATION_STATUS_LINES = {
    EVACUATION_STATUS_OPEN: "✅ OPEN - Accepting evacuees",
    EVACUATION_STATUS_FULL: "🔴 FULL - No capacity available",
    EVACUATION_STATUS_CLOSED: "❌ CLOSED",
    EVACUATION_STATUS_MAINTENANCE: "🔧 MAINTENANCE - Temporarily unavailable",
}

MISSING_VALUE = "N/A"


def _display(value: object | None) -> str:
    if value is None or value == "":
        return MISSING_VALUE
    return str(value)


def occupancy_percentage(current_occupancy: int, capacity: int) -> int:
    # Rounds half up, unlike round().
    return math.floor(current_occupancy / capacity * 100 + 0.5)


def format_emergency_alert(title: str, message: str, priority: str) -> str:
    try:
        emoji = PRIORITY_EMOJI[priority]
    except KeyError:
        raise ValueError(f"Invalid alert priority: {priority}") from None

    return (
        f"{emoji} EMERGENCY ALERT\n\n{title}\n\n{message}\n\n"
        "This is an official emergency notification. "
        "Please follow local emergency procedures."
    )


def format_evacuation_notification(
    center_name: str,
    center_address: str,
    status: str,
    capacity: int | None = None,
    current_occupancy: int | None = None,
) -> str:
    try:
        status_line = EVACUATION_STATUS_LINES[status]
    except KeyError:
        raise ValueError(f"Invalid evacuation status: {status}") from None

    capacity_line = ""
    if capacity and current_occupancy is not None:
        percentage = occupancy_percentage(current_occupancy, capacity)
        capacity_line = f"\nCapacity: {current_occupancy}/{capacity} ({percentage}%)"

    return (
        f"🏢 EVACUATION CENTER UPDATE\n\n{center_name}\n"
        f"{status_line}{capacity_line}\n\n"
        f"Location: {center_address}\n\n"
        "For real-time updates, contact local emergency services."
    )


def format_new_alert_sms(title: str, content: str) -> str:
    return (
        f"EMERGENCY ALERT!!!\n\n{title}\n\n{content}\n\n"
        "This is an official emergency notification."
    )


def format_new_evacuation_center_sms(
    address: str,
    current_occupancy: int | None,
    capacity: int | None,
    contact_name: str | None,
    contact_phone: str | None,
) -> str:
    contact = " ".join(
        part for part in (contact_name, contact_phone) if part
    ) or MISSING_VALUE
    return (
        "NEW EVACUATION CENTER\n"
        f"Ang bagong evacuation ay mahahanap niyo sa {address}\n"
        "kasalukuyang kapasidad ay "
        f"{_display(current_occupancy)}/{_display(capacity)}\n"
        f"Maaring kontakin si {contact}"
    )
