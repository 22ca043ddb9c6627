import os
from dataclasses import dataclass
from typing import Final, Literal


class ConfigurationError(RuntimeError):
    pass


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name)
    return value if value is not None else default


def _get_int_env(name: str, default: int, minimum: int | None = None) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    if minimum is not None and parsed < minimum:
        return default
    return parsed


def _get_float_env(name: str, default: float, minimum: float | None = None) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    if minimum is not None and parsed < minimum:
        return default
    return parsed


@dataclass(frozen=True, slots=True)
class TextBeeConfig:
    api_key: str
    device_id: str
    base_url: str


# TEXTBEE_API_KEY / TEXTBEE_DEVICE_ID: gateway credentials, no fallback.
def get_textbee_config() -> TextBeeConfig:
    api_key = os.getenv("TEXTBEE_API_KEY", "").strip()
    device_id = os.getenv("TEXTBEE_DEVICE_ID", "").strip()

    missing = [
        name
        for name, value in (
            ("TEXTBEE_API_KEY", api_key),
            ("TEXTBEE_DEVICE_ID", device_id),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"Missing required TextBee configuration: {', '.join(missing)}"
        )

    return TextBeeConfig(
        api_key=api_key,
        device_id=device_id,
        base_url=get_textbee_base_url(),
    )


# TEXTBEE_BASE_URL: gateway REST base.
def get_textbee_base_url() -> str:
    return _get_env("TEXTBEE_BASE_URL", "https://api.textbee.dev/api/v1").rstrip("/")


# SMS_TIMEOUT_SECONDS: outbound HTTP timeout in seconds.
def get_sms_timeout_seconds() -> float:
    return _get_float_env("SMS_TIMEOUT_SECONDS", 10.0, minimum=0.1)


# SMS_API_BASE_URL: where the SMS client wrapper reaches /api/sms.
def get_sms_api_base_url() -> str:
    return _get_env("SMS_API_BASE_URL", "http://localhost:8000").rstrip("/")


# APP_ENV: "production" hides error details from responses.
def get_app_env() -> str:
    return _get_env("APP_ENV", "development")


def is_production() -> bool:
    return get_app_env() == "production"


# LOG_LEVEL: root log level.
def get_log_level() -> str:
    return _get_env("LOG_LEVEL", "INFO")


# SMS_BATCH_SIZE / SMS_BATCH_DELAY_SECONDS: bulk send defaults.
DEFAULT_BATCH_SIZE = _get_int_env("SMS_BATCH_SIZE", 10, minimum=1)
DEFAULT_BATCH_DELAY_SECONDS = _get_float_env(
    "SMS_BATCH_DELAY_SECONDS", 1.0, minimum=0.0
)

CRITICAL_BATCH_SIZE: Final = 20
CRITICAL_BATCH_DELAY_SECONDS: Final = 0.5

SMS_SEGMENT_LENGTH: Final = 160

SMS_PROVIDER_NAME: Final = "TextBee"

AlertLevel = Literal["low", "medium", "high", "critical"]
EvacuationStatus = Literal["open", "closed", "full", "maintenance"]

ALERT_LEVEL_LOW: Final[Literal["low"]] = "low"
ALERT_LEVEL_MEDIUM: Final[Literal["medium"]] = "medium"
ALERT_LEVEL_HIGH: Final[Literal["high"]] = "high"
ALERT_LEVEL_CRITICAL: Final[Literal["critical"]] = "critical"

ALERT_LEVELS = (
    ALERT_LEVEL_LOW,
    ALERT_LEVEL_MEDIUM,
    ALERT_LEVEL_HIGH,
    ALERT_LEVEL_CRITICAL,
)

EVACUATION_STATUS_OPEN: Final[Literal["open"]] = "open"
EVACUATION_STATUS_CLOSED: Final[Literal["closed"]] = "closed"
EVACUATION_STATUS_FULL: Final[Literal["full"]] = "full"
EVACUATION_STATUS_MAINTENANCE: Final[Literal["maintenance"]] = "maintenance"

EVACUATION_STATUSES = (
    EVACUATION_STATUS_OPEN,
    EVACUATION_STATUS_CLOSED,
    EVACUATION_STATUS_FULL,
    EVACUATION_STATUS_MAINTENANCE,
)

USER_ROLE_USER: Final = "user"

# Levels and statuses stored in the database as plain strings.
ALERT_LEVELS_SQL = ", ".join(f"'{level}'" for level in ALERT_LEVELS)
EVACUATION_STATUSES_SQL = ", ".join(f"'{status}'" for status in EVACUATION_STATUSES)
