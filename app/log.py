"""Structured stdout logging for the alert service.

Every entry is one JSON object tagged with the service name and deployment
environment. Fields passed through ``extra=`` land as top-level keys. In
production the recipient number under ``to`` is masked down to its last four
digits.
"""

import json
import logging
import sys
from datetime import datetime, timezone

SERVICE_NAME = "emergency-alert-sms"

# Keys every LogRecord carries; anything else came in through `extra=`.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_PHONE_FIELDS = frozenset({"to"})

_QUIET_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


def mask_phone_number(value: object) -> str:
    digits = str(value)
    if len(digits) <= 4:
        return "*" * len(digits)
    return "*" * (len(digits) - 4) + digits[-4:]


class JsonFormatter(logging.Formatter):
    def __init__(self, environment: str = "development", mask_phones: bool = False):
        super().__init__()
        self.environment = environment
        self.mask_phones = mask_phones

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "environment": self.environment,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in vars(record).items():
            if key in _RECORD_ATTRS or key in entry:
                continue
            if self.mask_phones and key in _PHONE_FIELDS and value:
                value = mask_phone_number(value)
            entry[key] = value

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(level: str = "INFO", environment: str = "development") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JsonFormatter(environment, mask_phones=environment == "production")
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
