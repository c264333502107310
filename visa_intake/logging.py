"""Logging setup for visa-intake.

Store and workflow log lines carry record context as ``extra`` attributes
(see :func:`record_context`). The JSON formatter emits them as top-level
keys; the standard formatter shows the tracking code when one is set.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Attributes attached to log records through ``extra=record_context(...)``
CONTEXT_FIELDS = ("tracking_code", "entity", "entity_id", "status")

_STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(code_tag)s%(message)s"


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
) -> None:
    """Route visa-intake logs to stdout.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Unknown names
        fall back to INFO.
    format_type : str
        ``"standard"`` for aligned text lines or ``"json"`` for one JSON
        object per line.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter: logging.Formatter
    if format_type == "json":
        formatter = JsonFormatter()
    else:
        formatter = ContextFormatter(fmt=_STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("visa_intake").setLevel(log_level)

    # Faker logs every provider lookup at DEBUG; SQLAlchemy echoes statements at INFO
    for noisy in ("faker", "asyncio", "aiosqlite", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def record_context(
    tracking_code: str | None = None,
    entity: str | None = None,
    entity_id: str | None = None,
    status: Any = None,
) -> dict[str, Any]:
    """Build the ``extra`` mapping for a log call about one record.

    Unset values are left out. Enum statuses are logged by value.
    """
    context = {
        "tracking_code": tracking_code,
        "entity": entity,
        "entity_id": entity_id,
        "status": getattr(status, "value", status),
    }
    return {k: v for k, v in context.items() if v is not None}


class ContextFormatter(logging.Formatter):
    """Text formatter that prefixes the message with ``[TRACKING]`` when known."""

    def format(self, record: logging.LogRecord) -> str:
        code = getattr(record, "tracking_code", None)
        record.code_tag = f"[{code}] " if code else ""
        return super().format(record)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with record context as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Free-form fields passed as extra={"extra": {...}}
        if hasattr(record, "extra"):
            log_data.update(record.extra)

        # Decimals, dates and paths are written as strings
        return json.dumps(log_data, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Parameters
    ----------
    name : str
        Logger name (usually __name__).

    Returns
    -------
    logging.Logger
        Configured logger.
    """
    return logging.getLogger(name)
