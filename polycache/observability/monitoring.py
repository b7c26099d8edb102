"""
polycache - Logging Setup

Structured JSON logging for the `polycache` logger hierarchy. Every
module logs through `logging.getLogger(__name__)` and passes context via
`extra={...}`; this module decides how those records are rendered.
"""

import json
import logging
from datetime import UTC, datetime

ROOT_LOGGER = "polycache"

# LogRecord attributes that are not user-supplied `extra` fields
_RESERVED_ATTRS = frozenset(
    (
        "args",
        "msg",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "name",
        "message",
    )
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add any extra fields from record.__dict__
        for key, value in record.__dict__.items():
            if key not in log_data and not key.startswith("_") and key not in _RESERVED_ATTRS:
                log_data[key] = value

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(level: str | int = "INFO", json_format: bool = True) -> logging.Logger:
    """
    Configure the polycache logger.

    Args:
        level: Log level name or number
        json_format: Emit JSON lines (plain text otherwise)

    Returns:
        The configured `polycache` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    logger.addHandler(handler)
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    return logger


def setup_logging_from_config() -> logging.Logger:
    """Configure logging from the loaded polycache configuration."""
    from ..config import get_config

    config = get_config()
    return setup_logging(config.log_level, json_format=config.json_logs)
