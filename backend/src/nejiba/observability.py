"""Structured JSON logging for the API process."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from nejiba.schemas.workshop import ValidationResult

SERVICE_NAME = "nejiba-workshops"

# Enough error paths to spot a pattern without logging whole reports
MAX_LOGGED_PATHS = 5


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": int(time.time() * 1000),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            payload.update(extra_fields)

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())

    # Avoid duplicate handlers on hot reload
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)


def validation_fields(result: ValidationResult) -> dict[str, Any]:
    """Log fields summarizing a validation result."""
    return {
        "is_valid": result.is_valid,
        "errors": len(result.errors),
        "warnings": len(result.warnings),
        "error_paths": [f.path for f in result.errors[:MAX_LOGGED_PATHS]],
    }


def log_event(logger: logging.Logger, level: int, message: str, **fields: Any) -> None:
    logger.log(level, message, extra={"extra_fields": fields})
