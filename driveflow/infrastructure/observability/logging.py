"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from driveflow.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_extension(
    request_id: str,
    booking_id: str,
    outcome: str,
    extra_days: int,
    charged_cents: int,
    duration_ms: float,
) -> None:
    """Log structured trip extension outcome for analysis"""
    logging.info(
        "Extension completed" if outcome == "extended" else "Extension stopped",
        extra={
            "request_id": request_id,
            "booking_id": booking_id,
            "step": "extension_complete",
            "extension_outcome": outcome,
            "extra_days": extra_days,
            "charged_cents": charged_cents,
            "duration_ms": duration_ms,
        },
    )


def log_unsaved_extension(
    request_id: str,
    booking_id: str,
    payment_reference: str | None,
    charged_cents: int,
    error: str,
) -> None:
    """Log a paid extension that was not saved, with what is needed to reconcile it"""
    logging.error(
        "Extension paid but not saved",
        extra={
            "request_id": request_id,
            "booking_id": booking_id,
            "step": "extension_persist",
            "payment_reference": payment_reference,
            "charged_cents": charged_cents,
            "error": error,
        },
    )
