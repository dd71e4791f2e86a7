"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List

from pythonjsonlogger import jsonlogger

from card_calendar.domain.models import ReminderRequest

SERVICE_NAME = "card-calendar"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_reconcile(card_id: str, requests: List[ReminderRequest]) -> None:
    """Log the reminders issued for a card"""
    logging.info(
        "Reminders scheduled",
        extra={
            "card_id": card_id,
            "step": "reconcile",
            "reminders": {request.kind.value: request.fire_at.isoformat() for request in requests},
        },
    )


def log_cancel(card_id: str, keys: List[str]) -> None:
    logging.info("Reminders cancelled", extra={"card_id": card_id, "step": "cancel", "keys": keys})


def log_reschedule_all(card_count: int, reminder_count: int) -> None:
    logging.info(
        "Reminders rescheduled",
        extra={"step": "reschedule_all", "card_count": card_count, "reminder_count": reminder_count},
    )


def log_authorization_notice(card_id: str) -> None:
    """Informational notice, emitted once per period without notification permission"""
    logging.info(
        "Notifications not authorized; reminders are not being scheduled",
        extra={"card_id": card_id, "step": "authorization_notice"},
    )
