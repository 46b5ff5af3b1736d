"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "cashback-tracker"


class CustomJsonFormatter(JsonFormatter):
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

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_transaction_created(request_id: str, transaction_id: str, amount: float, category: str) -> None:
    """Log structured purchase creation"""
    logging.info(
        "Transaction created",
        extra={
            "request_id": request_id,
            "transaction_id": transaction_id,
            "step": "transaction_created",
            "amount": amount,
            "category": category,
        },
    )


def log_transaction_deleted(request_id: str, transaction_id: str) -> None:
    logging.info(
        "Transaction deleted",
        extra={
            "request_id": request_id,
            "transaction_id": transaction_id,
            "step": "transaction_deleted",
        },
    )


def log_dashboard_computed(
    request_id: str,
    year: int,
    month: int,
    transaction_count: int,
    skipped_count: int,
    duration_ms: float,
) -> None:
    """Log dashboard outcome, including how many purchases lacked a price"""
    logging.info(
        "Dashboard computed",
        extra={
            "request_id": request_id,
            "step": "dashboard_complete",
            "period": f"{year:04d}-{month:02d}",
            "transaction_count": transaction_count,
            "skipped_count": skipped_count,
            "duration_ms": duration_ms,
        },
    )
