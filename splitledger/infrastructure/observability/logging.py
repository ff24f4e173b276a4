"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from splitledger.config import settings


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

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_ledger_computed(
    request_id: str,
    group_id: str,
    view: str,
    member_count: int,
    plan_size: int,
    duration_ms: float,
) -> None:
    """Log structured ledger recomputation for analysis"""
    logging.info(
        "Ledger computed",
        extra={
            "request_id": request_id,
            "group_id": group_id,
            "step": "ledger_computed",
            "view": view,
            "member_count": member_count,
            "plan_size": plan_size,
            "duration_ms": duration_ms,
        },
    )


def log_settlement_event(request_id: str, settlement_id: str, event: str) -> None:
    """Log settlement proposal/confirmation"""
    logging.info(
        "Settlement event",
        extra={
            "request_id": request_id,
            "settlement_id": settlement_id,
            "step": "settlement",
            "event": event,
        },
    )
