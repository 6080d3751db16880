"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from finhealth_gateway.config import settings


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


def log_score_calculated(
    request_id: str,
    user_id: str,
    total: int,
    level: int,
    change: Optional[int],
    duration_ms: float,
) -> None:
    """Log structured health score outcome"""
    logging.info(
        "Health score calculated",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "health_score_complete",
            "score_total": total,
            "score_level": level,
            "score_change": change,
            "duration_ms": duration_ms,
        },
    )


def log_recurring_detected(
    request_id: str,
    user_id: str,
    transaction_count: int,
    charge_count: int,
    monthly_total: float,
    duration_ms: float,
) -> None:
    """Log structured recurring detection outcome"""
    logging.info(
        "Recurring charges detected",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "recurring_complete",
            "transaction_count": transaction_count,
            "charge_count": charge_count,
            "monthly_total": round(monthly_total, 2),
            "duration_ms": duration_ms,
        },
    )
