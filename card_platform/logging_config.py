"""
Structured Logging Configuration Module

One JSON object per line for card and ledger events. Every event names the
card it concerns, the action (create_card, spend, topup, reconcile) and,
once a ledger entry exists, the transaction it produced.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any, Optional


SERVICE_NAME = "card_platform"

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s%(card_context)s"

# Record attributes set by log_card_event, in output order
CARD_FIELDS = ("card_id", "action", "transaction_id", "correlation_id")


class JSONFormatter(logging.Formatter):
    """JSON formatter for card events"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CARD_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value

        details = getattr(record, 'details', None)
        if details:
            log_entry['details'] = details

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class CardTextFormatter(logging.Formatter):
    """Plain-text lines with the card and action appended"""

    def __init__(self):
        super().__init__(TEXT_FORMAT)

    def format(self, record):
        context = [f"{name}={getattr(record, name)}" for name in CARD_FIELDS
                   if getattr(record, name, None) is not None]
        record.card_context = f" [{' '.join(context)}]" if context else ""
        return super().format(record)


def setup_logging(level: str = "INFO", log_format: str = "json",
                  logger_name: str = SERVICE_NAME) -> logging.Logger:
    """
    Setup structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for one JSON object per line, "text" for plain lines
        logger_name: Name of the logger

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(CardTextFormatter() if log_format == "text" else JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    return logger


def get_logger(name: str = SERVICE_NAME) -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_card_event(logger: logging.Logger, level: str, message: str,
                   card_id: Optional[str] = None, action: Optional[str] = None,
                   transaction_id: Optional[str] = None,
                   correlation_id: Optional[str] = None,
                   exc_info=None, **details: Any):
    """
    Log a card event with structured fields.

    Args:
        logger: Logger instance
        level: Log level (info, warning, error, etc.)
        message: Log message
        card_id: Card the event concerns
        action: Operation being performed
        transaction_id: Ledger entry written or attempted
        correlation_id: Correlation ID for request tracing
        exc_info: Exception info tuple to attach to the record
        **details: Event data such as amounts, balances and versions
    """
    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return

    record = logger.makeRecord(
        logger.name, levelno,
        __name__, 0, message, (), exc_info
    )

    record.card_id = card_id
    record.action = action
    record.transaction_id = transaction_id
    record.correlation_id = correlation_id
    record.details = {k: v for k, v in details.items() if v is not None}

    logger.handle(record)
