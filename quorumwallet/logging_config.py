"""
Logging configuration for QuorumWallet.

Provides structured JSON logging for audit trails and debugging.
"""

import json
import logging
import sys
import time
from typing import Any, Optional

from .notifications import Notification, NotificationType


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs one JSON object per record, suitable for log aggregation.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.strftime('%Y-%m-%dT%H:%M:%SZ', time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class WalletAuditLogger:
    """
    Specialized logger for wallet audit events.

    Mirrors every notification into the logging system, and records
    rejected calls so that unauthorized attempts leave a trace.
    """

    _LEVELS = {
        NotificationType.EXECUTION_FAILURE: logging.ERROR,
    }

    def __init__(self, name: str = "quorumwallet.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        extra = {"event_type": event_type, **kwargs}
        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "",
            0,
            f"{event_type}: {kwargs.get('message', '')}",
            (),
            None
        )
        record.extra_fields = extra
        self._logger.handle(record)

    def notification(self, entry: Notification) -> None:
        """Log an emitted notification."""
        level = self._LEVELS.get(entry.kind, logging.INFO)
        owner = f" by {entry.owner}" if entry.owner is not None else ""
        self._log(
            level,
            entry.kind.value.upper(),
            transaction_id=entry.transaction_id,
            owner=entry.owner,
            seq=entry.seq,
            entry_hash=entry.entry_hash,
            message=f"{entry.kind.value} of transaction {entry.transaction_id}{owner}"
        )

    def call_rejected(
        self,
        operation: str,
        code: str,
        caller: Any = None,
        transaction_id: Optional[int] = None
    ) -> None:
        """Log a precondition failure."""
        self._log(
            logging.WARNING,
            "CALL_REJECTED",
            operation=operation,
            code=code,
            caller=caller,
            transaction_id=transaction_id,
            message=f"{operation} rejected: {code}"
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting (recommended for production)
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


audit_log = WalletAuditLogger()
