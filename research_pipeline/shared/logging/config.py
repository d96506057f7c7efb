"""
Structured logging configuration.

Provides JSON-formatted logging for pipeline step transitions and events.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from research_pipeline.graph.progress import RunStatus


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter that outputs log records as JSON.

    Each log entry includes:
    - timestamp: ISO format datetime
    - level: Log level name
    - logger: Logger name
    - message: Log message
    - extra: Any additional fields passed to the log call
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra"):
            log_entry["extra"] = record.extra

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    logger_name: str = "research_pipeline",
) -> logging.Logger:
    """
    Configure structured JSON logging.

    The logger gets its own handlers and stops propagating, so records are
    not repeated by root handlers configured with basicConfig.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path to log file. If not provided, logs to stdout only.
        logger_name: Name for the logger instance.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False

    logger.handlers = []

    formatter = StructuredFormatter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_step_transition(
    event: str,
    status: "RunStatus",
    extra: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a pipeline step transition.

    Args:
        event: Name of the event (e.g., "step_entered", "step_failed")
        status: Run status snapshot taken right after the transition
        extra: Additional context to include in the log
        logger: Logger instance to use. If not provided, uses default.
    """
    if logger is None:
        logger = logging.getLogger("research_pipeline.transitions")
    if not logger.isEnabledFor(logging.INFO):
        return

    status_summary = {
        "current_step": status.current_step.value,
        "steps_concluded": len(status.history),
        "last_error": status.last_error,
    }

    log_data = {
        "event": event,
        "status_summary": status_summary,
    }

    if extra:
        log_data["extra"] = extra

    record = logger.makeRecord(
        logger.name,
        logging.INFO,
        "",
        0,
        f"Step transition: {event} -> {status.current_step.value}",
        args=(),
        exc_info=None,
    )
    record.extra = log_data

    logger.handle(record)
