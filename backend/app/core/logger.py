"""
Logging configuration for the analysis backend
Routes INFO logs to stdout and WARNING+ to stderr, and wires structlog through stdlib logging
"""

import sys
import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict

import structlog


class JSONLogFormatter(logging.Formatter):
    """
    JSON formatter for container log collectors
    Produces structured logs with proper log level attribution
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON line"""
        log_obj: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "request_id"):
            log_obj["request_id"] = record.request_id

        # Add extra fields from the record
        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            log_obj.update(record.extra_fields)

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_obj["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(log_obj, default=str)


class InfoFilter(logging.Filter):
    """Filter that only allows INFO and DEBUG level messages"""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= logging.INFO


class WarningFilter(logging.Filter):
    """Filter that only allows WARNING and above level messages"""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.WARNING


def configure_structlog() -> None:
    """
    Configure structlog to render key/value events through the stdlib handlers

    structlog loggers are used by the resilience layer (retry, circuit breaker,
    orchestrator) so every attempt carries its context as fields.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(default=str)
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """
    Configure root logging with stream routing

    - stdout: INFO and DEBUG messages
    - stderr: WARNING, ERROR, CRITICAL messages

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for structured lines, "text" for local development
    """
    log_level = log_level.upper()
    numeric_level = getattr(logging, log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove all existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if log_format == "json":
        formatter = JSONLogFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(InfoFilter())
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.addFilter(WarningFilter())
    stderr_handler.setFormatter(formatter)

    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(stderr_handler)

    # Suppress noisy third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)

    configure_structlog()

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured: level={log_level}, format={log_format}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def add_log_context(**kwargs: Any) -> Dict[str, Any]:
    """
    Create a dict of extra context to pass to logger calls

    Example:
        logger.info("Extracted document", extra=add_log_context(storage_key="abc.docx"))

    Args:
        **kwargs: Key-value pairs to add to log context

    Returns:
        Dict formatted for logger's 'extra' parameter
    """
    return {"extra_fields": kwargs}
