"""
Logging Configuration and Utilities

structlog builds the event dictionaries (request context, redaction,
logger name and level) and hands them to the standard library, where
python-json-logger renders each record as one JSON line.
"""

import sys
import logging
from datetime import datetime, timezone
from contextvars import ContextVar
from typing import Any, Dict, Optional

import structlog
from pythonjsonlogger import jsonlogger

from .config import settings

# Context variables for request tracking
request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
account_id: ContextVar[Optional[str]] = ContextVar("account_id", default=None)


class RequestContextProcessor:
    """Add request context to log records"""

    def __call__(self, logger, method_name, event_dict):
        req_id = request_id.get()
        if req_id:
            event_dict["request_id"] = req_id

        acc_id = account_id.get()
        if acc_id:
            event_dict["account_id"] = acc_id

        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
        event_dict["service"] = settings.SERVICE_NAME
        event_dict["environment"] = settings.ENVIRONMENT

        return event_dict


class SecurityLogProcessor:
    """Mask sensitive values before they reach a handler"""

    SENSITIVE_KEYS = ("password", "token", "secret", "credentials", "authorization", "cookie")

    def __call__(self, logger, method_name, event_dict):
        self._sanitize_event_dict(event_dict)
        return event_dict

    def _sanitize_event_dict(self, event_dict: Dict[str, Any]):
        for key in list(event_dict.keys()):
            if any(sensitive in key.lower() for sensitive in self.SENSITIVE_KEYS):
                event_dict[key] = "[REDACTED]"
            elif isinstance(event_dict[key], dict):
                self._sanitize_event_dict(event_dict[key])


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that adds the standard record fields"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["function"] = record.funcName
        log_record["line"] = record.lineno


class LoggingConfig:
    """Centralized logging configuration"""

    @staticmethod
    def configure_structured_logging():
        """Configure structlog to render into stdlib records."""
        processors = [
            structlog.stdlib.filter_by_level,
            RequestContextProcessor(),
            SecurityLogProcessor(),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.render_to_log_kwargs,
        ]

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=True,
        )

    @staticmethod
    def configure_standard_logging():
        """Configure the root logger and its console handler."""
        level = getattr(logging, settings.logging.LOG_LEVEL)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        if settings.logging.LOG_FORMAT == "json":
            formatter = CustomJsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s")
        else:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        LoggingConfig._configure_library_loggers()

    @staticmethod
    def _configure_library_loggers():
        """Reduce noise from external libraries"""
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

        if settings.logging.LOG_SQL_QUERIES:
            logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
        else:
            logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

        logging.getLogger("celery").setLevel(logging.INFO)
        logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger.

    Keyword arguments passed to the log methods end up as fields of the
    JSON record::

        logger.warning("Failed to end visit", student_id=42, visit_id=7)
    """
    return structlog.get_logger(name or "ogs")


def setup_logging():
    """Initialize logging configuration"""
    LoggingConfig.configure_structured_logging()
    LoggingConfig.configure_standard_logging()

    get_logger(__name__).info(
        "Logging system initialized",
        log_level=settings.logging.LOG_LEVEL,
        log_format=settings.logging.LOG_FORMAT,
    )


# Initialize logging when module is imported
setup_logging()

__all__ = [
    "get_logger",
    "setup_logging",
    "LoggingConfig",
    "request_id",
    "account_id",
]
