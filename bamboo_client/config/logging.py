"""
Logging configuration for the Bamboo registry client.

The library never touches process-wide logging on its own. Each client
either logs through an injected logger, through a private logger bound to
the sink given in its configuration, or through the package logger, which
stays silent until the host application configures logging.
"""

import logging
import logging.config
import sys
from typing import Any, Dict, Optional, TextIO

from pythonjsonlogger.json import JsonFormatter

TEXT_FORMAT = "%(asctime)s - [debug] %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s"
JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(module)s %(lineno)d %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logging_config(
    log_level: str = "INFO",
    log_format: str = "text",
    log_file: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Get a logging configuration dictionary for host applications.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'text')
        log_file: Optional log file path

    Returns:
        Logging configuration dictionary
    """
    formatters = {
        "detailed": {
            "format": TEXT_FORMAT,
            "datefmt": DATE_FORMAT
        },
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "fmt": JSON_FORMAT
        }
    }

    formatter_name = "json" if log_format == "json" else "detailed"

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": formatter_name,
            "stream": sys.stdout
        }
    }

    if log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": formatter_name,
            "filename": log_file,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "encoding": "utf8"
        }

    loggers = {
        "bamboo_client": {
            "level": log_level,
            "handlers": list(handlers.keys()),
            "propagate": False
        },
        "httpx": {
            "level": "WARNING",
            "handlers": list(handlers.keys()),
            "propagate": False
        }
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": loggers
    }


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    log_file: Optional[str] = None,
) -> None:
    """
    Configure logging for an application embedding the client.

    This is opt-in; the client itself never calls it.
    """
    logging.config.dictConfig(
        get_logging_config(log_level=log_level, log_format=log_format, log_file=log_file)
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def create_client_logger(
    sink: TextIO,
    log_level: str = "DEBUG",
    log_format: str = "text",
    name: str = "bamboo_client.client",
) -> logging.Logger:
    """
    Build a logger that writes to ``sink`` and belongs to a single client.

    The logger is not registered with the logging manager, so it neither
    receives configuration from nor leaks records into the process-wide
    logger hierarchy.

    Args:
        sink: Text stream receiving the log lines
        log_level: Logging level for the logger and its handler
        log_format: 'json' or 'text'
        name: Name shown in the records

    Returns:
        Logger instance owned by the caller
    """
    handler = logging.StreamHandler(sink)
    handler.setLevel(log_level)
    if log_format == "json":
        handler.setFormatter(JsonFormatter(JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))

    logger = logging.Logger(name, level=log_level)
    logger.addHandler(handler)
    logger.propagate = False
    return logger


class ClientLogger:
    """
    Structured logger for registry client events.

    Wraps a standard logger and emits consistent ``extra`` fields for
    API calls, failovers and member state changes.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("bamboo_client")

    def log_api_call(
        self,
        method: str,
        uri: str,
        status_code: int,
        response_time: float,
        **kwargs
    ):
        """Log a completed registry API call.

        Args:
            method: HTTP method
            uri: Resource path relative to the member base URL
            status_code: Response status code
            response_time: Response time in milliseconds
            **kwargs: Additional fields to log
        """
        log_data = {
            "event": "api_call",
            "method": method,
            "uri": uri,
            "status_code": status_code,
            "response_time_ms": response_time,
        }
        log_data.update(kwargs)

        if status_code >= 500:
            self.logger.error("Registry API call", extra=log_data)
        elif status_code >= 400:
            self.logger.warning("Registry API call", extra=log_data)
        else:
            self.logger.debug("Registry API call", extra=log_data)

    def log_failover(self, member: str, attempt: int, error: str, **kwargs):
        """Log a failed attempt that is being retried on another member."""
        log_data = {
            "event": "failover",
            "member": member,
            "attempt": attempt,
            "error": error,
        }
        log_data.update(kwargs)
        self.logger.warning("Cluster member failed, failing over", extra=log_data)

    def log_member_status(self, member: str, healthy: bool, **kwargs):
        """Log a cluster member health transition."""
        log_data = {
            "event": "member_status",
            "member": member,
            "healthy": healthy,
        }
        log_data.update(kwargs)
        if healthy:
            self.logger.info("Cluster member marked healthy", extra=log_data)
        else:
            self.logger.warning("Cluster member marked unhealthy", extra=log_data)

    def info(self, message: str, **kwargs):
        """Log info message with structured data."""
        self.logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with structured data."""
        self.logger.warning(message, extra=kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with structured data."""
        self.logger.error(message, extra=kwargs)

    def debug(self, message: str, **kwargs):
        """Log debug message with structured data."""
        self.logger.debug(message, extra=kwargs)
