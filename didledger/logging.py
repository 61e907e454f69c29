import logging
import logging.config
from typing import Optional
from uuid import uuid4

from fastapi import Request

from didledger.config import settings

"""
Configures and provides logging for the application.

This module sets up structured JSON logging by default (or text logging if configured),
integrates with Uvicorn loggers, and provides a middleware helper for adding a unique
request ID to each log entry associated with a request.
"""


class RequestIdFilter(logging.Filter):
    """Defaults `request_id` on records logged outside of a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = "-"
        return True


def configure_logging():
    """Configures application-wide logging.

    Sets up logging format (JSON or text), level, and handlers based on `settings`.
    Handlers are attached to the root logger, the Uvicorn loggers (uvicorn, uvicorn.error,
    uvicorn.access) and the application logger named after `settings.app_name`.
    """
    log_format = settings.log_format.lower()
    if log_format not in ["json", "text"]:
        print(f"WARNING: Invalid log_format '{settings.log_format}' in settings. Falling back to 'text'.")
        log_format = "text"

    level = settings.log_level.upper()
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": RequestIdFilter},
        },
        "formatters": {
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s",
                "rename_fields": {"levelname": "level", "asctime": "timestamp"},
            },
            "text": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": log_format,
                "filters": ["request_id"],
                "level": level,
                "stream": "ext://sys.stdout"
            }
        },
        "loggers": {
            "uvicorn": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
            "uvicorn.error": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
            "uvicorn.access": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
            settings.app_name: {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        }
    }
    logging.config.dictConfig(logging_config)

def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a configured logger instance.

    If `name` is not provided, it defaults to the application name defined in settings,
    or 'didledger' as a fallback if app_name is empty.

    Args:
        name: The name for the logger. Defaults to `settings.app_name` or 'didledger'.

    Returns:
        A configured `logging.Logger` instance.
    """
    default_logger_name = settings.app_name if settings.app_name else "didledger"
    logger_name = name or default_logger_name
    return logging.getLogger(logger_name)

def request_id_middleware(request: Request) -> str:
    """Generates a unique request ID and logs the incoming request with it.

    Args:
        request: The incoming FastAPI `Request` object.

    Returns:
        str: The generated unique request ID (UUID4 string).
    """
    request_id = str(uuid4())
    logger = get_logger()

    logger.info(
        f"Incoming request: {request.method} {request.url.path}",
        extra={
            "request_id": request_id,
            "path": str(request.url.path),
            "method": request.method,
            "client_host": request.client.host if request.client else "unknown",
        }
    )
    return request_id

configure_logging()
