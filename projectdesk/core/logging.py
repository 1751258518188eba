"""Logging setup shared by the API process and the management scripts.

Every record gets a ``request_id`` attribute, filled from the request
currently being served (or ``-`` outside of a request), so both the text and
the JSON output can be correlated with the ``X-Request-ID`` response header.
"""
import logging
from contextvars import ContextVar
from logging.config import dictConfig
from typing import Literal, Optional

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]
LogFormat = Literal["text", "json"]

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

NOISY_LOGGERS = ("sqlalchemy.engine", "passlib", "multipart")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


def configure_logging(level: str = "INFO", log_format: str = "text") -> None:
    if log_format == "json":
        formatter = {
            "class": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(levelname)s %(name)s %(request_id)s %(message)s",
        }
    else:
        formatter = {"format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s"}

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"request_id": {"()": RequestIdFilter}},
            "formatters": {"app": formatter},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "app",
                    "filters": ["request_id"],
                }
            },
            "root": {"handlers": ["console"], "level": level.upper()},
        }
    )

    # uvicorn installs its own handlers; route its records through ours instead.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
