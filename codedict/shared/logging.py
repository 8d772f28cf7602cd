import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

EVENTS_LEVEL_NUM = 38
DEFAULT_LOG_BACKUP_COUNT = 10

_HANDLER_MARKER = "_codedict_handler"

_events = logging.getLogger("event")
_events.addHandler(logging.NullHandler())
_events.propagate = False


class JsonLineFormatter(logging.Formatter):
    """One JSON object per line; dict messages are merged into the object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        if isinstance(record.msg, dict):
            payload.update(record.msg)
        else:
            payload["message"] = record.getMessage()
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _plain_formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def configure_logging(level: str = "INFO", json_logs: bool = False, stream=None) -> logging.Logger:
    """Install a single stream handler on the ``codedict`` logger.

    Calling it again replaces the handler installed by the previous call.
    """
    logger = logging.getLogger("codedict")
    logger.setLevel(level.upper())
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JsonLineFormatter() if json_logs else _plain_formatter())
    setattr(handler, _HANDLER_MARKER, True)
    logger.addHandler(handler)
    return logger


def setup_events_logger(full_path: Optional[str], events_retention_size: int) -> logging.Logger:
    logging.addLevelName(EVENTS_LEVEL_NUM, "EVENT")

    logger = logging.getLogger("event")
    logger.setLevel(EVENTS_LEVEL_NUM)

    if not full_path:
        return logger

    os.makedirs(full_path, exist_ok=True)
    log_file = os.path.abspath(os.path.join(full_path, "events.log"))
    for existing in logger.handlers:
        if isinstance(existing, RotatingFileHandler) and existing.baseFilename == log_file:
            return logger

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=events_retention_size,
        backupCount=DEFAULT_LOG_BACKUP_COUNT,
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(EVENTS_LEVEL_NUM)
    logger.addHandler(file_handler)

    return logger


def emit_event(message: Any) -> None:
    """Record a registry event on the ``event`` logger and in the run log."""
    logging.getLogger("event").log(EVENTS_LEVEL_NUM, message)
    logging.getLogger("codedict.events").info(message)
