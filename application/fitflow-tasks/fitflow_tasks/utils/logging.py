"""
Logging configuration and utilities for FitFlow Tasks.

Standard library loggers (``fitflow``, ``fitflow_tasks``, Celery) are wired
through dictConfig; import-job events go through structlog with the job
identity bound once per message.
"""

import json
import logging
import logging.config
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog
from structlog.typing import FilteringBoundLogger

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Context fields lifted from ``extra=`` into JSON output
IMPORT_CONTEXT_FIELDS = ("job_id", "actor_id", "archive_id", "activity_id", "task_id")

# Our own packages follow the configured level; Celery stays quieter
PACKAGE_LOG_LEVELS = {
    "fitflow_tasks": None,
    "fitflow": None,
    "celery": "WARNING",
    "celery.app.trace": "INFO",
}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with import context fields lifted to the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in IMPORT_CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def formatMessage(self, record: logging.LogRecord) -> str:
        # Color a copy of the attributes; the record is shared with other handlers
        values = dict(record.__dict__)
        color = self.LEVEL_COLORS.get(record.levelname)
        if color:
            values["levelname"] = f"{color}{record.levelname}{self.RESET}"
        return self._style._fmt % values


def build_logging_config(level: str = "INFO", format_type: str = "console",
                         log_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the dictConfig mapping used by the worker.

    Args:
        level: Level for the fitflow packages
        format_type: 'console' or 'json'
        log_file: Also write plain lines to this rotating file

    Returns:
        Mapping accepted by logging.config.dictConfig
    """
    if format_type not in ("console", "json"):
        format_type = "console"
    level = level.upper()
    handlers = ["console"]

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"()": ColoredFormatter, "fmt": LOG_FORMAT, "datefmt": DATE_FORMAT},
            "json": {"()": JSONFormatter},
            "plain": {"format": LOG_FORMAT, "datefmt": DATE_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": format_type,
                "stream": sys.stdout,
            },
        },
    }

    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "plain",
            "filename": log_file,
            "maxBytes": 10_000_000,
            "backupCount": 5,
        }
        handlers.append("file")

    config["loggers"] = {
        name: {"level": package_level or level, "handlers": list(handlers), "propagate": False}
        for name, package_level in PACKAGE_LOG_LEVELS.items()
    }
    config["root"] = {"level": "WARNING", "handlers": list(handlers)}
    return config


def setup_logging(
    level: str = "INFO",
    format_type: str = "console",
    enable_structlog: bool = True,
    log_file: Optional[str] = None,
) -> None:
    """
    Setup logging configuration for FitFlow Tasks.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Output format ('console', 'json')
        enable_structlog: Also configure structlog for import-job events
        log_file: Optional log file path
    """
    logging.config.dictConfig(build_logging_config(level, format_type, log_file))

    if enable_structlog:
        setup_structlog(level, json_output=format_type == "json")


def setup_structlog(level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog to render bound import-job events."""
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_task_logger(task_name: str, task_id: Optional[str] = None, **context) -> FilteringBoundLogger:
    """Structured logger for a Celery task invocation."""
    logger = structlog.get_logger(task_name)
    if task_id:
        context["task_id"] = task_id
    return logger.bind(**context) if context else logger


def get_import_logger(name: str, actor_id: str, archive_id: str, job_id: str) -> FilteringBoundLogger:
    """Structured logger bound to one archive import job"""
    return structlog.get_logger(name).bind(actor_id=actor_id, archive_id=archive_id, job_id=job_id)
