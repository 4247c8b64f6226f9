"""
Logging setup for the generation pipeline.

Plain text in development, JSON lines when ``settings.log_json`` is set.
Every record carries the id of the generation run it belongs to.
"""

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

from ai_agent.config import settings


run_id_var: ContextVar[str] = ContextVar("run_id", default="")

_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName", "levelname", "levelno",
    "lineno", "module", "msecs", "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName", "message", "taskName",
    "run_id",
}


def get_run_id() -> str:
    return run_id_var.get() or ""


def set_run_id(run_id: str | None = None) -> str:
    """Bind a run id to the current context and return it."""
    run_id = run_id or uuid.uuid4().hex[:8]
    run_id_var.set(run_id)
    return run_id


class RunIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = get_run_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        run_id = getattr(record, "run_id", "-")
        if run_id and run_id != "-":
            log_data["run_id"] = run_id

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info) if record.exc_info[0] else None,
            }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> logging.Logger:
    """Configure the package logger. Safe to call more than once."""
    level = (level or settings.log_level).upper()
    json_logs = settings.log_json if json_logs is None else json_logs

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RunIdFilter())
    if json_logs:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(run_id)s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
        ))

    pkg_logger = logging.getLogger("ai_agent")
    pkg_logger.handlers.clear()
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(level)
    pkg_logger.propagate = False
    return pkg_logger


logger = logging.getLogger("ai_agent")
