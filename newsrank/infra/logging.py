"""Logging setup for the crawler.

Console-only logging configured through ``logging.config.dictConfig``:

- Hierarchical loggers named ``newsrank.<program>.<task>``
- Pattern layout or JSON layout
- A ``TRACE`` level below DEBUG
- MDC (Mapped Diagnostic Context) via ``contextvars``; the crawler puts the
  current source and partition there so every line of a worker thread carries them

Environment variables:
- ``NR_LOG_LEVEL``: TRACE, DEBUG, INFO, WARN, ERROR, FATAL (default: INFO)
- ``NR_LOG_JSON``: 1 to enable the JSON layout (default: 0)
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.config
import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

TRACE_LEVEL = 5
if logging.getLevelName(TRACE_LEVEL) != "TRACE":
    logging.addLevelName(TRACE_LEVEL, "TRACE")


def _trace(self: logging.Logger, msg: str, *args: Any, **kwargs: Any) -> None:
    if self.isEnabledFor(TRACE_LEVEL):
        self._log(TRACE_LEVEL, msg, args, **kwargs)


if not hasattr(logging.Logger, "trace"):
    logging.Logger.trace = _trace  # type: ignore[attr-defined]


# ---------------- MDC ----------------

_MDC: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("MDC", default={})


def mdc_get(key: str, default: Any = None) -> Any:
    return _MDC.get().get(key, default)


@contextmanager
def mdc_scope(**values: Any) -> Iterator[None]:
    """Temporarily add keys to the MDC of the current thread/context."""
    token = _MDC.set({**_MDC.get(), **values})
    try:
        yield
    finally:
        _MDC.reset(token)


class MDCFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        d = _MDC.get()
        record.mdc = d
        if d:
            mdc_str = " ".join(f"{k}={v}" for k, v in d.items())
            record.mdc_str = mdc_str
            record.mdc_suffix = f" | {mdc_str}"
        else:
            record.mdc_str = ""
            record.mdc_suffix = ""
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        mdc = getattr(record, "mdc", None)
        if isinstance(mdc, dict) and mdc:
            payload["mdc"] = mdc
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


# ---------------- Configuration ----------------

_CONFIGURED = False
_CACHE: Dict[str, logging.Logger] = {}


def _env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def _level_from_env(name: str, default: str = "INFO") -> int:
    s = str(os.getenv(name, default)).strip().upper()
    aliases = {"WARN": "WARNING", "FATAL": "CRITICAL"}
    s = aliases.get(s, s)
    if s == "TRACE":
        return TRACE_LEVEL
    level = logging.getLevelName(s)
    return level if isinstance(level, int) else logging.INFO


def build_logging_config(level: Optional[int] = None) -> Dict[str, Any]:
    json_layout = _env_bool("NR_LOG_JSON", False)
    if level is None:
        level = _level_from_env("NR_LOG_LEVEL", "INFO")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"mdc": {"()": MDCFilter}},
        "formatters": {
            "pattern": {
                "format": "[%(asctime)s][%(levelname)s][%(threadName)s][%(name)s] %(message)s%(mdc_suffix)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {"()": JSONFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "json" if json_layout else "pattern",
                "filters": ["mdc"],
                "stream": "ext://sys.stderr",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        # urllib3 connection pool chatter is noise at DEBUG
        "loggers": {"urllib3": {"level": max(level, logging.INFO)}},
    }


def init_logging(force: bool = False, level: Optional[int] = None) -> None:
    """Configure root logging. No-op when already configured unless ``force``."""
    global _CONFIGURED
    if _CONFIGURED and not force:
        return
    logging.config.dictConfig(build_logging_config(level))
    _CONFIGURED = True


def get_unified_logger(program: str, task_type: str) -> logging.Logger:
    name = f"newsrank.{program}.{task_type}".strip(".")
    logger = _CACHE.get(name)
    if logger is None:
        logger = logging.getLogger(name)
        _CACHE[name] = logger
    return logger


def unified_print(message: str, program: str, task_type: str, level: str = "info") -> None:
    """Echo to stdout for CLI users and write the same line to the logger."""
    logger = get_unified_logger(program, task_type)
    print(f"[{program}][{task_type}] {message}")
    lvl = str(level or "info").strip().lower()
    if lvl == "trace":
        logger.trace(message)  # type: ignore[attr-defined]
    elif lvl in {"fatal", "critical"}:
        logger.critical(message)
    else:
        getattr(logger, lvl, logger.info)(message)


def log_task_start(logger: logging.Logger, task: str, details: Optional[Dict[str, Any]] = None) -> None:
    logger.info("[TASK START] %s %s", task, json.dumps(details or {}, ensure_ascii=False, default=str))


def log_task_end(
    logger: logging.Logger, task: str, success: bool, details: Optional[Dict[str, Any]] = None
) -> None:
    payload: Dict[str, Any] = {"success": success}
    if details:
        payload.update(details)
    logger.info("[TASK END] %s %s", task, json.dumps(payload, ensure_ascii=False, default=str))


def log_error(logger: logging.Logger, error: BaseException, context: str = "") -> None:
    if context:
        logger.error("%s | %s", context, error, exc_info=error)
    else:
        logger.error("%s", error, exc_info=error)


def log_performance(
    logger: logging.Logger, metric: str, value: Any, details: Optional[Dict[str, Any]] = None
) -> None:
    payload: Dict[str, Any] = {"metric": metric, "value": value}
    if details:
        payload.update(details)
    logger.debug("[PERF] %s", json.dumps(payload, ensure_ascii=False, default=str))


__all__ = [
    "TRACE_LEVEL",
    "init_logging",
    "build_logging_config",
    "mdc_get",
    "mdc_scope",
    "get_unified_logger",
    "unified_print",
    "log_task_start",
    "log_task_end",
    "log_error",
    "log_performance",
]
