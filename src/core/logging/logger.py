"""
Idle Skills Logging Subsystem

Purpose
-------
Structured logging for the progression backend. Every record emitted while
a reconciliation runs carries the player and operation it belongs to, which
makes a single player's catch-up traceable across services.

Pieces
------
- ``_log_context`` ContextVar holding player_id / operation / correlation_id.
- ``PlayerContextFilter`` copies that context onto records on the producer
  side, before they cross the queue.
- ``QueueHandler`` + ``QueueListener`` keep handler I/O off the event loop;
  the queue is bounded and overflow is dropped with a stderr note.
- Console output is JSON in production and plain or colored text otherwise;
  outside tests a daily-rotated JSON file is written under ``LOGS_DIR``.

Public API
----------
- get_logger()
- LogContext (sync + async context manager)
- get_log_context() / set_log_context() / clear_log_context()
- setup_logging() / shutdown_logging()
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.core.config.config import Config

_log_context: ContextVar[Dict[str, Any]] = ContextVar("idle_skills_log_context", default={})

_INITIALIZED_FLAG = "_idle_skills_logging_initialized"

_CONTEXT_KEYS = ("player_id", "operation", "correlation_id")


@dataclass(frozen=True, slots=True)
class LoggerConfig:
    """Resolved logging settings, read lazily from ``Config``."""

    CONSOLE_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(player_id)s | %(message)s"
    DATE_FORMAT: str = "%H:%M:%S"
    FILE_NAME: str = "idle_skills.json.log"
    QUEUE_MAX_SIZE: int = 10_000

    @property
    def level(self) -> int:
        name = Config.LOG_LEVEL if isinstance(Config.LOG_LEVEL, str) else "INFO"
        return getattr(logging, name.upper(), logging.INFO)

    @property
    def json_console(self) -> bool:
        if Config.LOG_JSON is None:
            return Config.is_production()
        return bool(Config.LOG_JSON)

    @property
    def colored_console(self) -> bool:
        return not self.json_console and sys.stdout.isatty()

    @property
    def file_path(self) -> Optional[Path]:
        if Config.is_testing():
            return None
        return Path(Config.LOGS_DIR).resolve() / self.FILE_NAME


LOGGER_CONFIG = LoggerConfig()


# ============================================================================
# Filters & Formatters
# ============================================================================


class PlayerContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _log_context.get({})
        for key in _CONTEXT_KEYS:
            setattr(record, key, context.get(key) or "-")
        for key, value in context.items():
            if key not in _CONTEXT_KEYS and not hasattr(record, key):
                setattr(record, key, value)
        return True


class ColoredFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: "\033[90m",
        logging.INFO: "\033[94m",
        logging.WARNING: "\033[93m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[1;91m",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        text = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        return f"{color}{text}\033[0m" if color else text


class JSONFormatter(logging.Formatter):
    """One JSON object per record; ``extra=`` fields land under ``extra``."""

    _RESERVED = frozenset(
        vars(logging.LogRecord("x", logging.INFO, "x", 0, "x", None, None))
    ) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        for key in _CONTEXT_KEYS:
            value = getattr(record, key, "-")
            if value != "-":
                payload[key] = value

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in self._RESERVED
            and key not in _CONTEXT_KEYS
            and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class BoundedQueueHandler(QueueHandler):
    """Drops records instead of blocking when the listener falls behind."""

    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            sys.stderr.write("idle-skills: log queue full, record dropped\n")


# ============================================================================
# Setup / Shutdown
# ============================================================================

_listener: Optional[QueueListener] = None


def _handlers() -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    if LOGGER_CONFIG.json_console:
        console.setFormatter(JSONFormatter())
    else:
        formatter_cls = ColoredFormatter if LOGGER_CONFIG.colored_console else logging.Formatter
        console.setFormatter(
            formatter_cls(fmt=LOGGER_CONFIG.CONSOLE_FORMAT, datefmt=LOGGER_CONFIG.DATE_FORMAT)
        )
    handlers: List[logging.Handler] = [console]

    path = LOGGER_CONFIG.file_path
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        daily = TimedRotatingFileHandler(
            filename=str(path), when="midnight", backupCount=1, encoding="utf-8", utc=True
        )
        daily.setFormatter(JSONFormatter())
        handlers.append(daily)

    for handler in handlers:
        handler.setLevel(LOGGER_CONFIG.level)
    return handlers


def setup_logging() -> None:
    """Install the queue-backed root handler. Safe to call repeatedly."""
    global _listener

    root = logging.getLogger()
    if getattr(root, _INITIALIZED_FLAG, False):
        return

    root.setLevel(LOGGER_CONFIG.level)
    root.handlers.clear()

    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(LOGGER_CONFIG.QUEUE_MAX_SIZE)
    _listener = QueueListener(log_queue, *_handlers(), respect_handler_level=True)
    _listener.start()

    producer = BoundedQueueHandler(log_queue)
    producer.addFilter(PlayerContextFilter())
    root.addHandler(producer)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    setattr(root, _INITIALIZED_FLAG, True)
    logging.getLogger(__name__).debug(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "json_console": LOGGER_CONFIG.json_console,
            "file": str(LOGGER_CONFIG.file_path) if LOGGER_CONFIG.file_path else None,
        },
    )


def shutdown_logging() -> None:
    global _listener

    root = logging.getLogger()
    if not getattr(root, _INITIALIZED_FLAG, False):
        return

    if _listener is not None:
        _listener.stop()
        _listener = None

    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)

    setattr(root, _INITIALIZED_FLAG, False)


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Bind player/operation context to every record logged inside the block.

        async with LogContext(player_id=pid, operation="resume"):
            ...

    Nested contexts inherit unset fields from the enclosing one.
    """

    def __init__(
        self,
        player_id: Optional[str] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        outer = _log_context.get({})
        self.context: Dict[str, Any] = {**outer, **extra}
        self.context["player_id"] = player_id or outer.get("player_id")
        self.context["operation"] = operation or outer.get("operation")
        self.context["correlation_id"] = (
            correlation_id or outer.get("correlation_id") or uuid.uuid4().hex[:8]
        )
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def get_log_context() -> Dict[str, Any]:
    return dict(_log_context.get({}))


def set_log_context(**fields: Any) -> None:
    """Merge fields into the current task's context (None values are skipped)."""
    current = dict(_log_context.get({}))
    current.update({key: value for key, value in fields.items() if value is not None})
    _log_context.set(current)


def clear_log_context() -> None:
    _log_context.set({})


setup_logging()
