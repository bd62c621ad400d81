"""Structured logging for the Spades server.

structlog events are rendered by stdlib ``logging`` handlers, so third-party
loggers (uvicorn, sqlite warnings) and our own events share one output.

Environment variables:
- LOG_FORMAT: "json" for one JSON object per line, "console" or unset for
  human-readable output.
- LOG_LEVEL: DEBUG, INFO (default), WARNING, ERROR or CRITICAL.

Each HTTP request binds ``method`` and ``path`` into structlog contextvars,
and handlers add ``game_id``, ``player_id`` and ``action`` once known.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from typing import Any

LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

_LOG_FORMATS = ("", "console", "json")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_QUIET_LOGGERS = ("httpx", "httpcore")


class LogOptions(NamedTuple):
    json: bool
    level: int


def _enum_values(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Log StrEnum fields (status, kind, validation) as plain strings, one level deep."""

    def plain(value: object) -> object:
        return value.value if isinstance(value, Enum) else value

    for key, value in event_dict.items():
        if isinstance(value, dict):
            event_dict[key] = {k: plain(v) for k, v in value.items()}
        else:
            event_dict[key] = plain(value)
    return event_dict


def configure_structlog() -> None:
    """Route structlog through stdlib logging with request context merged in."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _enum_values,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            # exceptions are rendered by the handler formatter, not here
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def read_log_options() -> LogOptions:
    """Validate LOG_FORMAT and LOG_LEVEL, failing fast on typos."""
    log_format = os.environ.get("LOG_FORMAT", "").lower()
    if log_format not in _LOG_FORMATS:
        msg = f"Invalid LOG_FORMAT={log_format!r}. Must be 'json', 'console', or unset."
        raise ValueError(msg)

    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    if level_name not in _LOG_LEVELS:
        msg = f"Invalid LOG_LEVEL={level_name!r}. Must be one of {', '.join(_LOG_LEVELS)}."
        raise ValueError(msg)

    return LogOptions(json=log_format == "json", level=logging.getLevelNamesMapping()[level_name])


def _handler(handler: logging.Handler, *, json_mode: bool, colors: bool) -> logging.Handler:
    renderer = structlog.processors.JSONRenderer() if json_mode else structlog.dev.ConsoleRenderer(colors=colors)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        ),
    )
    return handler


def _is_test() -> bool:
    return "pytest" in sys.modules


def setup_logging(
    log_dir: Path | str | None = None,
    level: int | None = None,
) -> Path | None:
    """Configure logging to stdout and, outside tests, a timestamped file in ``log_dir``.

    ``level`` overrides LOG_LEVEL. Returns the log file path when one was opened.
    """
    options = read_log_options()
    configure_structlog()

    root = logging.getLogger()
    root.setLevel(options.level if level is None else level)
    for existing in root.handlers[:]:
        existing.close()
        root.removeHandler(existing)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.addHandler(_handler(logging.StreamHandler(sys.stdout), json_mode=options.json, colors=sys.stdout.isatty()))

    if log_dir is None or _is_test():
        return None

    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    file_path = directory / f"{datetime.now(tz=UTC).strftime(LOG_FILE_TIMESTAMP_FORMAT)}.log"
    root.addHandler(_handler(logging.FileHandler(file_path), json_mode=options.json, colors=False))
    return file_path


def bind_request_context(**values: object) -> None:
    """Attach ids (game_id, player_id, action) to every event logged for this request.

    None values are skipped so handlers can pass optional ids unconditionally.
    """
    structlog.contextvars.bind_contextvars(**{k: v for k, v in values.items() if v is not None})


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
