# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Semid Contributors

"""Log setup for semid.

Every operation runs inside a :func:`request_scope`, which tags all records
emitted during it with a request id. Records go to stderr either as one JSON
object per line or as plain text, and optionally to a JSON log file.

Operation parameters are passed through :func:`redact` before they are
logged, so salts and host secrets never reach a handler.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

REDACTED = "[REDACTED]"
MAX_LOGGED_STRING = 200

# Substrings of parameter names whose values are never logged
REDACTED_MARKERS = ("salt", "secret", "seed", "entropy", "private", "key", "token")

_request_id: ContextVar[str | None] = ContextVar("semid_request_id", default=None)


def current_request_id() -> str | None:
    return _request_id.get()


@contextmanager
def request_scope(request_id: str | None = None) -> Iterator[str]:
    """Bind a request id (a fresh UUID when not given) for the enclosed block."""
    rid = request_id or str(uuid.uuid4())
    token = _request_id.set(rid)
    try:
        yield rid
    finally:
        _request_id.reset(token)


def redact(value: Any) -> Any:
    """Copy ``value`` with sensitive keys masked and long strings cut."""
    if isinstance(value, dict):
        return {
            k: REDACTED if _is_sensitive(k) else redact(v) for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(v) for v in value]
    if isinstance(value, str) and len(value) > MAX_LOGGED_STRING:
        return value[:MAX_LOGGED_STRING] + "..."
    return value


def _is_sensitive(key: Any) -> bool:
    lowered = str(key).lower()
    return any(marker in lowered for marker in REDACTED_MARKERS)


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Warnings and above carry their source location. Structured fields passed
    as ``extra={"context": {...}}`` land under ``"context"``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        rid = current_request_id()
        if rid:
            entry["request_id"] = rid
        if record.levelno >= logging.WARNING:
            entry["at"] = f"{record.pathname}:{record.lineno} in {record.funcName}"
        context = getattr(record, "context", None)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class StandardFormatter(logging.Formatter):
    """Plain text for terminals: ``time level logger [request] message``."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s %(name)s %(request_tag)s%(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        rid = current_request_id()
        record.request_tag = f"[{rid[:8]}] " if rid else ""
        return super().format(record)


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Replace the root logger's handlers according to the arguments.

    Arguments left as ``None`` come from ``SEMID_LOG_LEVEL``,
    ``SEMID_LOG_FORMAT`` and ``SEMID_LOG_FILE``.
    """
    from .config import get_config

    config = get_config()
    if level is None:
        level = config.log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    if json_format is None:
        json_format = _wants_json(config.log_format)
    if log_file is None:
        log_file = config.log_file

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(JSONFormatter() if json_format else StandardFormatter())
    handlers: list[logging.Handler] = [console]
    if log_file:
        to_file = logging.FileHandler(log_file)
        to_file.setFormatter(JSONFormatter())
        handlers.append(to_file)

    root = logging.getLogger()
    root.setLevel(level)
    for old in list(root.handlers):
        root.removeHandler(old)
    for handler in handlers:
        root.addHandler(handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)


def _wants_json(log_format: str) -> bool:
    choice = log_format.lower()
    if choice in ("json", "text"):
        return choice == "json"
    # "auto": JSON unless a person is watching stderr
    return not sys.stderr.isatty()


class OperationLog:
    """Records the start and outcome of each dispatched operation."""

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("semid.operations")

    def started(self, method: str, params: Any) -> None:
        self.logger.debug(
            "-> %s",
            method,
            extra={"context": {"method": method, "params": redact(params)}},
        )

    def finished(self, method: str, ok: bool, duration_ms: float) -> None:
        self.logger.debug(
            "<- %s %s in %.1fms",
            method,
            "ok" if ok else "failed",
            duration_ms,
            extra={"context": {"method": method, "ok": ok, "duration_ms": duration_ms}},
        )


operation_log = OperationLog()
