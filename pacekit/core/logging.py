"""Structured output for pacekit's log events.

Library modules log dotted event names (``rate_control.invoke``,
``memoize.miss``, ``cache.evict``...) through ``logging.getLogger(__name__)``
and put their fields in ``extra``. Nothing here runs on import; an
application opts in with :func:`configure_logging`.

Invocation events carry the wrapped function's arguments and results
(``call_args``, ``call_kwargs``, ``result``). Those are user data, so the
handler installed by :func:`configure_logging` replaces them with a marker
unless ``PACEKIT_LOG_REDACT_PAYLOADS`` is turned off.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable

from pacekit.core.config import LogSettings, settings

PAYLOAD_FIELDS: frozenset[str] = frozenset({"call_args", "call_kwargs", "result"})

REDACTED = "[REDACTED]"

DEFAULT_LOG_FILE = "logs/pacekit.log"

# Attributes present on every LogRecord; anything else was passed via ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def record_fields(record: LogRecord) -> dict[str, Any]:
    """Return the ``extra`` fields attached to a record."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }


class SensitiveDataFilter(logging.Filter):
    """Replace payload fields on the record with ``[REDACTED]``.

    Args:
        fields: Field names to hide (case-insensitive). Defaults to the
            arguments and results of wrapped functions.
    """

    def __init__(self, fields: Iterable[str] = PAYLOAD_FIELDS) -> None:
        super().__init__()
        self.fields = frozenset(name.lower() for name in fields)

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        for key in record_fields(record):
            if key.lower() in self.fields:
                setattr(record, key, REDACTED)
        return True


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object: envelope first, then extra fields."""

    def __init__(self, *, ensure_ascii: bool = True) -> None:
        super().__init__()
        self.ensure_ascii = ensure_ascii

    def format(self, record: LogRecord) -> str:  # noqa: D401
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        document: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            **record_fields(record),
        }
        if record.exc_info:
            document["exc_info"] = self.formatException(record.exc_info)

        # Arguments of wrapped functions may be arbitrary objects.
        return json.dumps(document, default=repr, ensure_ascii=self.ensure_ascii)


def _build_handler(cfg: LogSettings) -> logging.Handler:
    if cfg.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    path = Path(cfg.file_path or DEFAULT_LOG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)
    if cfg.max_bytes:
        return RotatingFileHandler(
            path,
            maxBytes=cfg.max_bytes,
            backupCount=cfg.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(path, encoding="utf-8")


def _build_formatter(cfg: LogSettings) -> logging.Formatter:
    if cfg.format.lower() == "plain":
        return logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    return JsonFormatter()


def configure_logging(
    log_settings: LogSettings | None = None,
    *,
    logger_name: str | None = "pacekit",
) -> logging.Handler:
    """Attach a pacekit handler to ``logger_name`` (the root logger when None).

    Handlers previously installed on that logger are replaced. A named logger
    stops propagating so its records are not written twice.

    Args:
        log_settings: Output configuration; defaults to ``settings.log``.
        logger_name: Logger to configure.

    Returns:
        The installed handler.
    """

    cfg = log_settings or settings.log

    handler = _build_handler(cfg)
    if cfg.redact_payloads:
        handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(_build_formatter(cfg))

    target = logging.getLogger(logger_name)
    target.handlers.clear()
    target.addHandler(handler)
    target.setLevel(getattr(logging, cfg.level.upper(), logging.INFO))
    if logger_name:
        target.propagate = False

    return handler
