"""Structured Logging — JSON log lines carrying ledger fields.

Invariants:
    - Every line has timestamp, level, logger, message
    - Ledger fields passed via `extra=` (account, operation, value, ...) appear
      as top-level keys only when set
    - Amounts (value) always rendered as decimal strings
    - setup_logging is idempotent: re-running replaces its own handler

Design Decisions:
    - Stdlib logging + custom Formatter: services log with logger.info(..., extra=...)
      and never know about the output format
    - Text format kept for local runs (log_format="text")
"""

import json
import logging
from datetime import datetime, timezone

LEDGER_LOG_FIELDS = (
    "account", "operation", "value", "events_emitted",
    "event_kind", "error_code", "path",
)
_AMOUNT_FIELDS = frozenset({"value"})
_HANDLER_NAME = "tokenledger"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_ledger_fields(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _ledger_fields(record: logging.LogRecord) -> dict:
    fields = {}
    for name in LEDGER_LOG_FIELDS:
        val = getattr(record, name, None)
        if val is None:
            continue
        fields[name] = str(val) if name in _AMOUNT_FIELDS else val
    return fields


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the process log handler on the root logger."""
    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
