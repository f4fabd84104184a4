from __future__ import annotations

"""Application-wide logging configuration.

Provides a JSON formatter with a minimal, consistent set of fields:
- timestamp (UTC ISO8601), level, logger, service, environment, message
- Supports structured extras via `logger.info(msg, extra={...})` which are
  merged into the JSON.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from noteshare.core.settings import Settings, get_settings

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """One-line JSON log formatter with stable keys and UTC timestamps."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        super().__init__()
        self.settings = settings

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        settings = self.settings or get_settings()
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        base: Dict[str, Any] = {
            "timestamp": dt.strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "level": record.levelname,
            "logger": record.name,
            "service": settings.service_name,
            "environment": settings.environment,
            "message": record.getMessage(),
        }
        for k, v in record.__dict__.items():
            # Don't overwrite base keys with extras
            if k not in _RESERVED and k not in base:
                base[k] = v
        if record.exc_info:
            exc = record.exc_info[1]
            base["error"] = {
                "class": getattr(record.exc_info[0], "__name__", str(record.exc_info[0])),
                "message": str(exc)[:500],
            }
            to_dict = getattr(exc, "to_dict", None)
            if callable(to_dict):
                base["error"].update(to_dict())
        return json.dumps(base, ensure_ascii=False, default=repr)


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logger to output one-line JSON logs."""

    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter(settings))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


__all__ = ["JsonFormatter", "setup_logging"]
