"""Structured logging for the panel.

Every JSON line has the same top-level shape::

    {"timestamp": ..., "level": ..., "logger": ..., "event": ..., "message": ...,
     "context": {...}}

``event`` is the machine-readable name of what happened. The session
controller tags each lifecycle step through ``extra={"event": ...}``
(``session_configured``, ``session_assigned``, ``stale_response``,
``backend_error`` and so on); records without one are tagged ``"log"``.
Remaining ``extra`` keys such as ``session_id``, ``request_seq`` or
``status_code`` are nested under ``context`` so they never shadow the fixed
fields. ``context`` is omitted when empty.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict

DEFAULT_EVENT = "log"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object with ``event`` and ``context``."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - logging interface name
        context = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "event": context.pop("event", DEFAULT_EVENT),
            "message": record.getMessage(),
        }
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)
        return json.dumps(payload, default=str)


def configure_logging(default_level: str = "INFO") -> None:
    """Configure the root logger.

    ``LOG_LEVEL`` overrides ``default_level``; ``LOG_FORMAT=text`` switches
    from JSON lines to a plain format for local use.
    """

    level_name = os.getenv("LOG_LEVEL", default_level)
    level = getattr(logging, level_name.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(level)
    if os.getenv("LOG_FORMAT", "json").lower() == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    # requests' connection pool logs every poll at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
