"""Process-wide logging setup.

Two modes:

* plain: ``logging.basicConfig`` with a human-readable line format;
* structured: one JSON object per record on stderr, for log shippers::

      {
          "timestamp": "2025-05-15T12:34:56.789012+00:00",
          "level": "DEBUG",
          "logger": "analyzer_engine.rules.runner",
          "message": "Analyzed 3 queries with 17 rules: ...",
          "exc_info": "Traceback ..."  // present only on exceptions
      }

Library modules only ever call ``logging.getLogger(__name__)``; the CLI
calls :func:`configure_logging` once at start-up.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import UTC, datetime
from typing import Any

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc_info"] = "".join(traceback.format_exception(*record.exc_info))

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(level: str | int = logging.WARNING, structured: bool = False) -> None:
    """Install the root handler.

    Parameters
    ----------
    level:
        Level name (``"DEBUG"``) or number.
    structured:
        Emit JSON lines via :class:`JSONFormatter` instead of plain text.
    """
    if isinstance(level, str):
        level = level.upper()

    if not structured:
        logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)
        return

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
