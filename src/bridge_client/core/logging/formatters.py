"""
Log formatters: JSON lines for log shippers, key=value text for terminals.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Union

from .config import LogFormat

# Attributes every LogRecord carries; anything else came in via ``extra``
_RESERVED = frozenset(vars(logging.makeLogRecord({})).keys()) | {'message', 'asctime'}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED and not key.startswith('_')
    }


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Example output:
        {"timestamp": "2026-01-15T10:30:45.123000+00:00", "level": "INFO",
         "logger": "bridge_client", "message": "Request completed",
         "correlation_id": "5f0c...", "path": "/status", "latency_ms": 42}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_extra_fields(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """
    Example output:
        2026-01-15 10:30:45 INFO    bridge_client: Request completed path=/status latency_ms=42
    """

    def __init__(self):
        super().__init__(fmt='%(asctime)s %(levelname)-7s %(name)s: %(message)s',
                         datefmt='%Y-%m-%d %H:%M:%S')

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        fields = _extra_fields(record)
        if not fields:
            return line
        return line + " " + " ".join(f"{key}={value}" for key, value in fields.items())


_FORMATTERS = {
    LogFormat.JSON: JSONFormatter,
    LogFormat.TEXT: TextFormatter,
}


def get_formatter(format_type: Union[LogFormat, str]) -> logging.Formatter:
    """
    Formatter for a LogFormat (or its string value).

    Raises:
        ValueError: unknown format
    """
    try:
        fmt = LogFormat(format_type.lower() if isinstance(format_type, str) else format_type)
    except ValueError:
        raise ValueError(
            f"Unknown format type: {format_type}. "
            f"Available: {', '.join(f.value for f in LogFormat)}"
        ) from None
    return _FORMATTERS[fmt]()
