"""Structured logging configuration.

Validation code attaches outcome counts to its log records as
``extra={"extra_fields": {...}}`` (for example the batch validator's
validated/valid/rejected totals and per-kind failure counts). The formatters
here render those fields: as top-level JSON keys for log shippers, or as
``key=value`` pairs on human-readable lines.

Security Impact:
    - Library code logs identifier types and counts, never identifier values
    - Extra fields can never replace the core keys of a JSON log line
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

EXTRA_FIELDS_ATTR = "extra_fields"

PLAIN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
PLAIN_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = getattr(record, EXTRA_FIELDS_ATTR, None)
    return fields if isinstance(fields, dict) else {}


class StructuredFormatter(logging.Formatter):
    """One JSON object per log line."""

    def __init__(self, app_name: str = "pidval"):
        super().__init__()
        self.app_name = app_name

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Parameters:
            record: Log record to format

        Returns:
            JSON string with timestamp, level, logger, app and message, plus
            the record's extra fields and any exception
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "app": self.app_name,
            "message": record.getMessage(),
        }

        for key, value in _extra_fields(record).items():
            log_data.setdefault(key, value)

        if record.exc_info:
            log_data["exception_type"] = record.exc_info[0].__name__
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class PlainFormatter(logging.Formatter):
    """Human-readable lines with extra fields appended as ``key=value``."""

    def __init__(self):
        super().__init__(PLAIN_FORMAT, datefmt=PLAIN_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _extra_fields(record)
        if not fields:
            return line
        return line + " | " + " ".join(f"{key}={value}" for key, value in fields.items())


def setup_logging(use_json: bool = False, log_level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """Setup application logging.

    Parameters:
        use_json: Use JSON formatting (for log shippers)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Destination stream (stderr by default, keeping stdout for CLI output)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter() if use_json else PlainFormatter())
    root_logger.addHandler(handler)
