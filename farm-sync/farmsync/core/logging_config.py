"""
logging_config.py - JSON logging for the sync server

Every record is written to stdout as one JSON object:

    {
        "timestamp": "2026-10-19T08:12:03.120331+00:00",
        "level": "INFO",
        "logger": "farmsync.domain.sales.service",
        "message": "Recorded sale 9f0c... (3 x p1) for owner u1",
        "service_name": "farm-sync",
        "owner_id": "u1"
    }

`owner_id` is included when the call site passes it through `extra=`.
Exceptions logged with `logger.exception` carry the formatted traceback in
`exception`; it never reaches an HTTP response.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict


class JsonFormatter(logging.Formatter):
    """Formatter that outputs one JSON document per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "service_name"):
            log_data["service_name"] = record.service_name
        if hasattr(record, "owner_id"):
            log_data["owner_id"] = record.owner_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class ServiceFilter(logging.Filter):
    """Stamps the service name on every record the handler emits."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name
        return True


def setup_logging(service_name: str, level: str = "INFO") -> None:
    """Install the JSON handler on the root logger.

    Calling it again replaces the handler installed by a previous call
    instead of stacking a second one.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        if isinstance(handler.formatter, JsonFormatter):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    handler.addFilter(ServiceFilter(service_name))

    root.addHandler(handler)
