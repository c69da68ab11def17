from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from legaldesk.context import get_correlation_id
from legaldesk.core.config import Settings, get_settings


# Extras a record may carry into the JSON line; anything else stays out of the log stream.
LOGGED_FIELDS = frozenset(
    {
        "method",
        "path",
        "status_code",
        "duration_ms",
        "operation",
        "entity_type",
        "entity_id",
        "actor_id",
        "reference",
        "kind",
        "step",
        "identity_id",
        "manual_cleanup_required",
        "error_code",
        "environment",
        "error",
    }
)
MAX_ERROR_LENGTH = 500

_base_factory = logging.getLogRecordFactory()


def _stamp_correlation_id(*args: Any, **kwargs: Any) -> logging.LogRecord:
    record = _base_factory(*args, **kwargs)
    if not getattr(record, "correlation_id", None):
        record.correlation_id = get_correlation_id()
    return record


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line: envelope keys plus whitelisted ``fields``."""

    def __init__(self, service: str = "legaldesk-api") -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        fields = {key: value for key, value in record.__dict__.items() if key in LOGGED_FIELDS}
        if isinstance(fields.get("error"), str):
            fields["error"] = fields["error"][:MAX_ERROR_LENGTH]
        if record.exc_info:
            fields["exception"] = self.formatException(record.exc_info)

        return json.dumps(
            {
                "ts": datetime.now(timezone.utc).isoformat(),
                "level": record.levelname,
                "service": self.service,
                "logger": record.name,
                "msg": record.getMessage(),
                "correlation_id": getattr(record, "correlation_id", None),
                "fields": fields,
            },
            default=str,
        )


def configure_logging(settings: Settings | None = None) -> None:
    root = logging.getLogger()
    if getattr(root, "_legaldesk_configured", False):
        return

    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonLogFormatter(service=settings.app_name))

    root.handlers.clear()
    root.setLevel(level)
    root.addHandler(handler)
    logging.setLogRecordFactory(_stamp_correlation_id)
    # http.request lines from RequestLoggingMiddleware replace uvicorn's access log.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    root._legaldesk_configured = True  # type: ignore[attr-defined]
