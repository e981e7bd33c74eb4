from __future__ import annotations

import json
import logging
import os
from logging.config import dictConfig
from traceback import format_exception
from typing import Any

from doc_relay.app.core.env import IS_PROD

DATEFMT = "%Y-%m-%dT%H:%M:%S"
PLAIN_FORMAT = "%(asctime)s %(levelname)-5s [pid:%(process)d] %(name)s: %(message)s"

# LogRecord attribute (set through ``extra=``) -> key in the JSON block
ARTIFACT_FIELDS = {
    "operation": "operation",
    "artifact_id": "artifact_id",
    "public_id": "public_id",
    "storage_locator": "storage_locator",
}
HTTP_FIELDS = {
    "http_method": "method",
    "path": "path",
    "status_code": "status",
    "client_ip": "client_ip",
}

# Third-party loggers routed through the root handler at a fixed level
QUIET_LOGGERS = {
    "uvicorn": "INFO",
    "uvicorn.error": "INFO",
    "uvicorn.access": "INFO",
    # the provider SDK logs every connection through urllib3
    "urllib3": "WARNING",
    "pymongo": "WARNING",
}


def _collect(record: logging.LogRecord, fields: dict[str, str]) -> dict[str, Any]:
    out = {}
    for attr, key in fields.items():
        value = getattr(record, attr, None)
        if value is not None:
            out[key] = value
    return out


def _error_block(exc_info) -> dict[str, Any]:
    exc_type, exc, _ = exc_info
    block: dict[str, Any] = {}
    if exc_type is not None:
        block["type"] = exc_type.__name__
    if exc is not None and str(exc):
        block["message"] = str(exc)
    stack = "".join(format_exception(*exc_info))
    limit = int(os.getenv("LOG_STACK_LIMIT", "4000"))
    block["stack"] = stack if len(stack) <= limit else stack[:limit] + "...(truncated)"
    return block


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for prod and CI log collectors."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "pid": record.process,
            "message": record.getMessage(),
        }
        if getattr(record, "request_id", None) is not None:
            payload["request_id"] = record.request_id  # type: ignore[attr-defined]
        for block, fields in (("artifact", ARTIFACT_FIELDS), ("http", HTTP_FIELDS)):
            ctx = _collect(record, fields)
            if ctx:
                payload[block] = ctx
        if record.exc_info:
            payload["error"] = _error_block(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _default_level() -> str:
    return (os.getenv("LOG_LEVEL") or ("INFO" if IS_PROD else "DEBUG")).upper()


def _default_format() -> str:
    return (os.getenv("LOG_FORMAT") or ("json" if IS_PROD else "plain")).lower()


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Route all logging through one stream handler on the root logger.

    Defaults: DEBUG + plain text outside prod, INFO + JSON in prod;
    ``LOG_LEVEL`` / ``LOG_FORMAT`` override, explicit arguments override both.
    """
    level = (level or _default_level()).upper()
    formatter = "json" if (fmt or _default_format()).lower() == "json" else "plain"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {"format": PLAIN_FORMAT, "datefmt": DATEFMT},
                "json": {"()": JsonFormatter, "datefmt": DATEFMT},
            },
            "handlers": {
                "stream": {"class": "logging.StreamHandler", "level": level, "formatter": formatter},
            },
            "root": {"level": level, "handlers": ["stream"]},
            "loggers": {
                name: {"level": lvl, "handlers": [], "propagate": True}
                for name, lvl in QUIET_LOGGERS.items()
            },
        }
    )
