"""Logging helpers."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, MutableMapping

_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render log records as compact JSON."""

    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.default_time_format),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS
        }
        if extras:
            data.update(extras)

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        return json.dumps(data, ensure_ascii=False, default=str)


class SubmissionLoggerAdapter(logging.LoggerAdapter):
    """Stamps every record with the id of the submission being processed."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("submission_id", self.extra["submission_id"])
        kwargs["extra"] = extra
        return msg, kwargs


def configure_logging(
    *,
    level: int | str = logging.INFO,
    structured: bool | None = None,
) -> None:
    """Configure root logging with optional JSON output."""

    root = logging.getLogger()
    root.setLevel(level)

    if root.handlers:
        if structured is None:
            return
        formatter: logging.Formatter = (
            JsonFormatter() if structured else logging.Formatter(_PLAIN_FORMAT)
        )
        for handler in root.handlers:
            handler.setFormatter(formatter)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if structured else logging.Formatter(_PLAIN_FORMAT))
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def submission_logger(logger: logging.Logger, submission_id: str) -> SubmissionLoggerAdapter:
    return SubmissionLoggerAdapter(logger, {"submission_id": submission_id})


__all__ = [
    "JsonFormatter",
    "SubmissionLoggerAdapter",
    "configure_logging",
    "get_logger",
    "submission_logger",
]
