import dataclasses
import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

import coloredlogs
from pydantic import BaseModel


def _jsonable(value: Any) -> Any:
    """json.dumps fallback for the values analytics code binds as context."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return str(value)


def _context(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, "context", None) or {}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with bound context merged at the top level."""

    def format(self, record):
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
        }
        # Context never overwrites the fixed fields
        for key, value in _context(record).items():
            log_obj.setdefault(key, value)

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=_jsonable)


class PrettyFormatter(coloredlogs.ColoredFormatter):
    """Colored console line followed by key=value context."""

    def format(self, record):
        msg = super().format(record)
        context = _context(record)
        if context:
            pairs = " ".join(f"{k}={v.value if isinstance(v, Enum) else v}" for k, v in context.items())
            msg += f" | {pairs}"
        return msg
