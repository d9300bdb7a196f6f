# lovelypack/core/logging/formatters.py
from __future__ import annotations

import logging
from typing import Any

from lovelypack.core.jsonutils import safeJsonDumps
from .context import getLogContext

__all__ = ["JsonFormatter", "DevFormatter"]

# Context keys rendered after a console message, in this order
_CONSOLE_CONTEXT_KEYS = ("step", "file")



def _describeException(formatter: logging.Formatter, record: logging.LogRecord) -> dict[str, Any]:
    excType, excValue, _tb = record.exc_info  # type: ignore[misc]
    return {
        "type": getattr(excType, "__name__", "Error"),
        "message": str(excValue),
        "stack": formatter.formatException(record.exc_info),  # type: ignore[arg-type]
    }



class JsonFormatter(logging.Formatter):
    """One JSON object per line, for build log files."""
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": int(record.created * 1000),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
            "ctx": dict(getLogContext() or {}),
            "pid": record.process,
        }
        if record.exc_info:
            entry["exc"] = _describeException(self, record)
        return safeJsonDumps(entry)



class DevFormatter(logging.Formatter):
    """
    Console lines like `WARNING: [lovelypack.x] message [auxiliary/shader.ts]`,
    where the bracketed suffix is the current pipeline step and file.
    """
    def format(self, record: logging.LogRecord) -> str:
        line = f"{record.levelname}: [{record.name}] {record.getMessage()}"

        ctx = getLogContext() or {}
        parts = [str(ctx[key]) for key in _CONSOLE_CONTEXT_KEYS if ctx.get(key)]
        if parts:
            line += f" [{'/'.join(parts)}]"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        if record.stack_info:
            line += "\n" + self.formatStack(record.stack_info)
        return line
