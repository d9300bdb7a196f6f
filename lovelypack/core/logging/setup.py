# lovelypack/core/logging/setup.py
from __future__ import annotations
import logging
import logging.handlers
from pathlib import Path

from .formatters import DevFormatter, JsonFormatter

__all__ = ["configureLogging"]

_LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
_LOG_FILE_BACKUPS = 3



def _resolveLevel(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    # Unknown names come back as "Level <name>"
    return resolved if isinstance(resolved, int) else logging.INFO



def configureLogging(level: str | int = "INFO", logFile: str | Path | None = None) -> None:
    """
    Route all lovelypack logging through the root logger, replacing any handlers.

    Console output uses `DevFormatter`. With `logFile`, records are also appended
    to a size-rotated file as JSON lines.
    """
    rootLevel = _resolveLevel(level)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    handlers[0].setFormatter(DevFormatter())

    if logFile:
        Path(logFile).parent.mkdir(parents=True, exist_ok=True)
        fileHandler = logging.handlers.RotatingFileHandler(
            logFile, maxBytes=_LOG_FILE_MAX_BYTES, backupCount=_LOG_FILE_BACKUPS, encoding="utf-8",
        )
        fileHandler.setFormatter(JsonFormatter())
        handlers.append(fileHandler)

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        handler.setLevel(rootLevel)
        root.addHandler(handler)
    root.setLevel(rootLevel)
