# lovelypack/core/logging/context.py
from __future__ import annotations
import contextvars

# Current pipeline position (modId, step, file) attached to every log record
_pipelineContext: contextvars.ContextVar[dict[str, object] | None] = contextvars.ContextVar(
    "lovelypack.logctx", default=None
)

def setLogContext(**fields: object) -> None:
    """Merge `fields` into the current context. None values leave a key unchanged."""
    merged = {**(_pipelineContext.get() or {})}
    merged.update({key: value for key, value in fields.items() if value is not None})
    _pipelineContext.set(merged)

def clearLogContext() -> None:
    """Drop all context once a pipeline run is over."""
    _pipelineContext.set(None)

def getLogContext() -> dict[str, object] | None:
    return _pipelineContext.get()
