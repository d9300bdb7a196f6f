# lovelypack/pipeline/report.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from lovelypack.annotations.descriptor import PatchDescriptor

__all__ = ["StepStatus", "StepResult", "PipelineReport"]



class StepStatus(Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"



@dataclass(frozen=True, slots=True)
class StepResult:
    """Outcome of one best-effort pipeline step."""
    name: str
    status: StepStatus
    reason: str | None = None
    # Exception class name for failures, e.g. "CompilerTimeoutError"
    errorType: str | None = None
    detail: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, name: str, **detail: Any) -> StepResult:
        return cls(name, StepStatus.OK, detail=detail)

    @classmethod
    def skipped(cls, name: str, reason: str, **detail: Any) -> StepResult:
        return cls(name, StepStatus.SKIPPED, reason=reason, detail=detail)

    @classmethod
    def failed(cls, name: str, reason: str, *, error: BaseException | None = None, **detail: Any) -> StepResult:
        return cls(
            name,
            StepStatus.FAILED,
            reason=reason,
            errorType=type(error).__name__ if error is not None else None,
            detail=detail,
        )

    @property
    def isOk(self) -> bool:
        return self.status is StepStatus.OK

    @property
    def isFailed(self) -> bool:
        return self.status is StepStatus.FAILED



@dataclass(slots=True)
class PipelineReport:
    """
    Everything one pipeline run produced, in execution order.

    A run with failed steps is still a completed run; callers decide what a
    partial result means for them.
    """
    steps: list[StepResult] = field(default_factory=list)
    descriptors: list[PatchDescriptor] = field(default_factory=list)
    manifestText: str = ""
    auxiliaryFiles: list[str] = field(default_factory=list)

    def add(self, result: StepResult) -> StepResult:
        self.steps.append(result)
        return result

    def extend(self, results: list[StepResult]) -> None:
        self.steps.extend(results)

    def step(self, name: str) -> StepResult | None:
        """Last result recorded under `name`."""
        for result in reversed(self.steps):
            if result.name == name:
                return result
        return None

    @property
    def failures(self) -> list[StepResult]:
        return [result for result in self.steps if result.isFailed]

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        counts = {status: 0 for status in StepStatus}
        for result in self.steps:
            counts[result.status] += 1
        return (
            f"{len(self.descriptors)} patch(es), {len(self.auxiliaryFiles)} auxiliary script(s); "
            f"steps ok={counts[StepStatus.OK]} skipped={counts[StepStatus.SKIPPED]} failed={counts[StepStatus.FAILED]}"
        )
