# lovelypack/transpile/transpiler.py
from __future__ import annotations
import logging
import shutil
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from lovelypack.core.errors import CompilerError
from lovelypack.core.logging import setLogContext
from lovelypack.manifest.render import MANIFEST_VERSION, renderCopyManifest
from lovelypack.pipeline.report import StepResult
from .embed import embeddedVariableName, embedFileInPlace
from .jobs import AuxiliaryScriptJob

logger = logging.getLogger(__name__)

__all__ = [
    "AUXILIARY_MANIFEST_NAME",
    "ScriptCompiler",
    "AuxiliaryPassResult",
    "processAuxiliaryScript",
    "runAuxiliaryPass",
]



AUXILIARY_MANIFEST_NAME = "extra_lua.toml"



class ScriptCompiler(Protocol):
    def compile(self, job: AuxiliaryScriptJob, *, since: float | None = None) -> None:
        ...



@dataclass(slots=True)
class AuxiliaryPassResult:
    steps: list[StepResult] = field(default_factory=list)
    deployed: list[str] = field(default_factory=list)
    manifestPath: Path | None = None



def _stepName(job: AuxiliaryScriptJob) -> str:
    return f"auxiliary:{job.sourcePath.name}"



def processAuxiliaryScript(
    job: AuxiliaryScriptJob,
    compiler: ScriptCompiler,
    *,
    modId: str,
    since: float,
) -> StepResult:
    """
    Compile, optionally embed, deploy and clean up one auxiliary script.

    Failures are logged and returned as a failed step; they never raise.
    """
    name = _stepName(job)
    setLogContext(step="auxiliary", file=job.sourcePath.name)
    if job.readError is not None:
        logger.error("Skipping unreadable auxiliary script '%s': %s", job.sourcePath.name, job.readError)
        return StepResult.failed(name, f"cannot read source: {job.readError}", error=job.readError)

    try:
        compiler.compile(job, since=since)

        if job.compileToString:
            variableName = embeddedVariableName(modId, job.stem)
            embedFileInPlace(job.outputPath, variableName)
            logger.debug("Embedded '%s' as %s", job.outputPath.name, variableName)

        job.deployPath.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(job.outputPath, job.deployPath)
        job.outputPath.unlink()
    except (CompilerError, OSError, UnicodeDecodeError) as err:
        logger.error("Error compiling auxiliary script '%s': %s", job.sourcePath.name, err)
        return StepResult.failed(name, str(err), error=err)

    logger.info("Deployed auxiliary script '%s'", job.relativePath)
    return StepResult.ok(name, relativePath=job.relativePath, embedded=job.compileToString)



def _sweepStaging(jobs: Sequence[AuxiliaryScriptJob]) -> None:
    # Each compiler run rebuilds the whole directory, so outputs of jobs
    # already deployed reappear in staging.
    for job in jobs:
        try:
            if job.outputPath.exists():
                job.outputPath.unlink()
                logger.debug("Removed regenerated staging output '%s'", job.outputPath)
        except OSError as err:
            logger.warning("Could not remove staging output '%s': %s", job.outputPath, err)



def runAuxiliaryPass(
    jobs: Sequence[AuxiliaryScriptJob],
    compiler: ScriptCompiler,
    *,
    modId: str,
    manifestDir: Path,
    hostEntryFile: str = "main.lua",
    manifestVersion: str = MANIFEST_VERSION,
) -> AuxiliaryPassResult:
    """
    Process auxiliary scripts one at a time, in discovery order.

    When at least one script was deployed, writes `extra_lua.toml` into
    `manifestDir` appending each deployed script to the host entry file.
    With nothing deployed no manifest is written.
    """
    result = AuxiliaryPassResult()
    if not jobs:
        logger.debug("No auxiliary scripts to compile")
        return result

    # Output older than the start of the pass is stale
    since = time.time()
    for job in jobs:
        step = processAuxiliaryScript(job, compiler, modId=modId, since=since)
        result.steps.append(step)
        if step.isOk:
            result.deployed.append(job.relativePath)
    _sweepStaging(jobs)

    setLogContext(step="auxiliary", file=AUXILIARY_MANIFEST_NAME)
    if not result.deployed:
        logger.warning("No auxiliary scripts were deployed; %s not written", AUXILIARY_MANIFEST_NAME)
        return result

    manifestPath = manifestDir / AUXILIARY_MANIFEST_NAME
    text = renderCopyManifest(result.deployed, target=hostEntryFile, version=manifestVersion)
    try:
        with manifestPath.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    except OSError as err:
        logger.error("Failed to write '%s': %s", manifestPath, err, exc_info=True)
        result.steps.append(StepResult.failed("auxiliaryManifest", str(err), error=err))
        return result

    result.manifestPath = manifestPath
    result.steps.append(StepResult.ok("auxiliaryManifest", path=str(manifestPath), count=len(result.deployed)))
    logger.info("Registered %d auxiliary script(s) in '%s'", len(result.deployed), manifestPath)
    return result
