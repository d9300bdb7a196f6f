# lovelypack/pipeline/runner.py
from __future__ import annotations
import logging
from pathlib import Path

from lovelypack.annotations.scanner import scanSources
from lovelypack.config.project import ProjectConfig
from lovelypack.config.settings import BuildSettings
from lovelypack.core.logging import clearLogContext, setLogContext
from lovelypack.deploy.metadata import buildModMetadata
from lovelypack.deploy.packager import (
    MANIFEST_DIR,
    clearDirectory,
    copyTree,
    createSkeleton,
    writeMetadata,
    writePatchManifest,
)
from lovelypack.manifest.render import renderPatchManifest
from lovelypack.transpile.compiler import ExternalCompiler
from lovelypack.transpile.jobs import discoverAuxiliaryScripts
from lovelypack.transpile.transpiler import ScriptCompiler, runAuxiliaryPass
from .report import PipelineReport, StepResult

logger = logging.getLogger(__name__)

__all__ = ["buildCompiler", "runPipeline"]



def _resolveIn(projectRoot: Path, value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else projectRoot / path



def buildCompiler(projectRoot: Path, settings: BuildSettings) -> ExternalCompiler:
    return ExternalCompiler(
        settings.compiler.command,
        projectRoot=projectRoot,
        auxiliaryDir=_resolveIn(projectRoot, settings.auxiliary.dir),
        timeoutSeconds=settings.compiler.timeoutSeconds,
        outputWaitSeconds=settings.compiler.outputWaitSeconds,
        pollIntervalSeconds=settings.compiler.pollIntervalSeconds,
    )



def runPipeline(
    projectRoot: Path | str,
    *,
    project: ProjectConfig,
    settings: BuildSettings,
    deployRoot: Path,
    compiler: ScriptCompiler | None = None,
) -> PipelineReport:
    """
    Run the whole packaging pipeline once:

      scan -> render manifest -> clear -> skeleton -> write manifest
      -> write metadata -> copy build tree -> auxiliary scripts

    `deployRoot` is resolved by the caller. Steps after the scan are best-effort:
    each outcome is recorded in the returned report and the run continues.
    No rollback happens; running again rebuilds the deployment from scratch.
    """
    projectRoot = Path(projectRoot)
    report = PipelineReport()
    setLogContext(modId=project.modId)
    logger.info("Packaging '%s' into '%s'", project.modId, deployRoot)

    try:
        report.descriptors = scanSources(projectRoot, settings.scan.include)
        report.manifestText = renderPatchManifest(report.descriptors, version=settings.manifest.version)
        report.add(StepResult.ok("scan", patches=len(report.descriptors)))

        report.add(clearDirectory(deployRoot))
        report.add(createSkeleton(deployRoot))
        report.add(writePatchManifest(deployRoot, report.manifestText))
        metadata = buildModMetadata(project, targetExtension=settings.auxiliary.targetExtension)
        report.add(writeMetadata(deployRoot, metadata))
        report.add(copyTree(_resolveIn(projectRoot, settings.buildDir), deployRoot))

        setLogContext(step="auxiliary")
        auxiliaryDir = _resolveIn(projectRoot, settings.auxiliary.dir)
        jobs = discoverAuxiliaryScripts(
            auxiliaryDir,
            deployRoot,
            outDir=_resolveIn(projectRoot, settings.auxiliary.outDir) if settings.auxiliary.outDir else None,
            deployDir=settings.auxiliary.deployDir,
            sentinel=settings.auxiliary.stringSentinel,
            sourceExtension=settings.auxiliary.sourceExtension,
            declarationExtension=settings.auxiliary.declarationExtension,
            targetExtension=settings.auxiliary.targetExtension,
        )
        if jobs:
            auxiliary = runAuxiliaryPass(
                jobs,
                compiler or buildCompiler(projectRoot, settings),
                modId=project.modId,
                manifestDir=deployRoot / MANIFEST_DIR,
                hostEntryFile=settings.manifest.hostEntryFile,
                manifestVersion=settings.manifest.version,
            )
            report.extend(auxiliary.steps)
            report.auxiliaryFiles = auxiliary.deployed
        else:
            report.add(StepResult.skipped("auxiliary", "no auxiliary scripts"))
    finally:
        clearLogContext()

    if report.succeeded:
        logger.info("Patch metadata and JSON written successfully (%s)", report.summary())
    else:
        logger.warning(
            "Packaging finished with %d failed step(s): %s (%s)",
            len(report.failures),
            ", ".join(result.name for result in report.failures),
            report.summary(),
        )
    return report
