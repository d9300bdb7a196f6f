# lovelypack/transpile/jobs.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)

__all__ = ["AuxiliaryScriptJob", "readsAsEmbeddedString", "discoverAuxiliaryScripts"]



@dataclass(frozen=True, slots=True, kw_only=True)
class AuxiliaryScriptJob:
    """One auxiliary script on its way from source to the deployment tree."""
    sourcePath: Path
    outputPath: Path        # Where the compiler writes its output (staging)
    deployPath: Path        # Final location inside the deployment root
    relativePath: str       # deployPath relative to the deployment root, POSIX style
    compileToString: bool
    # Set when the source could not be read during discovery; the job then fails without compiling
    readError: Exception | None = None

    @property
    def stem(self) -> str:
        return self.sourcePath.name[: -len(self.sourcePath.suffix)] if self.sourcePath.suffix else self.sourcePath.name



def readsAsEmbeddedString(path: Path, sentinel: str) -> bool:
    """True when the file's first line opens with the string-embedding sentinel."""
    with path.open("r", encoding="utf-8") as handle:
        firstLine = handle.readline()
    return firstLine.startswith(sentinel)



def discoverAuxiliaryScripts(
    auxiliaryDir: Path,
    deployRoot: Path,
    *,
    outDir: Path | None = None,
    deployDir: str = "extra_lua",
    sentinel: str = "// $love2d-compile-to-string$ //",
    sourceExtension: str = ".ts",
    declarationExtension: str = ".d.ts",
    targetExtension: str = ".lua",
) -> list[AuxiliaryScriptJob]:
    """
    List the auxiliary scripts to compile, sorted by file name.

    Eligible files are regular, non-hidden, carry the source extension and are
    not declaration files. A missing directory means there are no auxiliary
    scripts. A file whose first line cannot be read is still listed, carrying
    its `readError`, so the pass reports it as failed.
    """
    if not auxiliaryDir.is_dir():
        logger.debug("No auxiliary scripts directory at '%s'", auxiliaryDir)
        return []

    outDir = outDir or auxiliaryDir
    jobs: list[AuxiliaryScriptJob] = []
    for path in sorted(auxiliaryDir.iterdir(), key=lambda entry: entry.name):
        name = path.name
        if name.startswith("."):
            continue
        if not name.endswith(sourceExtension) or name.endswith(declarationExtension):
            continue
        if not path.is_file():
            continue

        readError: Exception | None = None
        try:
            compileToString = readsAsEmbeddedString(path, sentinel)
        except (OSError, UnicodeDecodeError) as err:
            logger.error("Cannot read auxiliary script '%s': %s", path, err)
            compileToString = False
            readError = err

        targetName = name[: -len(sourceExtension)] + targetExtension
        relativePath = (PurePosixPath(deployDir) / targetName).as_posix()
        jobs.append(AuxiliaryScriptJob(
            sourcePath=path,
            outputPath=outDir / targetName,
            deployPath=deployRoot / deployDir / targetName,
            relativePath=relativePath,
            compileToString=compileToString,
            readError=readError,
        ))

    return jobs
