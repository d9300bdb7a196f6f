# lovelypack/deploy/packager.py
from __future__ import annotations
import logging
import shutil
from pathlib import Path

from lovelypack.core.logging import setLogContext
from lovelypack.pipeline.report import StepResult
from .metadata import ModMetadata, renderModMetadata

logger = logging.getLogger(__name__)

__all__ = [
    "MANIFEST_DIR",
    "RESERVED_SRC_DIR",
    "PATCH_MANIFEST_NAME",
    "clearDirectory",
    "createSkeleton",
    "writePatchManifest",
    "writeMetadata",
    "copyTree",
]



MANIFEST_DIR = "lovely"
RESERVED_SRC_DIR = "src"
PATCH_MANIFEST_NAME = "patches.toml"



def clearDirectory(root: Path) -> StepResult:
    """
    Remove everything inside `root`, keeping `root` itself.

    Errors on individual entries are logged and clearing continues with the
    rest; stale entries left behind make the step fail.
    """
    setLogContext(step="clear")
    if not root.exists():
        logger.debug("Deployment directory '%s' does not exist yet, nothing to clear", root)
        return StepResult.skipped("clear", f"'{root}' does not exist")

    try:
        entries = sorted(root.iterdir())
    except OSError as err:
        logger.error("Error clearing directory '%s': %s", root, err, exc_info=True)
        return StepResult.failed("clear", f"cannot list '{root}': {err}", error=err)

    leftovers: list[str] = []
    lastError: OSError | None = None
    for entry in entries:
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except OSError as err:
            logger.error("Error clearing '%s': %s", entry, err)
            leftovers.append(entry.name)
            lastError = err

    if leftovers:
        return StepResult.failed(
            "clear", f"{len(leftovers)} entr(y/ies) could not be removed", error=lastError, leftovers=leftovers,
        )
    logger.debug("Cleared %d entr(y/ies) from '%s'", len(entries), root)
    return StepResult.ok("clear", removed=len(entries))



def createSkeleton(root: Path) -> StepResult:
    """Create `lovely/` and `src/` under the deployment root (parents included)."""
    setLogContext(step="skeleton")
    failed: list[str] = []
    lastError: OSError | None = None
    for name in (MANIFEST_DIR, RESERVED_SRC_DIR):
        try:
            (root / name).mkdir(parents=True, exist_ok=True)
        except OSError as err:
            logger.error("Failed to create %s directory: %s", name, err)
            failed.append(name)
            lastError = err

    if failed:
        return StepResult.failed("skeleton", f"could not create {', '.join(failed)}", error=lastError, missing=failed)
    return StepResult.ok("skeleton")



def _writeText(step: str, path: Path, text: str) -> StepResult:
    setLogContext(step=step)
    try:
        # newline="" keeps "\n" line endings on every platform
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    except OSError as err:
        logger.error("Failed to write '%s': %s", path, err, exc_info=True)
        return StepResult.failed(step, f"cannot write '{path}': {err}", error=err)
    logger.debug("Wrote '%s' (%d chars)", path, len(text))
    return StepResult.ok(step, path=str(path))



def writePatchManifest(root: Path, manifestText: str) -> StepResult:
    return _writeText("manifest", root / MANIFEST_DIR / PATCH_MANIFEST_NAME, manifestText)



def writeMetadata(root: Path, metadata: ModMetadata) -> StepResult:
    return _writeText("metadata", root / metadata.fileName, renderModMetadata(metadata))



def _copyDirectory(src: Path, dest: Path, copied: list[str], skipped: list[str]) -> None:
    dest.mkdir(parents=True, exist_ok=True)
    for entry in sorted(src.iterdir()):
        target = dest / entry.name
        if entry.is_dir():
            if entry.is_symlink():
                # Following directory links can loop; only real directories are walked
                logger.warning("Skipping symlinked directory '%s'", entry)
                skipped.append(str(entry))
                continue
            _copyDirectory(entry, target, copied, skipped)
        elif entry.is_file():
            # Symlinked files are copied by content
            shutil.copyfile(entry, target)
            copied.append(str(target))
        else:
            logger.warning("Skipping '%s': not a regular file or directory", entry)
            skipped.append(str(entry))



def copyTree(src: Path, dest: Path) -> StepResult:
    """
    Copy the compiled build tree into the deployment root, directory by
    directory and file by file, without filtering.
    """
    setLogContext(step="copy")
    if not src.is_dir():
        logger.error("Build directory '%s' does not exist; run the compiler first", src)
        return StepResult.failed("copy", f"build directory '{src}' not found")

    copied: list[str] = []
    skipped: list[str] = []
    try:
        _copyDirectory(src, dest, copied, skipped)
    except OSError as err:
        logger.error("Failed to copy build tree '%s' -> '%s': %s", src, dest, err, exc_info=True)
        return StepResult.failed("copy", str(err), error=err, copied=len(copied))

    logger.info("Copied %d file(s) from '%s'", len(copied), src)
    return StepResult.ok("copy", copied=len(copied), skipped=skipped)
