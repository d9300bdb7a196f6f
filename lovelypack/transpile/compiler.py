# lovelypack/transpile/compiler.py
from __future__ import annotations
import logging
import shutil
import subprocess
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from lovelypack.core.errors import CompilerError, CompilerTimeoutError
from .jobs import AuxiliaryScriptJob

logger = logging.getLogger(__name__)

__all__ = ["ExternalCompiler", "waitForOutput"]



# Filesystems with coarse timestamps can report an mtime slightly before the write
_MTIME_SLACK_SECONDS = 2.0



def waitForOutput(
    path: Path,
    *,
    since: float,
    timeoutSeconds: float,
    pollIntervalSeconds: float = 0.1,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Poll until `path` exists and was modified at or after `since` (wall clock).

    Raises:
        CompilerTimeoutError: the output did not show up within `timeoutSeconds`
    """
    deadline = clock() + timeoutSeconds
    while True:
        try:
            if path.stat().st_mtime >= since - _MTIME_SLACK_SECONDS:
                return
        except FileNotFoundError:
            pass
        if clock() >= deadline:
            raise CompilerTimeoutError(
                f"Compiler timed out: no output at '{path}' after {timeoutSeconds:g}s"
            )
        sleep(pollIntervalSeconds)



class ExternalCompiler:
    """
    Runs the external TypeScript-to-Lua compiler as a blocking subprocess.

    Command items are templates; `{projectRoot}`, `{auxiliaryDir}` and
    `{sourcePath}` are substituted per invocation. The compiler is expected to
    write each job's `outputPath`; completion is confirmed by polling for it.
    """
    def __init__(
        self,
        command: Sequence[str],
        *,
        projectRoot: Path,
        auxiliaryDir: Path,
        timeoutSeconds: float = 300.0,
        outputWaitSeconds: float = 5.0,
        pollIntervalSeconds: float = 0.1,
    ):
        if not command:
            raise ValueError("Compiler command must not be empty")
        self.command = list(command)
        self.projectRoot = projectRoot
        self.auxiliaryDir = auxiliaryDir
        self.timeoutSeconds = timeoutSeconds
        self.outputWaitSeconds = outputWaitSeconds
        self.pollIntervalSeconds = pollIntervalSeconds

    def buildCommand(self, job: AuxiliaryScriptJob) -> list[str]:
        values = {
            "projectRoot": self.projectRoot.as_posix(),
            "auxiliaryDir": self.auxiliaryDir.as_posix(),
            "sourcePath": job.sourcePath.as_posix(),
        }
        argv = [part.format(**values) for part in self.command]
        # Resolve launchers such as npx -> npx.cmd on Windows
        argv[0] = shutil.which(argv[0]) or argv[0]
        return argv

    def compile(self, job: AuxiliaryScriptJob, *, since: float | None = None) -> None:
        """
        Compile one auxiliary script and wait for its output file.

        `since` is the wall-clock time output must be newer than; defaults to
        the start of this invocation.

        Raises:
            CompilerError: the compiler could not be started or exited non-zero
            CompilerTimeoutError: the compiler or its output exceeded the time limits
        """
        argv = self.buildCommand(job)
        started = time.time() if since is None else since
        logger.debug("Running compiler for '%s': %s", job.sourcePath.name, " ".join(argv))

        try:
            completed = subprocess.run(
                argv,
                cwd=self.projectRoot,
                capture_output=True,
                text=True,
                timeout=self.timeoutSeconds,
                check=False,
            )
        except subprocess.TimeoutExpired as err:
            raise CompilerTimeoutError(
                f"Compiler timed out after {self.timeoutSeconds:g}s compiling '{job.sourcePath.name}'"
            ) from err
        except OSError as err:
            raise CompilerError(f"Cannot start compiler '{argv[0]}': {err}") from err

        if completed.stdout:
            logger.info("stdout for %s: %s", job.sourcePath.name, completed.stdout.rstrip())
        if completed.stderr:
            logger.warning("stderr for %s: %s", job.sourcePath.name, completed.stderr.rstrip())

        if completed.returncode != 0:
            raise CompilerError(
                f"Compiler exited with code {completed.returncode} for '{job.sourcePath.name}'",
                returncode=completed.returncode,
                stderr=completed.stderr,
            )

        waitForOutput(
            job.outputPath,
            since=started,
            timeoutSeconds=self.outputWaitSeconds,
            pollIntervalSeconds=self.pollIntervalSeconds,
        )
