# lovelypack/core/errors.py
from __future__ import annotations

__all__ = [
    "LovelyPackError",
    "SettingsError",
    "ProjectConfigError",
    "DeploymentRootError",
    "CompilerError",
    "CompilerTimeoutError",
]



class LovelyPackError(Exception):
    """Base class for every error raised by lovelypack itself."""
    pass



class SettingsError(LovelyPackError):
    """Build settings file is missing, unreadable or does not validate."""
    pass



class ProjectConfigError(LovelyPackError):
    """Project configuration (package.json) is missing, unreadable or invalid."""
    pass



class DeploymentRootError(LovelyPackError):
    """No deployment directory could be resolved for the current platform."""
    pass



class CompilerError(LovelyPackError):
    """External compiler could not be started or exited with a failure."""
    def __init__(self, message: str, *, returncode: int | None = None, stderr: str | None = None):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr



class CompilerTimeoutError(CompilerError):
    """External compiler did not finish, or did not produce its output, in time."""
    pass
