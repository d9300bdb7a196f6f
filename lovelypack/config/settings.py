# lovelypack/config/settings.py
from __future__ import annotations
import copy
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import json5
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lovelypack.core.errors import SettingsError

logger = logging.getLogger(__name__)

__all__ = [
    "SETTINGS_FILE_NAME",
    "ScanSettings",
    "ManifestSettings",
    "DeploymentSettings",
    "AuxiliarySettings",
    "CompilerSettings",
    "LoggingSettings",
    "BuildSettings",
    "mergeSettings",
    "loadBuildSettings",
]



SETTINGS_FILE_NAME = "lovelypack.json5"



class ScanSettings(BaseModel):
    """Where annotated source modules are looked up."""
    model_config = ConfigDict(extra="forbid")

    include: str = "src/**/*.ts"



class ManifestSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: str = "1.0.0"
    hostEntryFile: str = "main.lua"



class DeploymentSettings(BaseModel):
    """
    `root` pins the deployment directory explicitly. When unset, it is derived
    from the platform and `hostFolder` (the game's folder under the user data dir).
    """
    model_config = ConfigDict(extra="forbid")

    root: str | None = None
    hostFolder: str = "Balatro"



class AuxiliarySettings(BaseModel):
    """
    Auxiliary scripts live outside the scanned tree and are compiled separately.
    `outDir` is where the compiler writes its output (defaults to `dir`).
    """
    model_config = ConfigDict(extra="forbid")

    dir: str = "extra_lua"
    outDir: str | None = None
    deployDir: str = "extra_lua"
    sourceExtension: str = ".ts"
    declarationExtension: str = ".d.ts"
    targetExtension: str = ".lua"
    stringSentinel: str = "// $love2d-compile-to-string$ //"



class CompilerSettings(BaseModel):
    """
    External compiler invocation. Command items may reference `{projectRoot}`,
    `{auxiliaryDir}` and `{sourcePath}` placeholders.
    """
    model_config = ConfigDict(extra="forbid")

    command: list[str] = Field(default_factory=lambda: ["npx", "tstl", "-p", "{auxiliaryDir}/tsconfig.json"])
    timeoutSeconds: float = Field(default=300.0, gt=0)
    outputWaitSeconds: float = Field(default=5.0, ge=0)
    pollIntervalSeconds: float = Field(default=0.1, gt=0)



class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: str = "INFO"
    file: str | None = None



class BuildSettings(BaseModel):
    """Validated build settings: defaults <- lovelypack.json5 <- explicit overrides."""
    model_config = ConfigDict(extra="forbid")

    projectFile: str = "package.json"
    buildDir: str = "build"
    scan: ScanSettings = Field(default_factory=ScanSettings)
    manifest: ManifestSettings = Field(default_factory=ManifestSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    auxiliary: AuxiliarySettings = Field(default_factory=AuxiliarySettings)
    compiler: CompilerSettings = Field(default_factory=CompilerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)



def mergeSettings(left: Any, right: Any) -> Any:
    """
    Deep merge where `right` wins:
      - dicts: recurse; if right carries "__merge": "replace", right replaces left (minus the key)
      - lists and scalars: right replaces left
      - None on the right is a value too (it resets an optional setting)
    """
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if right.get("__merge") == "replace":
            return {key: copy.deepcopy(value) for key, value in right.items() if key != "__merge"}
        out: dict[str, Any] = {**left}
        for key, rightValue in right.items():
            if key == "__merge":
                continue
            leftValue = out.get(key)
            if isinstance(leftValue, Mapping) and isinstance(rightValue, Mapping):
                out[key] = mergeSettings(leftValue, rightValue)
            else:
                out[key] = copy.deepcopy(rightValue)
        return out
    return copy.deepcopy(right)



def _readSettingsFile(path: Path, *, strict: bool) -> dict[str, Any]:
    if not path.exists():
        if strict:
            raise SettingsError(f"Settings file '{path}' not found")
        return {}

    if not path.is_file():
        raise SettingsError(f"Settings file '{path}' is not a file")

    try:
        parsed = json5.loads(path.read_text("utf-8"))
    except Exception as err:
        raise SettingsError(f"Failed to parse settings file '{path}': {err}") from err

    if not isinstance(parsed, Mapping):
        raise SettingsError(
            f"Settings file '{path}' must contain a JSON object, not '{type(parsed).__name__}'"
        )
    return dict(parsed)



def loadBuildSettings(
    projectRoot: Path | str,
    *,
    configPath: Path | str | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> BuildSettings:
    """
    Load build settings for a project.

    If `configPath` is given it must exist; otherwise `<projectRoot>/lovelypack.json5`
    is used when present and defaults apply when it is not.

    Raises:
        SettingsError: if the file cannot be parsed or the merged result does not validate
    """
    projectRoot = Path(projectRoot)
    if configPath is not None:
        path = Path(configPath)
        if not path.is_absolute():
            path = projectRoot / path
        fileData = _readSettingsFile(path, strict=True)
    else:
        path = projectRoot / SETTINGS_FILE_NAME
        fileData = _readSettingsFile(path, strict=False)

    if fileData:
        logger.debug("Loaded build settings from '%s'", path)

    merged = mergeSettings(BuildSettings().model_dump(), fileData)
    if overrides:
        merged = mergeSettings(merged, overrides)

    try:
        return BuildSettings.model_validate(merged)
    except ValidationError as err:
        raise SettingsError(f"Invalid build settings: {err}") from err
