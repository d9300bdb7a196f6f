# lovelypack/config/project.py
from __future__ import annotations
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import json5
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lovelypack.core.errors import ProjectConfigError

logger = logging.getLogger(__name__)

__all__ = ["ProjectConfig", "loadProjectConfig"]



class ProjectConfig(BaseModel):
    """
    The subset of the project's package.json that shapes the mod bundle.
    Unrelated npm keys (scripts, devDependencies, ...) are ignored.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str = Field(min_length=1)
    displayName: str | None = None
    # npm allows a plain string or a person object {name, email, url}, alone or in a list
    author: str | dict[str, Any] | list[str | dict[str, Any]] | None = None
    description: str | None = None
    version: str | None = None
    main: str | None = None
    smodDeps: list[str] | None = Field(default=None, alias="smod_deps")

    @property
    def modId(self) -> str:
        return self.name

    @property
    def modPrefix(self) -> str:
        return self.name.replace("-", "_")



def loadProjectConfig(path: Path | str) -> ProjectConfig:
    """
    Read and validate the project configuration file.

    Raises:
        ProjectConfigError: if the file is missing, is not a JSON object or fails validation
    """
    path = Path(path)
    try:
        raw = json5.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as err:
        raise ProjectConfigError(f"Project file '{path}' not found") from err
    except Exception as err:
        raise ProjectConfigError(f"Failed to parse project file '{path}': {err}") from err

    if not isinstance(raw, Mapping):
        raise ProjectConfigError(f"Project file '{path}' must contain a JSON object, not '{type(raw).__name__}'")

    try:
        project = ProjectConfig.model_validate(dict(raw))
    except ValidationError as err:
        raise ProjectConfigError(f"Invalid project file '{path}': {err}") from err

    logger.debug("Loaded project '%s' (version=%s) from '%s'", project.name, project.version, path)
    return project
