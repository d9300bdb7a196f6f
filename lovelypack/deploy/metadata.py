# lovelypack/deploy/metadata.py
from __future__ import annotations
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lovelypack.config.project import ProjectConfig
from lovelypack.core.jsonutils import prettyJsonDumps

__all__ = ["ModMetadata", "buildModMetadata", "renderModMetadata"]



_SCRIPT_EXT_RE = re.compile(r"\.(ts|js)$")



class ModMetadata(BaseModel):
    """
    Mod descriptor read by the mod loader to identify and configure the mod.
    Field names follow the loader's JSON schema.
    """
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str | None = None
    author: list[str] = Field(default_factory=list)
    description: str | None = None
    prefix: str
    version: str | None = None
    dependencies: list[str] | None = None
    main_file: str | None = None

    @property
    def fileName(self) -> str:
        return f"{self.id}.json"

    def toJson(self) -> dict[str, Any]:
        # Absent values are left out entirely rather than written as null
        return self.model_dump(exclude_none=True)



def _personName(person: str | dict[str, Any]) -> str | None:
    """npm person object -> display name, falling back to its email or url."""
    if isinstance(person, str):
        return person
    for key in ("name", "email", "url"):
        value = person.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None



def _normalizeAuthors(author: str | dict[str, Any] | list[str | dict[str, Any]] | None) -> list[str]:
    if author is None:
        return []
    people = author if isinstance(author, list) else [author]
    names = [_personName(person) for person in people]
    return [name for name in names if name is not None]



def buildModMetadata(project: ProjectConfig, *, targetExtension: str = ".lua") -> ModMetadata:
    """Derive the mod metadata from project configuration."""
    mainFile = _SCRIPT_EXT_RE.sub(targetExtension, project.main) if project.main else None
    return ModMetadata(
        id=project.name,
        name=project.displayName,
        author=_normalizeAuthors(project.author),
        description=project.description,
        prefix=project.modPrefix,
        version=project.version,
        dependencies=list(project.smodDeps) if project.smodDeps is not None else None,
        main_file=mainFile,
    )



def renderModMetadata(metadata: ModMetadata) -> str:
    return prettyJsonDumps(metadata.toJson(), indent=2)
