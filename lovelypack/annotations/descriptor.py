# lovelypack/annotations/descriptor.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "TAG_TARGET",
    "TAG_PATTERN",
    "TAG_POSITION",
    "TAG_TYPE",
    "TAG_MATCH_INDENT",
    "TAG_CAPTURE_LOCAL",
    "TAG_PAYLOAD_PREFIX",
    "TAG_PAYLOAD_SUFFIX",
    "PATCH_TAGS",
    "PatchDescriptor",
]



# JSDoc tag vocabulary understood by the scanner. Anything else is ignored.
TAG_TARGET = "lovelyTarget"
TAG_PATTERN = "lovelyPattern"
TAG_POSITION = "lovelyPosition"
TAG_TYPE = "lovelyType"
TAG_MATCH_INDENT = "lovelyMatchIndent"
TAG_CAPTURE_LOCAL = "lovelyCaptureLocal"
TAG_PAYLOAD_PREFIX = "lovelyPayloadPrefix"
TAG_PAYLOAD_SUFFIX = "lovelyPayloadSuffix"

PATCH_TAGS: frozenset[str] = frozenset({
    TAG_TARGET, TAG_PATTERN, TAG_POSITION, TAG_TYPE, TAG_MATCH_INDENT,
    TAG_CAPTURE_LOCAL, TAG_PAYLOAD_PREFIX, TAG_PAYLOAD_SUFFIX,
})



@dataclass(frozen=True, slots=True, kw_only=True)
class PatchDescriptor:
    """
    One function's patch intent, as declared by its documentation tags.

    `patchType` selects the `[patches.<type>]` section of the manifest; an empty
    type means "not a patch" and such descriptors are never built by the scanner.
    """
    functionName: str
    patchType: str
    target: str = ""
    pattern: str = ""
    position: str = ""
    matchIndent: bool = True
    locals: tuple[str, ...] = ()
    payloadPrefix: str | None = None
    payloadSuffix: str | None = None

    # Provenance, only used for diagnostics
    sourcePath: Path | None = None
    line: int = 0

    @property
    def payload(self) -> str:
        """Call expression injected by the patch loader."""
        return f"{self.payloadPrefix or ''}{self.functionName}({', '.join(self.locals)}){self.payloadSuffix or ''}"

    @property
    def location(self) -> str:
        if self.sourcePath is None:
            return self.functionName
        return f"{self.sourcePath.as_posix()}:{self.line}"
