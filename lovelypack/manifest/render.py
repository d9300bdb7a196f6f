# lovelypack/manifest/render.py
from __future__ import annotations
from collections.abc import Iterable

from lovelypack.annotations.descriptor import PatchDescriptor

__all__ = [
    "MANIFEST_VERSION",
    "PAYLOAD_DELIMITER",
    "renderManifestHeader",
    "renderPatchBlock",
    "renderPatchManifest",
    "renderCopyBlock",
    "renderCopyManifest",
]



MANIFEST_VERSION = "1.0.0"
# Payloads are emitted verbatim between these; callers must keep them out of payload text.
PAYLOAD_DELIMITER = '"""'



def renderManifestHeader(version: str = MANIFEST_VERSION) -> str:
    return f'[manifest]\nversion = "{version}"'



def renderPatchBlock(descriptor: PatchDescriptor) -> str:
    """
    One `[[patches]]` entry. `match_indent` is always written as true, whatever
    the descriptor carries.
    """
    return (
        "[[patches]]\n"
        f"[patches.{descriptor.patchType}]\n"
        f'target = "{descriptor.target}"\n'
        f'pattern = "{descriptor.pattern}"\n'
        f'position = "{descriptor.position}"\n'
        "match_indent = true\n"
        f"payload = {PAYLOAD_DELIMITER}{descriptor.payload}{PAYLOAD_DELIMITER}\n"
    )



def renderPatchManifest(descriptors: Iterable[PatchDescriptor], *, version: str = MANIFEST_VERSION) -> str:
    """
    Render the primary patch manifest.

    Blocks keep the order of `descriptors`; nothing is merged or deduplicated.
    Every block is preceded by a blank line. Descriptors with an empty patch
    type are not patches and are left out.
    """
    parts = [renderManifestHeader(version)]
    for descriptor in descriptors:
        if not descriptor.patchType:
            continue
        parts.append("\n\n" + renderPatchBlock(descriptor))
    return "".join(parts)



def renderCopyBlock(relativePath: str, *, target: str = "main.lua") -> str:
    return (
        "[[patches]]\n"
        "[patches.copy]\n"
        f'target="{target}"\n'
        f'sources=["{relativePath}"]\n'
        'position="append"\n'
    )



def renderCopyManifest(
    relativePaths: Iterable[str],
    *,
    target: str = "main.lua",
    version: str = MANIFEST_VERSION,
) -> str:
    """
    Render the manifest that appends each auxiliary script to the host entry file,
    one block per script in the given order.
    """
    blocks = [renderCopyBlock(path, target=target) for path in relativePaths]
    return renderManifestHeader(version) + "\n\n" + "\n".join(blocks)
