# lovelypack/annotations/jsdoc.py
from __future__ import annotations
import re
from dataclasses import dataclass

__all__ = ["JsDocTag", "parseJsDocTags"]



# A tag starts at the beginning of a line or after whitespace, like TypeScript's own JSDoc parser.
_TAG_RE = re.compile(r"(?:^|(?<=\s))@([A-Za-z_$][\w$]*)", re.MULTILINE)



@dataclass(frozen=True, slots=True)
class JsDocTag:
    name: str
    comment: str



def _stripGutter(body: str) -> str:
    lines: list[str] = []
    for raw in body.splitlines():
        line = raw.strip()
        if line.startswith("*"):
            line = line[1:]
        lines.append(line.strip())
    return "\n".join(lines)



def parseJsDocTags(block: str) -> list[JsDocTag]:
    """
    Split a `/** ... */` block into its block tags, in source order.

    A tag's comment is the text after the tag name up to the next tag, with
    the leading `*` gutter removed and surrounding whitespace trimmed. The free
    description before the first tag is dropped.
    """
    body = block
    if body.startswith("/**"):
        body = body[3:]
    if body.endswith("*/"):
        body = body[:-2]
    text = _stripGutter(body)

    matches = list(_TAG_RE.finditer(text))
    tags: list[JsDocTag] = []
    for idx, match in enumerate(matches):
        end = matches[idx + 1].start() if idx + 1 < len(matches) else len(text)
        tags.append(JsDocTag(match.group(1), text[match.end():end].strip()))
    return tags
