# lovelypack/transpile/embed.py
from __future__ import annotations
import re
from pathlib import Path

__all__ = ["embeddedVariableName", "longBracketLevel", "wrapAsLuaString", "embedFileInPlace"]



_NON_IDENT_RE = re.compile(r"[^A-Za-z0-9_]")



def embeddedVariableName(modId: str, stem: str) -> str:
    """Global holding an embedded script, e.g. ("my-mod", "shader") -> MY_MOD_SHADER_CODE_STR."""
    prefix = _NON_IDENT_RE.sub("_", modId.replace("-", "_")).upper()
    name = _NON_IDENT_RE.sub("_", stem).upper()
    return f"{prefix}_{name}_CODE_STR"



def longBracketLevel(text: str, *, minimum: int = 1) -> int:
    """Smallest long-bracket level >= minimum whose closing sequence does not occur in text."""
    level = minimum
    while f"]{'=' * level}]" in text:
        level += 1
    return level



def wrapAsLuaString(variableName: str, text: str) -> str:
    level = longBracketLevel(text)
    equals = "=" * level
    return f"{variableName} = [{equals}[\n{text}\n]{equals}]\n"



def embedFileInPlace(path: Path, variableName: str) -> None:
    """Rewrite a compiled Lua file as a global string assignment holding its whole text."""
    text = path.read_text(encoding="utf-8")
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(wrapAsLuaString(variableName, text))
