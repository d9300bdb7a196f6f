# lovelypack/annotations/scanner.py
from __future__ import annotations
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from lovelypack.core.logging import setLogContext
from .descriptor import (
    PatchDescriptor,
    PATCH_TAGS,
    TAG_TARGET,
    TAG_PATTERN,
    TAG_POSITION,
    TAG_TYPE,
    TAG_MATCH_INDENT,
    TAG_CAPTURE_LOCAL,
    TAG_PAYLOAD_PREFIX,
    TAG_PAYLOAD_SUFFIX,
)
from .jsdoc import JsDocTag, parseJsDocTags
from .lexer import Token, tokenize

logger = logging.getLogger(__name__)

__all__ = [
    "FunctionDeclaration",
    "findFunctionDeclarations",
    "descriptorFromTags",
    "scanSource",
    "collectSourceFiles",
    "scanSources",
]



# Keywords allowed between a declaration's JSDoc and its `function` keyword
_MODIFIERS = frozenset({"export", "default", "async", "declare"})
# A `function` keyword right after one of these is an expression, not a declaration
_EXPRESSION_PUNCT = frozenset("=(,:?[!&|+-*/%<>~^.")
_EXPRESSION_WORDS = frozenset({
    "return", "typeof", "instanceof", "new", "await", "yield", "void",
    "delete", "throw", "in", "of", "case", "extends",
})
# A `{` after one of these opens an object type, not a function body
_TYPE_PUNCT = frozenset(":|&,<(")
# Words that start the next statement when a signature has no body
_SIGNATURE_ENDS = frozenset({"function", "export", "declare"})



@dataclass(frozen=True, slots=True)
class FunctionDeclaration:
    name: str | None
    line: int
    docs: tuple[str, ...]
    # False for overload signatures and ambient declarations
    hasBody: bool = True



def _isStatementBoundary(prev: Token | None, start: Token) -> bool:
    if prev is None:
        return True
    if prev.kind == "punct":
        if prev.value in (";", "}"):
            return True
        if prev.value in _EXPRESSION_PUNCT:
            return False
    if prev.kind == "word" and prev.value in _EXPRESSION_WORDS:
        return False
    # Automatic semicolon insertion: a declaration on a fresh line
    return prev.line < start.line



def _hasBody(tokens: list[Token], nameIdx: int) -> bool:
    """Whether the declaration whose name sits at `nameIdx` is followed by a `{ ... }` body."""
    idx = nameIdx
    while idx < len(tokens) and not (tokens[idx].kind == "punct" and tokens[idx].value == "("):
        idx += 1

    parens = 0
    for idx in range(idx, len(tokens)):
        token = tokens[idx]
        if token.kind != "punct":
            continue
        if token.value == "(":
            parens += 1
        elif token.value == ")":
            parens -= 1
            if parens == 0:
                break

    for pos in range(idx + 1, len(tokens)):
        token = tokens[pos]
        if token.depth != 0:
            continue
        if token.kind == "word" and token.value in _SIGNATURE_ENDS:
            return False
        if token.kind == "punct" and token.value == ";":
            return False
        if token.kind == "punct" and token.value == "{":
            prev = tokens[pos - 1]
            if prev.kind == "punct" and prev.value in _TYPE_PUNCT:
                continue
            return True
    return False



def _dropOverloadSignatures(decls: list[FunctionDeclaration]) -> list[FunctionDeclaration]:
    # An overload signature is always followed by another signature or the
    # implementation under the same name; only that last one is a function.
    kept: list[FunctionDeclaration] = []
    for idx, decl in enumerate(decls):
        following = decls[idx + 1] if idx + 1 < len(decls) else None
        if not decl.hasBody and decl.name is not None and following is not None and following.name == decl.name:
            continue
        kept.append(decl)
    return kept



def findFunctionDeclarations(text: str) -> list[FunctionDeclaration]:
    """
    Find top-level function declarations and the JSDoc blocks attached to them.

    Nested functions, methods, arrow functions and function expressions are not
    declarations at module level and are ignored. Overload signatures are
    dropped in favour of the implementation they precede; a lone body-less
    declaration (`declare function f(): void;`) is kept.
    """
    tokens = tokenize(text)
    found: list[FunctionDeclaration] = []

    for idx, token in enumerate(tokens):
        if token.kind != "word" or token.value != "function" or token.depth != 0:
            continue

        start = idx
        while start > 0 and tokens[start - 1].kind == "word" and tokens[start - 1].value in _MODIFIERS:
            start -= 1

        docStart = start
        while docStart > 0 and tokens[docStart - 1].kind == "jsdoc":
            docStart -= 1

        prev = tokens[docStart - 1] if docStart > 0 else None
        if not _isStatementBoundary(prev, tokens[start]):
            continue

        nameIdx = idx + 1
        if nameIdx < len(tokens) and tokens[nameIdx].kind == "punct" and tokens[nameIdx].value == "*":
            nameIdx += 1
        name = None
        if nameIdx < len(tokens) and tokens[nameIdx].kind == "word":
            name = tokens[nameIdx].value

        found.append(FunctionDeclaration(
            name=name,
            line=tokens[start].line,
            docs=tuple(doc.value for doc in tokens[docStart:start]),
            hasBody=_hasBody(tokens, nameIdx),
        ))

    return _dropOverloadSignatures(found)



def descriptorFromTags(
    tags: Iterable[JsDocTag],
    functionName: str,
    *,
    sourcePath: Path | None = None,
    line: int = 0,
) -> PatchDescriptor | None:
    """
    Fold one documentation block's tags into a descriptor.

    Tags are last-write-wins except captured locals, which accumulate in order.
    Returns None when the block never sets a non-empty patch type.
    """
    target = ""
    pattern = ""
    position = ""
    patchType = ""
    matchIndent = True
    captured: list[str] = []
    payloadPrefix: str | None = None
    payloadSuffix: str | None = None

    for tag in tags:
        if tag.name == TAG_TARGET:
            target = tag.comment
        elif tag.name == TAG_PATTERN:
            pattern = tag.comment
        elif tag.name == TAG_POSITION:
            position = tag.comment
        elif tag.name == TAG_TYPE:
            patchType = tag.comment
        elif tag.name == TAG_MATCH_INDENT:
            matchIndent = tag.comment == "true"
        elif tag.name == TAG_CAPTURE_LOCAL:
            captured.append(tag.comment)
        elif tag.name == TAG_PAYLOAD_PREFIX:
            payloadPrefix = tag.comment
            # A quoted prefix keeps its significant whitespace; the quotes go.
            if payloadPrefix.startswith('"') and payloadPrefix.endswith('"'):
                payloadPrefix = payloadPrefix[1:-1]
        elif tag.name == TAG_PAYLOAD_SUFFIX:
            payloadSuffix = tag.comment

    if patchType == "":
        return None

    return PatchDescriptor(
        functionName=functionName,
        patchType=patchType,
        target=target,
        pattern=pattern,
        position=position,
        matchIndent=matchIndent,
        locals=tuple(captured),
        payloadPrefix=payloadPrefix,
        payloadSuffix=payloadSuffix,
        sourcePath=sourcePath,
        line=line,
    )



def scanSource(text: str, *, sourcePath: Path | None = None) -> list[PatchDescriptor]:
    """Extract descriptors from one module, in declaration order."""
    descriptors: list[PatchDescriptor] = []
    for decl in findFunctionDeclarations(text):
        for doc in decl.docs:
            tags = [tag for tag in parseJsDocTags(doc) if tag.name in PATCH_TAGS]
            if not tags:
                continue
            if decl.name is None:
                if any(tag.name == TAG_TYPE and tag.comment for tag in tags):
                    logger.warning(
                        "Skipping patch annotation on anonymous function at %s:%d",
                        sourcePath.as_posix() if sourcePath else "<source>", decl.line,
                    )
                continue

            descriptor = descriptorFromTags(tags, decl.name, sourcePath=sourcePath, line=decl.line)
            if descriptor is None:
                continue

            missing = [
                field for field, value in (
                    ("target", descriptor.target),
                    ("pattern", descriptor.pattern),
                    ("position", descriptor.position),
                ) if not value
            ]
            if missing:
                logger.warning(
                    "Patch '%s' at %s has empty %s; emitting as-is",
                    descriptor.functionName, descriptor.location, ", ".join(missing),
                )
            descriptors.append(descriptor)
    return descriptors



def collectSourceFiles(projectRoot: Path, include: str) -> list[Path]:
    """Files matched by the include glob, sorted by their path relative to the project root."""
    matched = [path for path in projectRoot.glob(include) if path.is_file()]
    return sorted(matched, key=lambda path: path.relative_to(projectRoot).as_posix())



def scanSources(projectRoot: Path | str, include: str = "src/**/*.ts") -> list[PatchDescriptor]:
    """
    Scan every module matched by `include` under `projectRoot`.

    Descriptors come out file-then-declaration order. Unreadable files are
    logged and skipped.
    """
    projectRoot = Path(projectRoot)
    setLogContext(step="scan")
    descriptors: list[PatchDescriptor] = []
    files = collectSourceFiles(projectRoot, include)

    for path in files:
        relPath = path.relative_to(projectRoot)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as err:
            logger.warning("Skipping unreadable source '%s': %s", relPath.as_posix(), err)
            continue
        found = scanSource(text, sourcePath=relPath)
        if found:
            logger.debug("Found %d patch(es) in '%s'", len(found), relPath.as_posix())
        descriptors.extend(found)

    logger.info("Scanned %d source file(s), found %d patch(es)", len(files), len(descriptors))
    return descriptors
