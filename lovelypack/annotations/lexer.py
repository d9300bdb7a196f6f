# lovelypack/annotations/lexer.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Literal

__all__ = ["TokenKind", "Token", "tokenize"]



TokenKind = Literal["word", "number", "string", "template", "regex", "punct", "jsdoc"]

# After these punctuators a "/" starts a regex literal, not a division.
_REGEX_AFTER_PUNCT = frozenset("(,=:[!&|?{};+-*%<>~^")
_REGEX_AFTER_WORDS = frozenset({
    "return", "typeof", "instanceof", "case", "do", "else", "in", "of",
    "new", "delete", "void", "throw", "yield", "await",
})



@dataclass(frozen=True, slots=True)
class Token:
    kind: TokenKind
    value: str
    depth: int   # Brace depth at which the token starts
    line: int    # 1-based line of the first character



def _isIdentStart(ch: str) -> bool:
    return ch.isalpha() or ch in "_$"

def _isIdentPart(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"



class _Lexer:
    """
    Minimal TypeScript tokenizer. It understands just enough syntax (strings,
    template literals with `${}` nesting, comments, regex literals and braces)
    to tell which tokens sit at module top level and which `/** */` blocks
    precede them. Plain comments are dropped; JSDoc blocks become tokens.
    """
    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.depth = 0
        self.tokens: list[Token] = []
        # Brace depth at which each open `${` of a template literal started
        self._templateStack: list[int] = []

    # ----- helpers -----

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        return self.text[idx] if idx < len(self.text) else ""

    def _advanceTo(self, end: int) -> str:
        chunk = self.text[self.pos:end]
        self.line += chunk.count("\n")
        self.pos = end
        return chunk

    def _emit(self, kind: TokenKind, value: str, line: int, depth: int | None = None) -> None:
        self.tokens.append(Token(kind, value, self.depth if depth is None else depth, line))

    def _lastSignificant(self) -> Token | None:
        for token in reversed(self.tokens):
            if token.kind != "jsdoc":
                return token
        return None

    def _regexAllowed(self) -> bool:
        prev = self._lastSignificant()
        if prev is None:
            return True
        if prev.kind == "punct":
            return prev.value in _REGEX_AFTER_PUNCT
        if prev.kind == "word":
            return prev.value in _REGEX_AFTER_WORDS
        return False

    # ----- scanners -----

    def _scanBlockComment(self) -> None:
        line = self.line
        end = self.text.find("*/", self.pos + 2)
        end = len(self.text) if end < 0 else end + 2
        chunk = self._advanceTo(end)
        # "/**/" is an empty plain comment, not JSDoc
        if chunk.startswith("/**") and chunk != "/**/":
            self._emit("jsdoc", chunk, line)

    def _scanString(self, quote: str) -> None:
        line = self.line
        idx = self.pos + 1
        while idx < len(self.text):
            ch = self.text[idx]
            if ch == "\\":
                idx += 2
                continue
            if ch == quote or ch == "\n":
                idx += 1
                break
            idx += 1
        self._emit("string", self._advanceTo(min(idx, len(self.text))), line)

    def _scanTemplateChunk(self) -> None:
        """Scan template text starting at self.pos until closing backtick or `${`."""
        line = self.line
        idx = self.pos
        while idx < len(self.text):
            ch = self.text[idx]
            if ch == "\\":
                idx += 2
                continue
            if ch == "`":
                self._emit("template", self._advanceTo(idx + 1), line)
                return
            if ch == "$" and idx + 1 < len(self.text) and self.text[idx + 1] == "{":
                self._emit("template", self._advanceTo(idx + 2), line)
                self._templateStack.append(self.depth)
                self.depth += 1
                return
            idx += 1
        self._emit("template", self._advanceTo(len(self.text)), line)

    def _scanRegex(self) -> bool:
        """Try to scan a regex literal. Returns False if the line ends first."""
        idx = self.pos + 1
        inClass = False
        while idx < len(self.text):
            ch = self.text[idx]
            if ch == "\n":
                return False
            if ch == "\\":
                idx += 2
                continue
            if ch == "[":
                inClass = True
            elif ch == "]":
                inClass = False
            elif ch == "/" and not inClass:
                idx += 1
                while idx < len(self.text) and _isIdentPart(self.text[idx]):
                    idx += 1
                line = self.line
                self._emit("regex", self._advanceTo(idx), line)
                return True
            idx += 1
        return False

    def run(self) -> list[Token]:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]

            if ch == "\n":
                self.line += 1
                self.pos += 1
                continue
            if ch.isspace():
                self.pos += 1
                continue

            if ch == "/" and self._peek(1) == "/":
                end = text.find("\n", self.pos)
                self.pos = len(text) if end < 0 else end
                continue
            if ch == "/" and self._peek(1) == "*":
                self._scanBlockComment()
                continue
            if ch == "/" and self._regexAllowed() and self._scanRegex():
                continue

            if ch in "'\"":
                self._scanString(ch)
                continue
            if ch == "`":
                self.pos += 1
                self._scanTemplateChunk()
                continue

            if ch == "{":
                self._emit("punct", ch, self.line)
                self.depth += 1
                self.pos += 1
                continue
            if ch == "}":
                self.pos += 1
                if self._templateStack and self._templateStack[-1] == self.depth - 1:
                    # End of a `${...}` substitution, resume the template literal
                    self._templateStack.pop()
                    self.depth -= 1
                    self._scanTemplateChunk()
                    continue
                self.depth = max(0, self.depth - 1)
                self._emit("punct", ch, self.line)
                continue

            if _isIdentStart(ch):
                end = self.pos + 1
                while end < len(text) and _isIdentPart(text[end]):
                    end += 1
                line = self.line
                self._emit("word", self._advanceTo(end), line)
                continue

            if ch.isdigit():
                end = self.pos + 1
                while end < len(text) and (_isIdentPart(text[end]) or text[end] == "."):
                    end += 1
                line = self.line
                self._emit("number", self._advanceTo(end), line)
                continue

            self._emit("punct", ch, self.line)
            self.pos += 1

        return self.tokens



def tokenize(text: str) -> list[Token]:
    """Tokenize TypeScript source into a flat token list annotated with brace depth."""
    return _Lexer(text).run()
