"""Just enough Dart lexing to patch a class body safely.

String literals (including raw, multi-line and interpolated ones) and
comments are masked out so that braces and keywords inside them are never
mistaken for code. Comments are kept aside with their offsets so a marker
comment can be found structurally.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import ServiceFileError

_CLASS_DECLARATION = re.compile(r"\bclass\s+([A-Za-z_$][A-Za-z0-9_$]*)")


@dataclass(frozen=True)
class Comment:
    start: int
    end: int
    text: str


@dataclass(frozen=True)
class ClassBody:
    name: str
    open_brace: int
    close_brace: int


class DartSource:
    """A Dart compilation unit with strings and comments masked."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.comments: list[Comment] = []
        self._masked = list(text)
        self._scan_code(0, nested=False)
        self.masked = "".join(self._masked)

    def _mask(self, start: int, end: int) -> None:
        for i in range(start, end):
            if self._masked[i] != "\n":
                self._masked[i] = " "

    def _scan_code(self, i: int, nested: bool) -> int:
        """Scan code from i; when nested, stop after the '}' closing an interpolation."""
        text = self.text
        depth = 0
        while i < len(text):
            char = text[i]
            if text.startswith("//", i):
                end = text.find("\n", i)
                end = len(text) if end == -1 else end
                self.comments.append(Comment(i, end, text[i:end]))
                self._mask(i, end)
                i = end
            elif text.startswith("/*", i):
                end = self._block_comment_end(i)
                self.comments.append(Comment(i, end, text[i:end]))
                self._mask(i, end)
                i = end
            elif char in "rR" and text[i + 1:i + 2] in ("'", '"') and not self._is_word_char(i - 1):
                end = self._string_end(i + 1, raw=True)
                self._mask(i, end)
                i = end
            elif char in ("'", '"'):
                end = self._string_end(i, raw=False)
                self._mask(i, end)
                i = end
            elif char == "{":
                depth += 1
                i += 1
            elif char == "}":
                if nested and depth == 0:
                    return i + 1
                depth -= 1
                i += 1
            else:
                i += 1
        return i

    def _is_word_char(self, i: int) -> bool:
        return i >= 0 and (self.text[i].isalnum() or self.text[i] in "_$")

    def _block_comment_end(self, i: int) -> int:
        # Dart block comments nest
        text = self.text
        depth = 0
        while i < len(text):
            if text.startswith("/*", i):
                depth += 1
                i += 2
            elif text.startswith("*/", i):
                depth -= 1
                i += 2
                if depth == 0:
                    return i
            else:
                i += 1
        return len(text)

    def _string_end(self, i: int, raw: bool) -> int:
        text = self.text
        quote = text[i]
        delimiter = quote * 3 if text.startswith(quote * 3, i) else quote
        j = i + len(delimiter)
        while j < len(text):
            if not raw and text[j] == "\\":
                j += 2
            elif text.startswith(delimiter, j):
                return j + len(delimiter)
            elif not raw and text.startswith("${", j):
                j = self._scan_code(j + 2, nested=True)
            elif len(delimiter) == 1 and text[j] == "\n":
                return j
            else:
                j += 1
        return len(text)

    def matching_brace(self, open_brace: int) -> int:
        depth = 0
        for i in range(open_brace, len(self.masked)):
            char = self.masked[i]
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return i
        raise ServiceFileError(f"Unbalanced braces after offset {open_brace}")

    def classes(self) -> list[ClassBody]:
        """Top-level class declarations in source order."""
        found = []
        position = 0
        while True:
            match = _CLASS_DECLARATION.search(self.masked, position)
            if match is None:
                return found
            open_brace = self.masked.find("{", match.end())
            if open_brace == -1:
                return found
            close_brace = self.matching_brace(open_brace)
            found.append(ClassBody(match.group(1), open_brace, close_brace))
            position = close_brace + 1

    def find_class(self, name: str | None = None) -> ClassBody:
        """Return the class called name, or the last class when name is absent."""
        classes = self.classes()
        if not classes:
            raise ServiceFileError("Could not find class end")
        if name is not None:
            for body in classes:
                if body.name == name:
                    return body
        return classes[-1]

    def find_comment(self, marker: str, start: int = 0, end: int | None = None) -> Comment | None:
        """First comment inside [start, end) whose text is the marker."""
        end = len(self.text) if end is None else end
        for comment in self.comments:
            if start <= comment.start < end and comment.text.strip() == marker:
                return comment
        return None
