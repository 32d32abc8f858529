"""Source import scanner for Zig packages.

Finds every external package a Zig source file pulls in, directly or
through local ``.zig`` files it imports::

    const std = @import("std");          // reserved, ignored
    const uuid = @import("uuid");        // external package
    const util = @import("util.zig");    // local file, scanned in turn

Scanning works on tokens rather than regular expressions so that
``@import`` inside comments, strings and character literals is never
mistaken for a directive.

Typical usage::

    scanner = ImportScanner()
    names = scanner.scan("src/main.zig")   # e.g. ("uuid", "clap")

The scanner keeps a visited set of resolved file paths and package names.
Anything already visited is skipped without being recounted, which is what
makes cyclic local imports terminate. Call :meth:`ImportScanner.reset`
before scanning an unrelated entry file.
"""

from __future__ import annotations

import enum
from pathlib import Path
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple, Union

from zigdeps.exceptions import ParseError
from zigdeps.utils.logger import get_logger
from zigdeps.utils.filesystem import exceeds_size_limit, file_size, safe_read_file
from zigdeps.constants import (
    IMPORT_BUILTIN,
    MAX_FILE_SIZE,
    PATH_SEPARATORS,
    RESERVED_IMPORTS,
    SOURCE_SUFFIX,
)

logger = get_logger("scanner")

__all__ = [
    "ImportDirective",
    "ImportKind",
    "ImportScanner",
    "classify_import",
    "find_import_directives",
]

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    "'": "'",
    '"': '"',
}


class ImportKind(enum.Enum):
    PACKAGE = "package"
    LOCAL_FILE = "local-file"
    IGNORED = "ignored"


@dataclass(frozen=True)
class ImportDirective:
    """One ``@import("...")`` occurrence with its decoded argument."""

    argument: str
    line: int
    column: int


def classify_import(argument: str) -> ImportKind:
    """Decide what an import argument refers to.

    Example::

        >>> classify_import("uuid")
        <ImportKind.PACKAGE: 'package'>
        >>> classify_import("../util.zig")
        <ImportKind.LOCAL_FILE: 'local-file'>
        >>> classify_import("std")
        <ImportKind.IGNORED: 'ignored'>
    """
    if argument.endswith(SOURCE_SUFFIX):
        return ImportKind.LOCAL_FILE
    if not argument or argument in RESERVED_IMPORTS:
        return ImportKind.IGNORED
    if any(sep in argument for sep in PATH_SEPARATORS) or "." in argument:
        # Some other kind of file (e.g. a ZON manifest); not a package.
        return ImportKind.IGNORED
    return ImportKind.PACKAGE


class _Cursor:
    """Position tracking over source text for error reporting."""

    __slots__ = ("text", "pos", "file_path")

    def __init__(self, text: str, file_path: Optional[str]) -> None:
        self.text = text
        self.pos = 0
        self.file_path = file_path

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def location(self, pos: Optional[int] = None) -> Tuple[int, int]:
        pos = self.pos if pos is None else pos
        line = self.text.count("\n", 0, pos) + 1
        column = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        return line, column

    def error(self, message: str, pos: Optional[int] = None) -> ParseError:
        line, column = self.location(pos)
        return ParseError(
            message,
            file_path=self.file_path,
            line_number=line,
            column=column,
        )

    def skip_line(self) -> None:
        end = self.text.find("\n", self.pos)
        self.pos = len(self.text) if end == -1 else end + 1

    def skip_trivia(self) -> None:
        """Skip whitespace and ``//`` comments."""
        while not self.at_end():
            ch = self.peek()
            if ch in " \t\r\n":
                self.pos += 1
            elif ch == "/" and self.peek(1) == "/":
                self.skip_line()
            else:
                return

    def skip_quoted(self, quote: str) -> None:
        """Skip a string or char literal that is not an import argument.

        Malformed literals elsewhere are the compiler's business; the
        literal simply ends at the closing quote or the end of the line.
        """
        self.pos += 1
        while not self.at_end():
            ch = self.peek()
            if ch == "\\":
                self.pos += 2
            elif ch == quote:
                self.pos += 1
                return
            elif ch == "\n":
                return
            else:
                self.pos += 1

    def read_identifier(self) -> str:
        start = self.pos
        while not self.at_end() and (self.peek().isalnum() or self.peek() == "_"):
            self.pos += 1
        return self.text[start : self.pos]

    def read_string_literal(self) -> str:
        """Read and decode a double-quoted string literal."""
        start = self.pos
        if self.peek() != '"':
            raise self.error("Expected string literal")
        self.pos += 1

        chars: List[str] = []
        while True:
            if self.at_end() or self.peek() == "\n":
                raise self.error("Unterminated string literal", start)
            ch = self.peek()
            if ch == '"':
                self.pos += 1
                return "".join(chars)
            if ch == "\\":
                chars.append(self._read_escape())
            else:
                chars.append(ch)
                self.pos += 1

    def _read_escape(self) -> str:
        escape_pos = self.pos
        kind = self.peek(1)
        if kind in _SIMPLE_ESCAPES:
            self.pos += 2
            return _SIMPLE_ESCAPES[kind]

        if kind == "x":
            digits = self.text[self.pos + 2 : self.pos + 4]
            if len(digits) != 2 or not set(digits) <= _HEX_DIGITS:
                raise self.error("Invalid \\x escape in string literal", escape_pos)
            self.pos += 4
            return chr(int(digits, 16))

        if kind == "u" and self.peek(2) == "{":
            close = self.text.find("}", self.pos + 3)
            digits = self.text[self.pos + 3 : close] if close != -1 else ""
            if not 1 <= len(digits) <= 6 or not set(digits) <= _HEX_DIGITS:
                raise self.error("Invalid \\u escape in string literal", escape_pos)
            codepoint = int(digits, 16)
            if codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
                raise self.error("Invalid unicode codepoint in string literal", escape_pos)
            self.pos = close + 1
            return chr(codepoint)

        raise self.error(f"Invalid escape sequence '\\{kind}' in string literal", escape_pos)


def find_import_directives(
    text: str,
    *,
    file_path: Optional[str] = None,
) -> List[ImportDirective]:
    """Tokenize Zig source and return every ``@import`` directive in order.

    Args:
        text: Source text.
        file_path: Used only in error messages.

    Raises:
        ParseError: An ``@import`` is missing its parentheses, or its
            argument is not a well-formed string literal.
    """
    cursor = _Cursor(text, file_path)
    directives: List[ImportDirective] = []
    builtin_name = IMPORT_BUILTIN.lstrip("@")

    while not cursor.at_end():
        ch = cursor.peek()

        if ch == "/" and cursor.peek(1) == "/":
            cursor.skip_line()
        elif ch == "\\" and cursor.peek(1) == "\\":
            # Multiline string literal line
            cursor.skip_line()
        elif ch in "\"'":
            cursor.skip_quoted(ch)
        elif ch == "@":
            start = cursor.pos
            cursor.pos += 1
            if cursor.peek() == '"':
                # @"quoted identifier"
                cursor.skip_quoted('"')
                continue
            if cursor.read_identifier() != builtin_name:
                continue

            line, column = cursor.location(start)
            cursor.skip_trivia()
            if cursor.peek() != "(":
                raise cursor.error(f"Expected '(' after {IMPORT_BUILTIN}")
            cursor.pos += 1
            cursor.skip_trivia()
            argument = cursor.read_string_literal()
            cursor.skip_trivia()
            if cursor.peek() == ",":
                cursor.pos += 1
                cursor.skip_trivia()
            if cursor.peek() != ")":
                raise cursor.error(f"Expected ')' to close {IMPORT_BUILTIN}")
            cursor.pos += 1

            directives.append(ImportDirective(argument, line, column))
        elif ch.isalpha() or ch == "_":
            cursor.read_identifier()
        else:
            cursor.pos += 1

    return directives


class ImportScanner:
    """Collects external package names reachable from an entry file.

    Attributes:
        max_file_size: Files larger than this many bytes are skipped with
            a warning and contribute no imports.
        visited: Resolved file paths and package names seen so far.
    """

    def __init__(self, *, max_file_size: Optional[int] = MAX_FILE_SIZE) -> None:
        self.max_file_size = max_file_size
        self.visited: Set[str] = set()

    def reset(self) -> None:
        """Forget everything visited; use before an unrelated entry file."""
        self.visited.clear()

    def scan(self, root_file: Union[str, Path]) -> Tuple[str, ...]:
        """Return the external package names transitively imported by a file.

        Names are returned in first-discovery order without duplicates.
        Names or files already in :attr:`visited` from an earlier call are
        not reported again.

        Raises:
            ParseError: A malformed import directive was found.
            FileOperationError: A referenced local file does not exist or
                cannot be read.
        """
        root = Path(root_file).resolve()
        found: List[str] = []

        if str(root) in self.visited:
            return ()
        self.visited.add(str(root))

        pending = [root]
        while pending:
            current = pending.pop()
            local_files = self._scan_file(current, found)
            # Reverse so files are processed in the order they are imported
            pending.extend(reversed(local_files))

        logger.debug("Scanned %s: %d package(s) %s", root, len(found), found)
        return tuple(found)

    def _scan_file(self, path: Path, found: List[str]) -> List[Path]:
        if exceeds_size_limit(path, self.max_file_size):
            logger.warning(
                "Skipping %s: file is %d bytes (limit %d), imports not scanned",
                path,
                file_size(path),
                self.max_file_size,
            )
            return []

        text = safe_read_file(path, max_size=None)
        local_files: List[Path] = []

        for directive in find_import_directives(text, file_path=str(path)):
            kind = classify_import(directive.argument)

            if kind is ImportKind.PACKAGE:
                if directive.argument not in self.visited:
                    self.visited.add(directive.argument)
                    found.append(directive.argument)
            elif kind is ImportKind.LOCAL_FILE:
                target = (path.parent / directive.argument).resolve()
                if str(target) not in self.visited:
                    self.visited.add(str(target))
                    local_files.append(target)
            else:
                logger.debug(
                    "Ignoring import %r at %s:%d",
                    directive.argument,
                    path,
                    directive.line,
                )

        return local_files
