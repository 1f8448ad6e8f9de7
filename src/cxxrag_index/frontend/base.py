"""Narrow interface between chunk extraction and a language frontend."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

__all__ = [
    "Declaration",
    "DeclarationKind",
    "Frontend",
    "FrontendDiagnostic",
    "ParseError",
    "ParsedUnit",
    "SourceReader",
    "SourceSpan",
]


class ParseError(RuntimeError):
    """Raised when the frontend cannot produce a translation unit for a file."""

    def __init__(self, path: str, reason: str) -> None:
        """Store the failing ``path`` alongside the frontend's ``reason``."""
        message = f"Failed to parse {path}: {reason}"
        super().__init__(message)
        self.path = path
        self.reason = reason


class DeclarationKind(Enum):
    """Declaration categories the extractor distinguishes."""

    FUNCTION = "function"
    RECORD = "record"
    ENUM = "enum"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """A byte range of one source file with its inclusive line numbers."""

    path: str
    start_line: int
    end_line: int
    start_offset: int
    end_offset: int

    def until(self, offset: int) -> SourceSpan:
        """Return the span from this span's start up to ``offset`` (exclusive)."""
        return replace(self, end_offset=max(self.start_offset, offset))


@dataclass(frozen=True, slots=True)
class FrontendDiagnostic:
    """Diagnostic message reported while parsing a translation unit."""

    severity: str
    message: str
    location: str | None = None

    @property
    def is_error(self) -> bool:
        """Return ``True`` for error and fatal diagnostics."""
        return self.severity in {"error", "fatal"}

    def __str__(self) -> str:
        """Render the diagnostic the way compilers print them."""
        prefix = f"{self.location}: " if self.location else ""
        return f"{prefix}{self.severity}: {self.message}"


class Declaration(Protocol):
    """A node of the declaration tree produced by a frontend."""

    @property
    def kind(self) -> DeclarationKind: ...

    @property
    def name(self) -> str:
        """Unqualified name; empty for anonymous declarations."""
        ...

    @property
    def qualified_name(self) -> str: ...

    @property
    def is_definition(self) -> bool: ...

    @property
    def file(self) -> str | None:
        """File holding the declaration's name location."""
        ...

    @property
    def extent(self) -> SourceSpan | None: ...

    @property
    def body(self) -> SourceSpan | None:
        """Span of a function body written on this declaration."""
        ...

    @property
    def raw_comment(self) -> str | None: ...

    @property
    def children(self) -> Iterable[Declaration]: ...


class ParsedUnit(Protocol):
    """A parsed translation unit."""

    @property
    def root(self) -> Declaration: ...

    @property
    def diagnostics(self) -> Sequence[FrontendDiagnostic]: ...

    def read(self, span: SourceSpan) -> str:
        """Return the exact source text covered by ``span``."""
        ...


class Frontend(Protocol):
    """Parses one file under the given compiler arguments."""

    def parse(self, path: str, arguments: Sequence[str]) -> ParsedUnit:
        """Return the parsed unit for ``path`` or raise :class:`ParseError`."""
        ...


class SourceReader:
    """Read byte spans from source files, caching file contents."""

    def __init__(self) -> None:
        """Start with an empty content cache."""
        self._contents: dict[str, bytes] = {}

    def read(self, span: SourceSpan) -> str:
        """Return the text of ``span``; unreadable files yield an empty string."""
        data = self._contents.get(span.path)
        if data is None:
            try:
                data = Path(span.path).read_bytes()
            except OSError:
                data = b""
            self._contents[span.path] = data
        return data[span.start_offset : span.end_offset].decode("utf-8", errors="replace")
