"""libclang-backed implementation of the frontend interface."""

from __future__ import annotations

import os
import threading
from typing import TYPE_CHECKING

from clang.cindex import Config, Cursor, CursorKind, Index, TokenKind, TranslationUnit, TranslationUnitLoadError

from .base import DeclarationKind, FrontendDiagnostic, ParseError, SourceReader, SourceSpan
from .compile_db import working_directory

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from clang.cindex import SourceLocation

__all__ = ["ClangDeclaration", "ClangFrontend", "ClangParsedUnit", "configure_library"]

FUNCTION_KINDS = frozenset(
    {
        CursorKind.FUNCTION_DECL,
        CursorKind.CXX_METHOD,
        CursorKind.CONSTRUCTOR,
        CursorKind.DESTRUCTOR,
        CursorKind.CONVERSION_FUNCTION,
        CursorKind.FUNCTION_TEMPLATE,
    },
)
RECORD_KINDS = frozenset(
    {
        CursorKind.STRUCT_DECL,
        CursorKind.CLASS_DECL,
        CursorKind.UNION_DECL,
        CursorKind.CLASS_TEMPLATE,
        CursorKind.CLASS_TEMPLATE_PARTIAL_SPECIALIZATION,
    },
)
BODY_KINDS = frozenset({CursorKind.COMPOUND_STMT, CursorKind.CXX_TRY_STMT})

# Scopes that do not contribute a component to qualified names.
_TRANSPARENT_SCOPES = frozenset({CursorKind.LINKAGE_SPEC, CursorKind.UNEXPOSED_DECL})

_SEVERITIES = {0: "ignored", 1: "note", 2: "warning", 3: "error", 4: "fatal"}

# Whitespace allowed between a documentation comment and the declaration it precedes.
_COMMENT_GAP_BYTES = 256


def configure_library(library_file: str | None) -> None:
    """Point the bindings at ``library_file`` unless libclang is already loaded."""
    if library_file and not Config.loaded:
        Config.set_library_file(library_file)


def _declaration_kind(kind: CursorKind) -> DeclarationKind:
    if kind in FUNCTION_KINDS:
        return DeclarationKind.FUNCTION
    if kind in RECORD_KINDS:
        return DeclarationKind.RECORD
    if kind == CursorKind.ENUM_DECL:
        return DeclarationKind.ENUM
    return DeclarationKind.OTHER


def _is_unnamed(spelling: str) -> bool:
    # Anonymous tags are spelled "(unnamed struct at f.c:1:1)", or "enum (unnamed at f.c:1:1)" in C.
    return not spelling or "(unnamed" in spelling or "(anonymous" in spelling


def _names_itself(cursor: Cursor, spelling: str) -> bool:
    """Return ``True`` when ``spelling`` is written before the tag's opening brace.

    ``typedef struct { ... } T;`` reports the typedef name for the unnamed record.
    """
    for token in cursor.get_tokens():
        if token.spelling == "{":
            return False
        if token.kind == TokenKind.IDENTIFIER and token.spelling == spelling:
            return True
    return False


def _scope_name(cursor: Cursor) -> str:
    spelling = cursor.spelling or ""
    if spelling:
        return spelling
    if cursor.kind == CursorKind.NAMESPACE:
        return "(anonymous namespace)"
    return "(anonymous)"


class ClangDeclaration:
    """Adapts a libclang cursor to the :class:`~cxxrag_index.frontend.base.Declaration` protocol."""

    __slots__ = ("_child_cursors", "_cursor", "_directory", "_kind", "_reader")

    def __init__(self, cursor: Cursor, directory: str, reader: SourceReader) -> None:
        """Wrap ``cursor``; relative file names resolve against ``directory``."""
        self._cursor = cursor
        self._directory = directory
        self._reader = reader
        self._kind = _declaration_kind(cursor.kind)
        self._child_cursors: list[Cursor] | None = None

    @property
    def kind(self) -> DeclarationKind:
        return self._kind

    @property
    def name(self) -> str:
        spelling = self._cursor.spelling or ""
        if self._kind in (DeclarationKind.RECORD, DeclarationKind.ENUM):
            if _is_unnamed(spelling):
                return ""
            if self._kind is DeclarationKind.RECORD and self._cursor.is_anonymous():
                return ""
            if self._cursor.is_definition() and not _names_itself(self._cursor, spelling):
                return ""
        return spelling

    @property
    def qualified_name(self) -> str:
        parts = [_scope_name(self._cursor)]
        parent = self._cursor.semantic_parent
        while parent is not None and parent.kind != CursorKind.TRANSLATION_UNIT:
            if parent.kind not in _TRANSPARENT_SCOPES:
                parts.append(_scope_name(parent))
            parent = parent.semantic_parent
        return "::".join(reversed(parts))

    @property
    def is_definition(self) -> bool:
        return bool(self._cursor.is_definition())

    @property
    def file(self) -> str | None:
        return self._file_name(self._cursor.location)

    @property
    def extent(self) -> SourceSpan | None:
        return self._span(self._cursor)

    @property
    def body(self) -> SourceSpan | None:
        if self._kind is not DeclarationKind.FUNCTION:
            return None
        for child in reversed(self._children()):
            if child.kind in BODY_KINDS:
                return self._span(child)
        return None

    @property
    def raw_comment(self) -> str | None:
        # libclang falls back to comments on other redeclarations; keep only one written here.
        comment = self._cursor.raw_comment
        extent = self.extent
        if not comment or extent is None:
            return None
        window = len(comment.encode("utf-8")) + _COMMENT_GAP_BYTES
        preceding = self._reader.read(
            SourceSpan(
                path=extent.path,
                start_line=extent.start_line,
                end_line=extent.start_line,
                start_offset=max(0, extent.start_offset - window),
                end_offset=extent.start_offset,
            ),
        )
        if preceding.rstrip().endswith(comment):
            return comment
        return None

    @property
    def children(self) -> Iterator[ClangDeclaration]:
        for child in self._children():
            yield ClangDeclaration(child, self._directory, self._reader)

    def _children(self) -> list[Cursor]:
        if self._child_cursors is None:
            self._child_cursors = list(self._cursor.get_children())
        return self._child_cursors

    def _file_name(self, location: SourceLocation) -> str | None:
        source_file = location.file
        if source_file is None:
            return None
        name = str(source_file.name)
        if os.path.isabs(name):
            return name
        return os.path.normpath(os.path.join(self._directory, name))

    def _span(self, cursor: Cursor) -> SourceSpan | None:
        extent = cursor.extent
        start_file = self._file_name(extent.start)
        end_file = self._file_name(extent.end)
        if start_file is None or start_file != end_file:
            return None
        return SourceSpan(
            path=start_file,
            start_line=extent.start.line,
            end_line=extent.end.line,
            start_offset=extent.start.offset,
            end_offset=extent.end.offset,
        )


class ClangParsedUnit:
    """A translation unit produced by libclang."""

    def __init__(self, translation_unit: TranslationUnit, directory: str) -> None:
        """Wrap ``translation_unit`` parsed relative to ``directory``."""
        self._translation_unit = translation_unit
        self._directory = directory
        self._reader = SourceReader()

    @property
    def root(self) -> ClangDeclaration:
        return ClangDeclaration(self._translation_unit.cursor, self._directory, self._reader)

    @property
    def diagnostics(self) -> list[FrontendDiagnostic]:
        return [
            FrontendDiagnostic(
                severity=_SEVERITIES.get(diagnostic.severity, "unknown"),
                message=diagnostic.spelling,
                location=_format_location(diagnostic.location),
            )
            for diagnostic in self._translation_unit.diagnostics
        ]

    def read(self, span: SourceSpan) -> str:
        return self._reader.read(span)


class ClangFrontend:
    """Parse translation units with libclang, one index per worker thread."""

    def __init__(self, *, options: int = 0) -> None:
        """Store parse ``options`` passed to :meth:`clang.cindex.Index.parse`."""
        self.options = options
        self._local = threading.local()

    def parse(self, path: str, arguments: Sequence[str]) -> ClangParsedUnit:
        """Parse ``path`` under ``arguments`` or raise :class:`ParseError`."""
        directory = working_directory(arguments) or os.getcwd()
        try:
            translation_unit = self._index().parse(path, args=list(arguments), options=self.options)
        except TranslationUnitLoadError as exc:
            raise ParseError(path, str(exc)) from exc
        return ClangParsedUnit(translation_unit, directory)

    def _index(self) -> Index:
        index: Index | None = getattr(self._local, "index", None)
        if index is None:
            index = Index.create()
            self._local.index = index
        return index


def _format_location(location: SourceLocation) -> str | None:
    if location.file is None:
        return None
    return f"{location.file.name}:{location.line}:{location.column}"
