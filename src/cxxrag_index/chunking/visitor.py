"""Declaration tree traversal producing code chunks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cxxrag_index.frontend.base import DeclarationKind

from .base import ChunkKind, CodeChunk
from .sanitize import escape_text

if TYPE_CHECKING:
    from collections.abc import Iterator

    from cxxrag_index.frontend.base import Declaration, ParsedUnit

    from .boundary import ProjectBoundary

__all__ = ["ChunkExtractor"]

_CHUNK_KINDS: dict[DeclarationKind, ChunkKind] = {
    DeclarationKind.FUNCTION: ChunkKind.FUNCTION,
    DeclarationKind.RECORD: ChunkKind.RECORD,
    DeclarationKind.ENUM: ChunkKind.ENUM,
}

_SIGNATURE_TRAILER = " \t\n\r{"
_BODY_OPENERS = ("{", "try")


class ChunkExtractor:
    """Walk a parsed unit and turn selected declarations into chunks."""

    def __init__(self, boundary: ProjectBoundary) -> None:
        """Restrict extraction to files inside ``boundary``."""
        self.boundary = boundary

    def extract(self, unit: ParsedUnit) -> list[CodeChunk]:
        """Return chunks for every accepted declaration of ``unit`` in pre-order.

        A tag definition reached again through the variable, typedef or field
        declaring it yields a single chunk.
        """
        chunks: list[CodeChunk] = []
        seen: set[tuple[DeclarationKind, str, int, int]] = set()
        for declaration in _walk(unit.root):
            if not _is_candidate(declaration):
                continue
            extent = declaration.extent
            if extent is not None:
                key = (declaration.kind, extent.path, extent.start_offset, extent.end_offset)
                if key in seen:
                    continue
                seen.add(key)
            chunk = self._build(declaration, unit)
            if chunk is not None:
                chunks.append(chunk)
        return chunks

    def _build(self, declaration: Declaration, unit: ParsedUnit) -> CodeChunk | None:
        extent = declaration.extent
        if declaration.file is None or extent is None:
            return None
        resolved = self.boundary.resolve(declaration.file)
        if resolved is None:
            return None

        kind = _CHUNK_KINDS[declaration.kind]
        if kind is ChunkKind.FUNCTION:
            body_span = declaration.body
            if body_span is None:
                return None
            signature = unit.read(extent.until(body_span.start_offset)).rstrip(_SIGNATURE_TRAILER)
            body = unit.read(body_span)
            # Macro-generated definitions span the invocation text instead of a body.
            if not signature or not body.startswith(_BODY_OPENERS):
                return None
        else:
            signature = unit.read(extent)
            body = signature
            if "{" not in signature:
                return None

        return CodeChunk(
            kind=kind,
            name=escape_text(declaration.qualified_name),
            filepath=escape_text(str(resolved)),
            start_line=extent.start_line,
            end_line=max(extent.start_line, extent.end_line),
            signature=escape_text(signature),
            comment=escape_text(declaration.raw_comment or ""),
            body=escape_text(body),
        )


def _is_candidate(declaration: Declaration) -> bool:
    kind = declaration.kind
    if kind is DeclarationKind.FUNCTION:
        return declaration.body is not None
    if kind in (DeclarationKind.RECORD, DeclarationKind.ENUM):
        return declaration.is_definition and bool(declaration.name)
    return False


def _walk(root: Declaration) -> Iterator[Declaration]:
    """Yield ``root`` and all of its descendants in depth-first pre-order."""
    stack: list[Iterator[Declaration]] = [iter(root.children)]
    yield root
    while stack:
        node = next(stack[-1], None)
        if node is None:
            stack.pop()
            continue
        yield node
        stack.append(iter(node.children))
