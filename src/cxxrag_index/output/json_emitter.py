"""Serialization of aggregated chunks as a JSON array."""

from __future__ import annotations

import pathlib
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cxxrag_index.chunking.base import CodeChunk

__all__ = ["render_chunk", "render_chunks", "write_chunks"]


def render_chunk(chunk: CodeChunk) -> str:
    """Render one chunk as a JSON object with a fixed key order.

    String fields are already escaped and are written between quotes verbatim.
    """
    lines = [
        "\t{",
        f'\t\t"kind": {int(chunk.kind)},',
        f'\t\t"name": "{chunk.name}",',
        f'\t\t"filepath": "{chunk.filepath}",',
        f'\t\t"start_line": {chunk.start_line},',
        f'\t\t"end_line": {chunk.end_line},',
        f'\t\t"signature": "{chunk.signature}",',
        f'\t\t"comment": "{chunk.comment}",',
        f'\t\t"body": "{chunk.body}"',
        "\t}",
    ]
    return "\n".join(lines)


def render_chunks(chunks: Sequence[CodeChunk]) -> str:
    """Render ``chunks`` as one JSON array."""
    if not chunks:
        return "[\n]"
    return "[\n" + ",\n".join(render_chunk(chunk) for chunk in chunks) + "\n]"


def write_chunks(chunks: Sequence[CodeChunk], output: pathlib.Path | str | None = None) -> str:
    """Write the rendered array in a single write to ``output`` or stdout.

    Returns the rendered payload.
    """
    payload = render_chunks(chunks)
    if output is None:
        _write_stream(sys.stdout, payload)
        return payload
    path = pathlib.Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload, encoding="utf-8")
    return payload


def _write_stream(stream: TextIO, payload: str) -> None:
    stream.write(payload)
    stream.flush()
