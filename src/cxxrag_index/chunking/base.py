"""Shared chunk primitives."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

__all__ = ["ChunkKind", "CodeChunk"]


class ChunkKind(IntEnum):
    """Declaration categories emitted as chunks, with their output codes."""

    RECORD = 0
    ENUM = 1
    FUNCTION = 2


@dataclass(frozen=True, slots=True)
class CodeChunk:
    """One extracted declaration.

    Text fields hold already-escaped text and can be written between JSON
    string quotes as-is.
    """

    kind: ChunkKind
    name: str
    filepath: str
    start_line: int
    end_line: int
    signature: str
    comment: str
    body: str
