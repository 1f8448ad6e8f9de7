"""Process-wide, append-only chunk collection."""

from __future__ import annotations

from threading import Lock
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from cxxrag_index.chunking.base import CodeChunk

__all__ = ["ChunkAggregator"]


class ChunkAggregator:
    """Thread-safe collection that only ever grows.

    Buffers are appended whole, so chunks of one translation unit stay
    contiguous. Identical chunks from different translation units are kept.
    """

    def __init__(self) -> None:
        """Start with an empty collection."""
        self._chunks: list[CodeChunk] = []
        self._lock = Lock()

    def extend(self, chunks: Iterable[CodeChunk]) -> None:
        """Append one per-file buffer under the lock."""
        buffer = list(chunks)
        with self._lock:
            self._chunks.extend(buffer)

    def snapshot(self) -> list[CodeChunk]:
        """Return a copy of the collected chunks in merge order."""
        with self._lock:
            return list(self._chunks)

    def __len__(self) -> int:
        """Return the number of collected chunks."""
        with self._lock:
            return len(self._chunks)
