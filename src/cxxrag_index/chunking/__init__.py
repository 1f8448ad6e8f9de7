"""Chunk extraction from parsed declaration trees."""

from .base import ChunkKind, CodeChunk
from .boundary import ProjectBoundary, canonicalize
from .sanitize import escape_text
from .visitor import ChunkExtractor

__all__ = [
    "ChunkExtractor",
    "ChunkKind",
    "CodeChunk",
    "ProjectBoundary",
    "canonicalize",
    "escape_text",
]
