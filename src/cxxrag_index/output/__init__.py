"""Output writers for extracted chunks."""

from .json_emitter import render_chunk, render_chunks, write_chunks

__all__ = ["render_chunk", "render_chunks", "write_chunks"]
