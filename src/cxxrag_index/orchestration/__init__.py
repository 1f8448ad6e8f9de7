"""Parallel orchestration of per-file chunk extraction."""

from .aggregator import ChunkAggregator
from .partition import partition_files
from .runner import FileResult, IndexResult, IndexRunner, ProgressCounter, Schedule

__all__ = [
    "ChunkAggregator",
    "FileResult",
    "IndexResult",
    "IndexRunner",
    "ProgressCounter",
    "Schedule",
    "partition_files",
]
