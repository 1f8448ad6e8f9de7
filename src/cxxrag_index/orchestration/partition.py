"""Static partitioning of the file list across workers."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = ["partition_files"]

T = TypeVar("T")


def partition_files(files: Sequence[T], workers: int) -> list[list[T]]:
    """Split ``files`` into ``workers`` contiguous, order-preserving slices.

    Every slice holds ``len(files) // workers`` items, and the first
    ``len(files) % workers`` slices hold one more. Slices may be empty.
    """
    if workers < 1:
        message = "workers must be at least 1"
        raise ValueError(message)
    base, extra = divmod(len(files), workers)
    slices: list[list[T]] = []
    offset = 0
    for index in range(workers):
        size = base + 1 if index < extra else base
        slices.append(list(files[offset : offset + size]))
        offset += size
    return slices
