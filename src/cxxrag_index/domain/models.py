"""Pydantic settings models for cxxrag-index."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Schedule = Literal["static", "dynamic"]


class IndexerSettings(BaseModel):
    """Tunable behaviour of an indexing run."""

    workers: int | None = Field(default=None, ge=1)
    schedule: Schedule = "static"
    system_include: str | None = None
    clang_binaries: list[str] = Field(default_factory=list)
    extra_args: list[str] = Field(default_factory=list)
    libclang_path: str | None = None
