"""Tests for project root membership checks."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from cxxrag_index.chunking import ProjectBoundary, canonicalize

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a project with a nested source file and a sibling directory."""
    root = tmp_path / "proj"
    (root / "src").mkdir(parents=True)
    (root / "src" / "a.cpp").write_text("int a;\n", encoding="utf-8")
    (tmp_path / "proj-other").mkdir()
    (tmp_path / "proj-other" / "b.cpp").write_text("int b;\n", encoding="utf-8")
    return root


def test_contains_descendants(project: Path) -> None:
    """Files below the root are accepted and resolved canonically."""
    boundary = ProjectBoundary(project)
    target = project / "src" / "a.cpp"
    assert boundary.contains(str(target))
    assert boundary.resolve(str(project / "src" / ".." / "src" / "a.cpp")) == target.resolve()


def test_rejects_siblings_sharing_a_prefix(project: Path) -> None:
    """A sibling directory whose name starts with the root name is outside."""
    boundary = ProjectBoundary(project)
    assert not boundary.contains(str(project.parent / "proj-other" / "b.cpp"))


def test_missing_files_are_outside(project: Path) -> None:
    """Paths that cannot be canonicalized are treated as outside the root."""
    boundary = ProjectBoundary(project)
    assert not boundary.contains(str(project / "src" / "missing.cpp"))
    assert canonicalize(project / "src" / "missing.cpp") is None


def test_unresolvable_root_admits_nothing(project: Path) -> None:
    """A root that does not exist never contains anything."""
    boundary = ProjectBoundary(project / "nope")
    assert boundary.root is None
    assert not boundary.contains(str(project / "src" / "a.cpp"))


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlinked_file_resolves_to_target(project: Path) -> None:
    """Symlinks pointing outside the root are judged by their target."""
    outside = project.parent / "proj-other" / "b.cpp"
    link = project / "src" / "link.cpp"
    try:
        link.symlink_to(outside)
    except OSError:
        pytest.skip("cannot create symlinks")
    boundary = ProjectBoundary(project)
    assert not boundary.contains(str(link))
