"""Project root membership checks for declaration files."""

from __future__ import annotations

from pathlib import Path
from threading import Lock

__all__ = ["ProjectBoundary", "canonicalize"]


def canonicalize(path: str | Path) -> Path | None:
    """Return the canonical form of ``path`` or ``None`` when it cannot be resolved."""
    try:
        return Path(path).resolve(strict=True)
    except (OSError, RuntimeError):
        return None


class ProjectBoundary:
    """Decide whether files lie under a canonicalized project root."""

    def __init__(self, root: str | Path) -> None:
        """Canonicalize ``root`` once; an unresolvable root admits nothing."""
        self._root = canonicalize(root)
        self._verdicts: dict[str, Path | None] = {}
        self._lock = Lock()

    @property
    def root(self) -> Path | None:
        """Return the canonical project root, if it could be resolved."""
        return self._root

    def resolve(self, path: str) -> Path | None:
        """Return the canonical path of ``path`` when it lies under the root."""
        with self._lock:
            if path in self._verdicts:
                return self._verdicts[path]
        verdict = self._check(path)
        with self._lock:
            self._verdicts[path] = verdict
        return verdict

    def contains(self, path: str) -> bool:
        """Return ``True`` when ``path`` canonicalizes to a descendant of the root."""
        return self.resolve(path) is not None

    def _check(self, path: str) -> Path | None:
        if self._root is None:
            return None
        candidate = canonicalize(path)
        if candidate is None:
            return None
        if candidate == self._root or self._root in candidate.parents:
            return candidate
        return None
