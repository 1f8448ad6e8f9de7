"""Discovery of the compiler resource headers injected into every parse."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path
import shutil
from typing import TYPE_CHECKING
import warnings

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from rich.console import Console

__all__ = [
    "ResourceProbe",
    "ToolingWarning",
    "default_clang_binaries",
    "discover_system_include",
    "probe_resource_dir",
]

PROBE_TIMEOUT_SECONDS = 5.0
"""Maximum time to wait for ``-print-resource-dir`` calls."""


class ToolingWarning(UserWarning):
    """Warning emitted when no clang resource directory can be located."""


@dataclass(frozen=True, slots=True)
class ResourceProbe:
    """Outcome of asking one clang executable for its resource directory."""

    name: str
    resource_dir: Path | None = None
    error: str | None = None

    @property
    def include_dir(self) -> Path | None:
        """Return the builtin header directory under the resource directory."""
        if self.resource_dir is None:
            return None
        return self.resource_dir / "include"

    @property
    def message(self) -> str:
        """Human readable status string."""
        if self.resource_dir is not None:
            return f"{self.name} resource directory: {self.resource_dir}"
        reason = self.error or "not found on PATH"
        return f"{self.name} unavailable: {reason}"


def default_clang_binaries() -> list[str]:
    """Return clang executables to probe, preferring the libclang major version."""
    try:
        major = metadata.version("libclang").split(".", 1)[0]
    except metadata.PackageNotFoundError:
        return ["clang"]
    return [f"clang-{major}", "clang"]


def probe_resource_dir(name: str) -> ResourceProbe:
    """Ask ``name`` for its resource directory via ``-print-resource-dir``."""
    resolved = shutil.which(name)
    if not resolved:
        return ResourceProbe(name=name, error="not found on PATH")

    try:
        returncode, stdout, stderr = _run_probe_command((resolved, "-print-resource-dir"))
    except TimeoutError as exc:
        return ResourceProbe(name=name, error=str(exc))
    except OSError as exc:  # pragma: no cover - defensive
        return ResourceProbe(name=name, error=str(exc))

    if returncode != 0:
        return ResourceProbe(name=name, error=stderr.strip() or stdout.strip())

    output = stdout.strip()
    if not output:
        return ResourceProbe(name=name, error="empty resource directory")
    return ResourceProbe(name=name, resource_dir=Path(output.splitlines()[0]))


async def _async_probe(args: Sequence[str]) -> tuple[int, str, str]:
    process = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=PROBE_TIMEOUT_SECONDS)
    except TimeoutError as exc:
        process.kill()
        await process.communicate()
        message = f"resource directory probe timed out after {PROBE_TIMEOUT_SECONDS:.1f}s"
        raise TimeoutError(message) from exc
    returncode = process.returncode if process.returncode is not None else -1
    return (
        returncode,
        stdout.decode("utf-8", errors="replace"),
        stderr.decode("utf-8", errors="replace"),
    )


def _run_probe_command(args: Sequence[str]) -> tuple[int, str, str]:
    """Execute the probe command capturing decoded output."""
    try:
        return asyncio.run(_async_probe(args))
    except RuntimeError:
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(_async_probe(args))
        finally:
            loop.close()


def discover_system_include(
    names: Iterable[str] | None = None,
    *,
    console: Console | None = None,
) -> Path | None:
    """Return the first usable clang builtin include directory among ``names``.

    Emits a :class:`ToolingWarning` (mirrored to ``console``) when none is found.
    """
    candidates = list(names) if names else default_clang_binaries()
    probes: list[ResourceProbe] = []
    for name in candidates:
        probe = probe_resource_dir(name)
        include_dir = probe.include_dir
        if include_dir is not None and include_dir.is_dir():
            return include_dir
        probes.append(probe)

    message = (
        "No clang resource directory found among "
        + ", ".join(candidates)
        + "; builtin headers such as <stddef.h> may fail to resolve."
    )
    warnings.warn(message, ToolingWarning, stacklevel=2)
    if console is not None:
        for probe in probes:
            console.print(f"[yellow]{probe.message}[/yellow]", highlight=False)
    return None
