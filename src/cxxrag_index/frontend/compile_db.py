"""Build database loading and compile argument adjustment."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import TYPE_CHECKING

from clang.cindex import CompilationDatabase, CompilationDatabaseError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

__all__ = [
    "BuildDatabase",
    "CompileJob",
    "DatabaseLoadError",
    "adjust_arguments",
    "compile_job",
    "load_build_database",
    "working_directory",
]

WORKING_DIRECTORY_FLAG = "-working-directory"

_DROPPED_FLAGS = frozenset({"-c", "-MD", "-MMD", "-MP", "--"})
_DROPPED_FLAGS_WITH_VALUE = frozenset({"-o", "-MF", "-MT", "-MQ"})


class DatabaseLoadError(RuntimeError):
    """Raised when the build database is missing or cannot be parsed."""


@dataclass(frozen=True, slots=True)
class CompileJob:
    """A single translation unit and the frontend arguments used to parse it."""

    filename: str
    directory: str
    arguments: tuple[str, ...]


@dataclass(slots=True)
class BuildDatabase:
    """Compile jobs grouped by the source file they compile."""

    source: Path
    jobs: list[CompileJob] = field(default_factory=list)

    @property
    def files(self) -> list[str]:
        """Return unique file names in database order."""
        return list(dict.fromkeys(job.filename for job in self.jobs))

    def jobs_for(self, filename: str) -> list[CompileJob]:
        """Return every compile job recorded for ``filename``."""
        return [job for job in self.jobs if job.filename == filename]

    def __len__(self) -> int:  # pragma: no cover - trivial
        """Return the number of compile jobs."""
        return len(self.jobs)


def load_build_database(directory: str | Path) -> BuildDatabase:
    """Load ``compile_commands.json`` from ``directory`` into a :class:`BuildDatabase`."""
    path = Path(directory)
    if not path.is_dir():
        message = f"Build database directory not found: {path}"
        raise DatabaseLoadError(message)
    try:
        database = CompilationDatabase.fromDirectory(str(path))
    except CompilationDatabaseError as exc:
        message = f"Failed to load compilation database from {path}: {exc}"
        raise DatabaseLoadError(message) from exc
    commands = database.getAllCompileCommands()
    jobs = [
        compile_job(command.filename, command.directory, list(command.arguments))
        for command in (commands or [])
    ]
    return BuildDatabase(source=path, jobs=jobs)


def compile_job(filename: str, directory: str, command_line: Sequence[str]) -> CompileJob:
    """Build a :class:`CompileJob` from one build database entry."""
    absolute = _absolute(filename, directory)
    return CompileJob(
        filename=absolute,
        directory=directory,
        arguments=adjust_arguments(command_line, filename=absolute, directory=directory),
    )


def adjust_arguments(command_line: Sequence[str], *, filename: str, directory: str) -> tuple[str, ...]:
    """Turn a recorded compiler command line into frontend arguments.

    The compiler executable, the source operand, output and dependency-file
    flags are dropped, and the entry's directory becomes the working directory.
    """
    adjusted: list[str] = [WORKING_DIRECTORY_FLAG, directory]
    target = _absolute(filename, directory)
    arguments = iter(command_line[1:])
    for argument in arguments:
        if argument in _DROPPED_FLAGS:
            continue
        if argument in _DROPPED_FLAGS_WITH_VALUE:
            next(arguments, None)
            continue
        if not argument.startswith("-") and _absolute(argument, directory) == target:
            continue
        adjusted.append(argument)
    return tuple(adjusted)


def working_directory(arguments: Iterable[str]) -> str | None:
    """Return the value passed with ``-working-directory`` in ``arguments``."""
    iterator = iter(arguments)
    for argument in iterator:
        if argument == WORKING_DIRECTORY_FLAG:
            return next(iterator, None)
        if argument.startswith(f"{WORKING_DIRECTORY_FLAG}="):
            return argument.split("=", 1)[1]
    return None


def _absolute(filename: str, directory: str) -> str:
    return os.path.normpath(os.path.join(directory, filename))
