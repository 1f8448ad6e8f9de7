"""Typer CLI entry point for cxxrag-index."""

from __future__ import annotations

from enum import Enum
import os
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
import typer

from .chunking import ChunkExtractor, ProjectBoundary
from .config import LoadError, load_settings
from .frontend import ClangFrontend, DatabaseLoadError, configure_library, load_build_database
from .orchestration import IndexRunner
from .output import write_chunks
from .tools import discover_system_include

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from collections.abc import Callable

    from .domain.models import IndexerSettings
    from .frontend import BuildDatabase, Frontend

app = typer.Typer(help="Extract function, record and enum chunks from a C/C++ project as JSON.")
console = Console(stderr=True)


class ScheduleChoice(str, Enum):
    """Supported work distribution strategies."""

    STATIC = "static"
    DYNAMIC = "dynamic"


PROJECT_ROOT_ARGUMENT = typer.Argument(
    ...,
    exists=True,
    file_okay=False,
    readable=True,
    help="Project root; only declarations from files under it are emitted.",
)
BUILD_DIR_ARGUMENT = typer.Argument(
    ...,
    help="Directory containing compile_commands.json.",
)
OUTPUT_OPTION = typer.Option(
    None,
    "--output",
    "-o",
    dir_okay=False,
    help="Write the JSON array to this file instead of stdout.",
)
JOBS_OPTION = typer.Option(
    None,
    "--jobs",
    "-j",
    min=1,
    help="Number of parallel workers (defaults to the CPU count).",
)
SCHEDULE_OPTION = typer.Option(
    None,
    "--schedule",
    case_sensitive=False,
    help="Work distribution: 'static' slices per worker or 'dynamic' per-file jobs.",
)
SYSTEM_INCLUDE_OPTION = typer.Option(
    None,
    "--system-include",
    help="Builtin header directory passed as -isystem (skips clang discovery).",
)
CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
    resolve_path=True,
    help="Optional YAML settings file.",
)
ENV_FILE_OPTION = typer.Option(
    None,
    "--env-file",
    "-e",
    resolve_path=True,
    file_okay=True,
    dir_okay=False,
    help="Optional .env file(s) used to resolve placeholders in the settings file.",
)


def _default_frontend_factory(_settings: IndexerSettings) -> Frontend:
    return ClangFrontend()


FRONTEND_FACTORY: Callable[[IndexerSettings], Frontend] = _default_frontend_factory
DATABASE_LOADER: Callable[[Path], BuildDatabase] = load_build_database
INCLUDE_DISCOVERY: Callable[..., Path | None] = discover_system_include


def _log(message: str) -> None:
    console.print(message, markup=False, highlight=False, soft_wrap=True)


def _load_settings(
    config: Path | None,
    env_files: list[Path] | None,
    updates: dict[str, object],
) -> IndexerSettings:
    try:
        return load_settings(config, env_files=env_files, overrides=os.environ, updates=updates)
    except LoadError as exc:  # pragma: no cover - propagated as CLI error
        raise typer.BadParameter(str(exc)) from exc


def _resolve_system_include(settings: IndexerSettings) -> str | None:
    if settings.system_include:
        return settings.system_include
    include_dir = INCLUDE_DISCOVERY(settings.clang_binaries or None, console=console)
    return str(include_dir) if include_dir is not None else None


@app.command()
def index(
    project_root: Path = PROJECT_ROOT_ARGUMENT,
    build_dir: Path = BUILD_DIR_ARGUMENT,
    output: Path | None = OUTPUT_OPTION,
    jobs: int | None = JOBS_OPTION,
    schedule: ScheduleChoice | None = SCHEDULE_OPTION,
    system_include: str | None = SYSTEM_INCLUDE_OPTION,
    config: Path | None = CONFIG_OPTION,
    env_file: list[Path] | None = ENV_FILE_OPTION,
) -> None:
    """Extract code chunks from every file of the build database."""
    env_files = list(env_file) if env_file else None
    settings = _load_settings(
        config,
        env_files,
        {
            "workers": jobs,
            "schedule": schedule.value if schedule is not None else None,
            "system_include": system_include,
        },
    )
    configure_library(settings.libclang_path)

    try:
        database = DATABASE_LOADER(build_dir)
    except DatabaseLoadError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from exc

    runner = IndexRunner(
        frontend=FRONTEND_FACTORY(settings),
        extractor=ChunkExtractor(ProjectBoundary(project_root)),
        workers=settings.workers or os.cpu_count() or 1,
        schedule=settings.schedule,
        system_include=_resolve_system_include(settings),
        extra_args=tuple(settings.extra_args),
        log=_log,
    )
    result = runner.run(database)
    write_chunks(result.chunks, output)

    if output is not None:
        console.print(f"[green]Wrote {len(result.chunks)} chunks to {escape(str(output))}[/green]")
    if result.failed:
        plural = "s" if len(result.failed_files) != 1 else ""
        console.print(
            "[yellow]"
            f"{len(result.failed_files)} of {result.files_total} file{plural} failed to parse cleanly."
            "[/yellow]",
        )
        raise typer.Exit(code=1)


def main() -> None:  # pragma: no cover - Typer entry point
    """Invoke the Typer application."""
    app()


if __name__ == "__main__":  # pragma: no cover - script entry point
    main()
