from __future__ import annotations

from pathlib import Path
import platform
import sys
from typing import TYPE_CHECKING

import nox

if TYPE_CHECKING:
    from nox.sessions import Session

nox.options.default_venv_backend = "uv"
nox.options.reuse_existing_virtualenvs = True
nox.options.sessions = ["lint", "typing", "test"]

PYTHON = ["3.12", "3.13"]
COVER_MIN = 70


def constraints(session: Session) -> Path:
    """Return the pinned constraints file for the session's interpreter."""
    filename = f"python{session.python}-{sys.platform}-{platform.machine()}.txt"
    return Path("constraints", filename)


def install_project(session: Session) -> None:
    """Install the package with dev extras, pinned when constraints exist."""
    pinned = constraints(session)
    if pinned.exists():
        session.install("-c", pinned.as_posix(), "-e", ".[dev]")
    else:
        session.install("-e", ".[dev]")


@nox.session(python=PYTHON[-1], venv_backend="uv")
def lock(session: Session) -> None:
    """Lock dependencies."""
    filename = constraints(session)
    filename.parent.mkdir(exist_ok=True)
    session.run(
        "uv",
        "pip",
        "compile",
        "pyproject.toml",
        "--upgrade",
        "--quiet",
        "--all-extras",
        f"--output-file={filename}",
    )


@nox.session(python=PYTHON[-1], tags=["lint"])
def lint(session: Session) -> None:
    """Run Ruff checks and verify formatting."""
    session.install("ruff")
    session.run("ruff", "check", "src", "tests", "noxfile.py")
    session.run("ruff", "format", "--check", "src", "tests", "noxfile.py")


@nox.session(python=PYTHON[-1], tags=["typing"])
def typing(session: Session) -> None:
    """Run type checking with Pyright."""
    install_project(session)
    session.run("pyright", "src")


@nox.session(python=PYTHON, tags=["test"])
def test(session: Session) -> None:
    """Run the unit suite with coverage."""
    install_project(session)
    session.run(
        "pytest",
        "tests/unit",
        "--cov=cxxrag_index",
        f"--cov-fail-under={COVER_MIN}",
        *session.posargs,
    )


@nox.session(python=PYTHON[-1], tags=["integration"])
def integration(session: Session) -> None:
    """Parse a generated project with the real libclang bindings."""
    install_project(session)
    session.run("pytest", "tests/integration", *session.posargs)


@nox.session(python=PYTHON[-1], tags=["ci"])
def ci(session: Session) -> None:
    """Run all CI checks."""
    session.notify("lint")
    session.notify("typing")
    session.notify("test")
    session.notify("integration")
