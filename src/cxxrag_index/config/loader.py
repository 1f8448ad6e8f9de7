"""Load indexer settings from an optional YAML file."""

from __future__ import annotations

from pathlib import Path
import re
from typing import TYPE_CHECKING, Any, cast

from dotenv import dotenv_values
from pydantic import ValidationError
import yaml

from cxxrag_index.domain.models import IndexerSettings

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

__all__ = [
    "SETTINGS_KEY",
    "LoadError",
    "load_environment",
    "load_settings",
]

SETTINGS_KEY = "indexer"

# ``${NAME}`` or ``${NAME:-fallback}``.
_PLACEHOLDER = re.compile(r"\$\{(?P<name>[^}:]+)(?::-(?P<default>[^}]*))?\}")


class LoadError(RuntimeError):
    """Raised when settings or environment files cannot be loaded."""


def load_environment(
    env_files: Sequence[str | Path] | None = None,
    *,
    base: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Merge ``.env`` files over ``base``; later files win."""
    combined: dict[str, str] = dict(base or {})
    for env_file in env_files or ():
        path = Path(env_file)
        if not path.exists():
            message = f"Environment file not found: {path}"
            raise LoadError(message)
        values = dotenv_values(path, encoding="utf-8")
        combined.update({key: value for key, value in values.items() if value is not None})
    return combined


def load_settings(
    yaml_path: str | Path | None = None,
    *,
    env_files: Sequence[str | Path] | None = None,
    overrides: Mapping[str, str] | None = None,
    updates: Mapping[str, Any] | None = None,
) -> IndexerSettings:
    """Load :class:`IndexerSettings`, letting non-``None`` ``updates`` win.

    String values may reference ``${VAR}`` or ``${VAR:-default}``, resolved
    against ``env_files`` layered over ``overrides``. The settings sit at the
    document root or under an ``indexer:`` key.
    """
    payload: dict[str, Any] = {}
    if yaml_path is not None:
        env = load_environment(env_files, base=overrides)
        payload = {key: _resolve(value, env) for key, value in _read_section(Path(yaml_path)).items()}
    payload.update({key: value for key, value in (updates or {}).items() if value is not None})
    try:
        return IndexerSettings.model_validate(payload)
    except ValidationError as exc:
        message = str(exc)
        raise LoadError(message) from exc


def _read_section(path: Path) -> dict[str, Any]:
    if not path.is_file():
        message = f"Configuration file not found: {path}"
        raise LoadError(message)
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        message = f"Invalid YAML in configuration file: {path}"
        raise LoadError(message) from exc
    if document is None:
        return {}
    if isinstance(document, dict) and SETTINGS_KEY in document:
        document = cast("dict[str, Any]", document)[SETTINGS_KEY]
    if not isinstance(document, dict):
        message = f"Settings in {path} must be a mapping"
        raise LoadError(message)
    section = cast("dict[Any, Any]", document)
    if not all(isinstance(key, str) for key in section):
        message = f"Setting names must be strings in {path}"
        raise LoadError(message)
    return cast("dict[str, Any]", section)


def _resolve(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return _PLACEHOLDER.sub(lambda match: _lookup(match, env), value)
    if isinstance(value, list):
        return [_resolve(item, env) for item in cast("list[Any]", value)]
    return value


def _lookup(match: re.Match[str], env: Mapping[str, str]) -> str:
    name = match.group("name")
    if name in env:
        return env[name]
    default = match.group("default")
    if default is None:
        message = f"Missing environment variable '{name}' referenced in configuration"
        raise LoadError(message)
    return default
