"""Config loader helpers for cxxrag-index."""

from .loader import (
    LoadError,
    load_environment,
    load_settings,
)

__all__ = [
    "LoadError",
    "load_environment",
    "load_settings",
]
