"""Wrappers around external compiler tooling."""

from .toolchain import (
    ResourceProbe,
    ToolingWarning,
    default_clang_binaries,
    discover_system_include,
    probe_resource_dir,
)

__all__ = [
    "ResourceProbe",
    "ToolingWarning",
    "default_clang_binaries",
    "discover_system_include",
    "probe_resource_dir",
]
