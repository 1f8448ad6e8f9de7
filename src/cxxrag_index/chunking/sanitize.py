"""Escaping of raw source text for embedding in JSON string literals."""

from __future__ import annotations

__all__ = ["escape_text"]


def escape_text(raw: str) -> str:
    """Return ``raw`` escaped so it can sit between JSON string quotes.

    Backslashes are doubled first, then double quotes are escaped, and only
    then are newlines turned into ``\\n``. Swapping the steps would double the
    backslash introduced for each newline.
    """
    escaped = raw.replace("\\", "\\\\")
    escaped = escaped.replace('"', '\\"')
    return escaped.replace("\n", "\\n")
