"""Tests for the chunk array writer."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from cxxrag_index.chunking import ChunkKind, CodeChunk, escape_text
from cxxrag_index.output import render_chunks, write_chunks

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


def _record() -> CodeChunk:
    text = escape_text('struct Foo {\n  const char *s = "x\\y";\n}')
    return CodeChunk(
        kind=ChunkKind.RECORD,
        name="Foo",
        filepath="/proj/foo.h",
        start_line=1,
        end_line=3,
        signature=text,
        comment="",
        body=text,
    )


def _function() -> CodeChunk:
    return CodeChunk(
        kind=ChunkKind.FUNCTION,
        name="add",
        filepath="/proj/a.cpp",
        start_line=2,
        end_line=4,
        signature="int add(int a, int b)",
        comment=escape_text("/// Adds two numbers."),
        body=escape_text("{\n    return a + b;\n}"),
    )


def test_render_chunks_produces_ordered_objects() -> None:
    """Objects are valid JSON with keys in a fixed order and integer kinds."""
    payload = render_chunks([_record(), _function()])
    parsed = json.loads(payload)

    assert [list(item) for item in parsed] == [
        ["kind", "name", "filepath", "start_line", "end_line", "signature", "comment", "body"]
    ] * 2
    assert parsed[0]["kind"] == 0
    assert parsed[1]["kind"] == 2
    assert parsed[0]["body"] == 'struct Foo {\n  const char *s = "x\\y";\n}'
    assert parsed[1]["comment"] == "/// Adds two numbers."
    assert parsed[1]["start_line"] == 2


def test_render_chunks_layout() -> None:
    """Objects are tab indented and separated by a comma line break."""
    payload = render_chunks([_function(), _function()])
    assert payload.startswith("[\n\t{\n\t\t\"kind\": 2,\n")
    assert "\n\t},\n\t{\n" in payload
    assert payload.endswith("\n\t}\n]")


def test_empty_input_is_an_empty_array() -> None:
    """No chunks still renders a parseable array."""
    payload = render_chunks([])
    assert payload == "[\n]"
    assert json.loads(payload) == []


def test_write_chunks_creates_the_output_file(tmp_path: Path) -> None:
    """Writing to a path creates missing parent directories."""
    target = tmp_path / "out" / "chunks.json"
    payload = write_chunks([_function()], target)
    assert target.read_text(encoding="utf-8") == payload
    assert json.loads(payload)[0]["name"] == "add"


def test_write_chunks_defaults_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    """Without a path the array goes to standard output."""
    write_chunks([_record()])
    captured = capsys.readouterr()
    assert json.loads(captured.out)[0]["name"] == "Foo"
    assert captured.err == ""
