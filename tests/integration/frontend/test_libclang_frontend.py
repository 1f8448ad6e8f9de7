"""Integration tests running the extractor over real libclang parses."""

from __future__ import annotations

from collections import Counter
import json
from typing import TYPE_CHECKING

from clang.cindex import Index, LibclangError
import pytest

from cxxrag_index.chunking import ChunkExtractor, ChunkKind, ProjectBoundary
from cxxrag_index.frontend import ClangFrontend, load_build_database
from cxxrag_index.orchestration import IndexRunner
from cxxrag_index.output import render_chunks

if TYPE_CHECKING:
    from pathlib import Path

    from cxxrag_index.chunking import CodeChunk


UTIL_HEADER = """\
#pragma once

/// Configuration shared by every module.
struct Config {
    int verbosity;
};

enum class Level { Low, High };
"""

MAIN_SOURCE = """\
#include "util.h"

int prototype(int);

namespace app {
/// Adds two numbers.
int add(int a, int b) {
    return a + b;
}

class Widget {
public:
    int size() const;
};

int Widget::size() const { return 1; }
}
"""

OTHER_SOURCE = """\
#include "util.h"

static const char *greet() {
    return "hi\\n";
}
"""


@pytest.fixture(scope="module", autouse=True)
def _require_libclang() -> None:
    try:
        Index.create()
    except LibclangError as exc:
        pytest.skip(f"libclang unavailable: {exc}")


def _write_project(root: Path) -> Path:
    (root / "src").mkdir(parents=True)
    (root / "include").mkdir()
    (root / "include" / "util.h").write_text(UTIL_HEADER, encoding="utf-8")
    (root / "src" / "main.cpp").write_text(MAIN_SOURCE, encoding="utf-8")
    (root / "src" / "other.cpp").write_text(OTHER_SOURCE, encoding="utf-8")
    build = root / "build"
    build.mkdir()
    entries = [
        {
            "directory": str(build),
            "command": f"c++ -std=c++17 -I../include -o {name}.o -c ../src/{name}",
            "file": f"../src/{name}",
        }
        for name in ("main.cpp", "other.cpp")
    ]
    (build / "compile_commands.json").write_text(json.dumps(entries), encoding="utf-8")
    return build


def test_indexes_project_from_build_database(tmp_path: Path) -> None:
    """Real parses yield the expected chunks, including shared header duplicates."""
    root = (tmp_path / "proj").resolve()
    build = _write_project(root)
    database = load_build_database(build)
    assert database.files == [str(root / "src" / "main.cpp"), str(root / "src" / "other.cpp")]

    runner = IndexRunner(
        frontend=ClangFrontend(),
        extractor=ChunkExtractor(ProjectBoundary(root)),
        workers=2,
    )
    result = runner.run(database)

    assert not result.failed
    names = [chunk.name for chunk in result.chunks]
    assert names.count("Config") == 2
    assert names.count("Level") == 2
    assert "prototype" not in names
    assert {"app::add", "app::Widget", "app::Widget::size", "greet"} <= set(names)
    assert sum(1 for name in names if name == "app::Widget::size") == 1

    parsed = json.loads(render_chunks(result.chunks))
    add = next(item for item in parsed if item["name"] == "app::add")
    assert add["kind"] == int(ChunkKind.FUNCTION)
    assert add["signature"] == "int add(int a, int b)"
    assert add["comment"] == "/// Adds two numbers."
    assert add["body"] == "{\n    return a + b;\n}"
    assert (add["start_line"], add["end_line"]) == (7, 9)
    assert add["filepath"] == str(root / "src" / "main.cpp")

    config = next(item for item in parsed if item["name"] == "Config")
    assert config["signature"] == config["body"] == "struct Config {\n    int verbosity;\n}"
    assert config["filepath"] == str(root / "include" / "util.h")

    greet = next(item for item in parsed if item["name"] == "greet")
    assert greet["body"] == '{\n    return "hi\\n";\n}'


def _extract(root: Path, filename: str, *arguments: str) -> list[CodeChunk]:
    unit = ClangFrontend().parse(str(root / filename), ["-working-directory", str(root), *arguments])
    return ChunkExtractor(ProjectBoundary(root)).extract(unit)


def test_tags_declared_with_variables_and_typedefs_appear_once(tmp_path: Path) -> None:
    """Definitions inside declarators are emitted once; unnamed tags are skipped."""
    root = tmp_path.resolve()
    (root / "tags.c").write_text(
        "struct S { int a; } s;\n"
        "typedef struct T { int b; } T_t;\n"
        "enum E { X } e;\n"
        "typedef struct { int c; } Anon;\n"
        "enum { Y };\n"
        "struct { int d; } loose;\n",
        encoding="utf-8",
    )

    chunks = _extract(root, "tags.c")

    assert [(chunk.kind, chunk.name) for chunk in chunks] == [
        (ChunkKind.RECORD, "S"),
        (ChunkKind.RECORD, "T"),
        (ChunkKind.ENUM, "E"),
    ]


def test_comment_on_a_prototype_stays_with_the_prototype(tmp_path: Path) -> None:
    """A definition only carries the comment written directly above it."""
    root = tmp_path.resolve()
    (root / "a.h").write_text("/// Header doc.\nint f(int x);\nint g(int x);\n", encoding="utf-8")
    (root / "a.cpp").write_text(
        '#include "a.h"\nint f(int x) { return x; }\n\n/// Defined here.\nint g(int x) { return -x; }\n',
        encoding="utf-8",
    )

    chunks = {chunk.name: chunk for chunk in _extract(root, "a.cpp", "-std=c++17")}

    assert set(chunks) == {"f", "g"}
    assert chunks["f"].comment == ""
    assert chunks["f"].start_line == 2
    assert chunks["g"].comment == "/// Defined here."


def test_macro_generated_functions_are_skipped(tmp_path: Path) -> None:
    """Definitions produced by a macro invocation yield no chunks."""
    root = tmp_path.resolve()
    (root / "gen.c").write_text(
        "#define DEF(n) int n(void) { return 1; }\nDEF(gen)\nint real(void) { return 2; }\n",
        encoding="utf-8",
    )

    assert [chunk.name for chunk in _extract(root, "gen.c")] == ["real"]


def test_function_template_includes_its_parameter_list(tmp_path: Path) -> None:
    """A function template's chunk starts at its ``template`` line."""
    root = tmp_path.resolve()
    (root / "mx.cpp").write_text(
        "template <typename T>\nT mx(T a, T b) { return a > b ? a : b; }\n",
        encoding="utf-8",
    )

    chunks = _extract(root, "mx.cpp", "-std=c++17")

    assert [chunk.name for chunk in chunks] == ["mx"]
    assert chunks[0].start_line == 1
    assert chunks[0].end_line == 2
    assert chunks[0].signature == "template <typename T>\\nT mx(T a, T b)"


def test_repeated_runs_produce_the_same_chunks(tmp_path: Path) -> None:
    """Indexing is deterministic up to merge order."""
    root = (tmp_path / "proj").resolve()
    build = _write_project(root)

    def run() -> Counter[CodeChunk]:
        runner = IndexRunner(
            frontend=ClangFrontend(),
            extractor=ChunkExtractor(ProjectBoundary(root)),
            workers=2,
            schedule="dynamic",
        )
        return Counter(runner.run(load_build_database(build)).chunks)

    assert run() == run()
