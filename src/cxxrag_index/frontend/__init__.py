"""Language frontend interface and its libclang implementation."""

from .base import (
    Declaration,
    DeclarationKind,
    Frontend,
    FrontendDiagnostic,
    ParsedUnit,
    ParseError,
    SourceReader,
    SourceSpan,
)
from .compile_db import (
    BuildDatabase,
    CompileJob,
    DatabaseLoadError,
    adjust_arguments,
    compile_job,
    load_build_database,
)
from .libclang import ClangFrontend, configure_library

__all__ = [
    "BuildDatabase",
    "ClangFrontend",
    "CompileJob",
    "DatabaseLoadError",
    "Declaration",
    "DeclarationKind",
    "Frontend",
    "FrontendDiagnostic",
    "ParseError",
    "ParsedUnit",
    "SourceReader",
    "SourceSpan",
    "adjust_arguments",
    "compile_job",
    "configure_library",
    "load_build_database",
]
