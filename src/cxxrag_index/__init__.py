"""Extract code chunks from C/C++ projects for retrieval indexing."""

__version__ = "0.1.0"
