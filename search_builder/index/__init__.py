"""Index definition building and compilation."""

from search_builder.index.builder import IndexBuilder, IndexConfig, SearchIndex, compile_index
from search_builder.index.definition import IndexDefinition

__all__ = ["IndexBuilder", "IndexConfig", "SearchIndex", "compile_index", "IndexDefinition"]
