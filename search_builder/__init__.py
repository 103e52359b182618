"""
Search Builder - declarative index and aggregation commands for RediSearch.

Main entry points for compiling index definitions and aggregations and for
decoding aggregation replies.
"""

from search_builder.aggregate import AggregateQuery, Reducer, SortOrder
from search_builder.client import SearchClient
from search_builder.config import SearchSettings, configure_logging
from search_builder.execution import ResultDecoder
from search_builder.index import SearchIndex
from search_builder.schema import Structure

__all__ = [
    "AggregateQuery",
    "Reducer",
    "SortOrder",
    "SearchClient",
    "SearchSettings",
    "configure_logging",
    "ResultDecoder",
    "SearchIndex",
    "Structure",
]
