"""Aggregation pipeline building and compilation."""

from search_builder.aggregate.builder import (
    AggregateBuilder,
    AggregateCommand,
    AggregateConfig,
    AggregateQuery,
    compile_aggregate,
)
from search_builder.aggregate.reducers import Reducer, ReduceFunction
from search_builder.aggregate.stages import (
    GroupByStage,
    SortByStage,
    ApplyStage,
    FilterStage,
    LimitStage,
    SortKey,
    SortOrder,
)

__all__ = [
    "AggregateBuilder",
    "AggregateCommand",
    "AggregateConfig",
    "AggregateQuery",
    "compile_aggregate",
    "Reducer",
    "ReduceFunction",
    "GroupByStage",
    "SortByStage",
    "ApplyStage",
    "FilterStage",
    "LimitStage",
    "SortKey",
    "SortOrder",
]
