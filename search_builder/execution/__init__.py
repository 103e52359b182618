"""Command execution and reply decoding."""

from search_builder.execution.executor import CommandExecutor
from search_builder.execution.result_decoder import (
    AggregateRecord,
    AggregateResult,
    RecordValue,
    ResultDecoder,
)

__all__ = [
    "CommandExecutor",
    "AggregateRecord",
    "AggregateResult",
    "RecordValue",
    "ResultDecoder",
]
