"""
Search client - main entry point.

Ties builders, the command executor and a transport together.
"""

from typing import Any, Optional, Union

from search_builder.aggregate.builder import AggregateBuilder, AggregateCommand
from search_builder.config import SearchSettings
from search_builder.core.interfaces import ISearchTransport
from search_builder.execution.executor import CommandExecutor
from search_builder.execution.result_decoder import AggregateResult
from search_builder.index.builder import IndexBuilder
from search_builder.index.definition import IndexDefinition
from search_builder.schema.field_builders import Structure


class SearchClient:
    """
    Compiles and sends index definitions and aggregations.

    The client itself holds no per-command state and only forwards to the
    transport; it is as thread-safe as the transport it wraps.
    """

    def __init__(self, transport: ISearchTransport):
        """
        Initialize search client with a transport.

        Args:
            transport: Transport that delivers commands to the engine
        """
        self.executor = CommandExecutor(transport)

    @classmethod
    def from_redis(
        cls,
        redis_url: Optional[str] = None,
        settings: Optional[SearchSettings] = None,
    ) -> "SearchClient":
        """
        Create a client backed by Redis.

        Args:
            redis_url: Redis URL, overrides the configured one
            settings: Connection settings, read from the environment when omitted

        Returns:
            Configured SearchClient for Redis
        """
        from search_builder.adapters.redis import RedisTransport

        settings = settings or SearchSettings.from_env()
        if redis_url:
            settings = settings.model_copy(update={"redis_url": redis_url})

        return cls(RedisTransport.from_settings(settings))

    @staticmethod
    def index(structure: Union[Structure, str] = Structure.HASH) -> IndexBuilder:
        """Start an index definition on `structure`."""
        return IndexBuilder(Structure(structure))

    @staticmethod
    def aggregation(index_name: str) -> AggregateBuilder:
        """Start an aggregation over `index_name`."""
        return AggregateBuilder(index_name)

    def create_index(self, index_name: str, definition: Union[IndexDefinition, IndexBuilder]) -> Any:
        """
        Create an index.

        Args:
            index_name: Name of the index to create
            definition: Compiled definition, or a builder to compile first

        Returns:
            Engine acknowledgement, unchanged
        """
        if isinstance(definition, IndexBuilder):
            definition = definition.build()
        return self.executor.create_index(index_name, definition)

    def aggregate(self, command: Union[AggregateCommand, AggregateBuilder]) -> AggregateResult:
        """
        Run an aggregation and decode its records.

        Args:
            command: Compiled aggregation, or a builder to compile first

        Returns:
            Decoded records
        """
        if isinstance(command, AggregateBuilder):
            command = command.build()
        return self.executor.aggregate(command)
