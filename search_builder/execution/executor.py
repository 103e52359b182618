"""
Command execution coordinator.

Sends compiled commands through a transport and decodes aggregation replies.
"""

import logging
from typing import Any

from search_builder.aggregate.builder import AggregateCommand
from search_builder.core.interfaces import ISearchTransport
from search_builder.execution.result_decoder import AggregateResult, ResultDecoder
from search_builder.index.definition import IndexDefinition

logger = logging.getLogger(__name__)


class CommandExecutor:
    """
    Coordinates command execution.

    Wraps a transport implementation. Transport errors and reply format errors
    propagate to the caller unchanged; nothing is retried here.
    """

    def __init__(self, transport: ISearchTransport):
        """
        Initialize command executor.

        Args:
            transport: Transport that delivers commands to the engine
        """
        self.transport = transport

    def create_index(self, index_name: str, definition: IndexDefinition) -> Any:
        """
        Send an index definition.

        Args:
            index_name: Name of the index to create
            definition: Compiled index definition

        Returns:
            Engine acknowledgement, unchanged
        """
        logger.debug("%s", definition.render(index_name))
        return self.transport.send_index_create(index_name, definition.arguments)

    def aggregate(self, command: AggregateCommand) -> AggregateResult:
        """
        Send an aggregation and decode its reply.

        Args:
            command: Compiled aggregation command

        Returns:
            Decoded records
        """
        logger.debug("%s", command.render())
        reply = self.transport.send_aggregate(command.index_name, command.arguments)
        return ResultDecoder.decode(reply)
