"""
Abstract interfaces for transport adapters.

The builders and the decoder never talk to the network. Anything that can
deliver a compiled command to the engine and hand back its raw reply can be
plugged into the client by implementing this protocol.
"""

from typing import Any, Protocol, Sequence

from search_builder.core.arguments import Token


class ISearchTransport(Protocol):
    """
    Send compiled commands to a search engine.

    Implementations own connection management, authentication and retries.
    """

    def send_index_create(self, index_name: str, arguments: Sequence[Token]) -> Any:
        """
        Send an index creation command.

        Args:
            index_name: Name of the index to create
            arguments: Compiled index definition tokens (everything after the index name)

        Returns:
            The engine acknowledgement, unchanged
        """
        ...

    def send_aggregate(self, index_name: str, arguments: Sequence[Token]) -> Any:
        """
        Send an aggregation command.

        Args:
            index_name: Name of the index to aggregate over
            arguments: Compiled aggregation tokens (everything after the index name)

        Returns:
            The raw, undecoded engine reply
        """
        ...
