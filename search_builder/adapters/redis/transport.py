"""
Redis transport.

Implements ISearchTransport on top of redis-py.
"""

import logging
from typing import Any, Optional, Sequence

from redis import Redis

from search_builder.config import SearchSettings
from search_builder.core.arguments import Token

logger = logging.getLogger(__name__)

CREATE_COMMAND = "FT.CREATE"
AGGREGATE_COMMAND = "FT.AGGREGATE"


class RedisTransport:
    """
    Sends compiled search commands to Redis.

    Implements the ISearchTransport interface for Redis.
    """

    def __init__(self, client: Redis):
        """
        Initialize Redis transport.

        Args:
            client: Connected redis-py client
        """
        self.client = client

    @classmethod
    def from_settings(cls, settings: Optional[SearchSettings] = None) -> "RedisTransport":
        """
        Create a transport from connection settings.

        Args:
            settings: Connection settings, read from the environment when omitted

        Returns:
            RedisTransport with a client created from `settings.redis_url`
        """
        settings = settings or SearchSettings.from_env()
        client = Redis.from_url(
            settings.redis_url,
            socket_timeout=settings.socket_timeout,
            decode_responses=settings.decode_responses,
        )
        return cls(client)

    def send_index_create(self, index_name: str, arguments: Sequence[Token]) -> Any:
        logger.debug("Sending %s %s (%d arguments)", CREATE_COMMAND, index_name, len(arguments))
        return self.client.execute_command(CREATE_COMMAND, index_name, *arguments)

    def send_aggregate(self, index_name: str, arguments: Sequence[Token]) -> Any:
        logger.debug("Sending %s %s (%d arguments)", AGGREGATE_COMMAND, index_name, len(arguments))
        return self.client.execute_command(AGGREGATE_COMMAND, index_name, *arguments)
