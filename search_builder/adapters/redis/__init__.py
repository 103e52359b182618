"""Redis adapter for the search builder."""

from search_builder.adapters.redis.transport import RedisTransport

__all__ = ["RedisTransport"]
