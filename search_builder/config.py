"""
Connection settings loaded from the environment.

Values come from environment variables, with a `.env` file in the working
directory loaded first when present.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class SearchSettings(BaseModel):
    """Configuration for the Redis transport and logging."""

    redis_url: str = DEFAULT_REDIS_URL
    socket_timeout: Optional[float] = Field(default=None, gt=0)
    decode_responses: bool = True
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "SearchSettings":
        """
        Build settings from environment variables.

        Reads REDIS_URL, REDIS_SOCKET_TIMEOUT, REDIS_DECODE_RESPONSES and
        SEARCH_BUILDER_LOG_LEVEL.
        """
        if load_env_file:
            load_dotenv()

        socket_timeout = os.getenv("REDIS_SOCKET_TIMEOUT")
        return cls(
            redis_url=os.getenv("REDIS_URL", DEFAULT_REDIS_URL),
            socket_timeout=float(socket_timeout) if socket_timeout else None,
            decode_responses=os.getenv("REDIS_DECODE_RESPONSES", "true").lower()
            in ("1", "true", "yes"),
            log_level=os.getenv("SEARCH_BUILDER_LOG_LEVEL", "WARNING").upper(),
        )


def configure_logging(level: str = "WARNING") -> None:
    """Attach a basic stream handler to the package logger, for scripts."""
    package_logger = logging.getLogger("search_builder")
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        package_logger.addHandler(handler)
    package_logger.setLevel(level)
