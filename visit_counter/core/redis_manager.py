import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

import redis
import redis.asyncio as aioredis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff

from .config import settings
from .errors import (
    CounterParseError,
    StoreConnectionError,
    StoreReadError,
    StoreWriteError,
)

logger = logging.getLogger(__name__)

# redis-py wraps most socket failures, but OSError can still escape on connect
_CLIENT_ERRORS = (redis.RedisError, OSError)

ClientFactory = Callable[[str, int], aioredis.Redis]


def default_client_factory(host: str, port: int) -> aioredis.Redis:
    # no retries: a failed command surfaces immediately
    return aioredis.Redis(
        host=host,
        port=port,
        decode_responses=True,
        retry=Retry(NoBackoff(), 0),
    )


class RedisStore:
    """Get/set access to a single open Redis connection"""

    def __init__(self, client: aioredis.Redis):
        self.client = client

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.client.get(key)
        except _CLIENT_ERRORS as e:
            raise StoreReadError(f"Failed to read {key}: {str(e)}") from e

    async def set(self, key: str, value: str) -> None:
        try:
            await self.client.set(key, value)
        except _CLIENT_ERRORS as e:
            raise StoreWriteError(f"Failed to write {key}: {str(e)}") from e

    async def incr(self, key: str) -> int:
        """
        Atomically increment a counter

        Redis rejects INCR on a value that is not an integer; that case is
        reported as CounterParseError so it matches the read-modify-write path.
        """
        try:
            return await self.client.incr(key)
        except redis.ResponseError as e:
            if "not an integer" in str(e):
                raise CounterParseError(f"Value at {key} is not an integer: {str(e)}") from e
            raise StoreWriteError(f"Failed to increment {key}: {str(e)}") from e
        except _CLIENT_ERRORS as e:
            raise StoreWriteError(f"Failed to increment {key}: {str(e)}") from e


class RedisManager:
    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        """Hold store connection settings; connections are opened per request"""
        self.host = host if host is not None else settings.REDIS_HOST
        self.port = port if port is not None else settings.REDIS_PORT
        self.client_factory = client_factory or default_client_factory

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[RedisStore]:
        """
        Open a fresh Redis connection and close it on exit

        The connection is established eagerly with PING so that an
        unreachable server fails here rather than on the first command.
        """
        client = self.client_factory(self.host, self.port)
        try:
            await client.ping()
        except _CLIENT_ERRORS as e:
            await self._close(client, suppress=True)
            raise StoreConnectionError(f"Failed to connect to Redis at {self.address}: {str(e)}") from e

        logger.debug(f"Connected to Redis at {self.address}")
        try:
            yield RedisStore(client)
        except BaseException:
            # the body's error is the one to report; a failed close is only logged
            await self._close(client, suppress=True)
            raise
        await self._close(client)

    async def _close(self, client: aioredis.Redis, suppress: bool = False) -> None:
        try:
            await client.aclose()
            logger.debug(f"Closed Redis connection to {self.address}")
        except _CLIENT_ERRORS as e:
            if suppress:
                logger.warning(f"Failed to close Redis connection to {self.address}: {str(e)}")
                return
            raise StoreConnectionError(f"Failed to close Redis connection to {self.address}: {str(e)}") from e
