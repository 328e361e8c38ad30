import asyncio
from typing import Dict, List, Optional, Set

import pytest
import redis
from fastapi.testclient import TestClient

from visit_counter.main import app
from visit_counter.api.endpoints.counter import get_redis_manager
from visit_counter.core.redis_manager import RedisManager


class FakeRedisServer:
    """In-memory stand-in for a Redis server shared by every client it hands out"""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.clients: List["FakeRedisClient"] = []
        self.failing: Set[str] = set()
        self.commands: List[str] = []

    def client(self, host: str, port: int) -> "FakeRedisClient":
        client = FakeRedisClient(self)
        self.clients.append(client)
        return client


class FakeRedisClient:
    def __init__(self, server: FakeRedisServer):
        self.server = server
        self.closed = False

    async def _run(self, command: str):
        # yield so concurrent requests interleave like real network I/O
        await asyncio.sleep(0)
        self.server.commands.append(command)
        if command in self.server.failing:
            raise redis.ConnectionError(f"{command} failed")

    async def ping(self) -> bool:
        await self._run("ping")
        return True

    async def get(self, key: str) -> Optional[str]:
        await self._run("get")
        return self.server.data.get(key)

    async def set(self, key: str, value: str) -> bool:
        await self._run("set")
        self.server.data[key] = value
        return True

    async def incr(self, key: str) -> int:
        await self._run("incr")
        try:
            value = int(self.server.data.get(key, "0")) + 1
        except ValueError:
            raise redis.ResponseError("value is not an integer or out of range")
        if value > 2**63 - 1:
            raise redis.ResponseError("increment or decrement would overflow")
        self.server.data[key] = str(value)
        return value

    async def aclose(self) -> None:
        self.closed = True
        await self._run("aclose")


@pytest.fixture
def fake_redis():
    return FakeRedisServer()


@pytest.fixture
def redis_manager(fake_redis):
    return RedisManager(host="redis", port=6379, client_factory=fake_redis.client)


@pytest.fixture
def client(redis_manager):
    app.dependency_overrides[get_redis_manager] = lambda: redis_manager
    yield TestClient(app)
    app.dependency_overrides.clear()
