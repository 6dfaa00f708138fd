from datetime import datetime
from typing import Annotated, Callable

import redis.asyncio as redis
from fastapi import Depends, Request

from backend.utils.fallback_client import FallbackClient
from backend.utils.tree_store import RedisTreeStore, TreeStore

Clock = Callable[[], datetime]


async def get_redis_client(request: Request) -> redis.Redis:
    """Dependency to get the shared Redis client instance from the application state."""
    return request.app.state.redis


async def get_tree_store(
    client: Annotated[redis.Redis, Depends(get_redis_client)],
) -> TreeStore:
    """Dependency wrapping the shared Redis client in the tree store interface."""
    return RedisTreeStore(client)


def get_fallback_client(request: Request) -> FallbackClient:
    """Dependency to get the shared FallbackClient instance from the application state."""
    return request.app.state.fallback_client


def get_clock() -> Clock:
    """Dependency returning the source of local wall-clock time."""
    return datetime.now
