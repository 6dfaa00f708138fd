"""
Path-addressed key-value store backed by Redis hashes.

A node path such as ``kintone/counter/foo`` is stored as the field ``foo`` of
the hash ``kintone:counter`` holding a JSON-encoded value. Reading a path that
is not a leaf returns the whole hash below it (``kintone/counter`` yields a
mapping of every host to its count).
"""

import json
from dataclasses import dataclass
from typing import Any, Protocol

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

from backend.utils.exceptions import StoreError

logger = structlog.get_logger(__name__)

PATH_SEPARATOR = "/"
KEY_SEPARATOR = ":"


@dataclass(frozen=True)
class Snapshot:
    """The value read at a path. ``None`` means nothing is stored there."""

    path: str
    value: Any = None

    def exists(self) -> bool:
        return self.value is not None

    def val(self) -> Any:
        return self.value


class TreeStore(Protocol):
    """Operations the kintone handlers need from the shared store."""

    async def get(self, path: str) -> Snapshot: ...

    async def set(self, path: str, value: Any) -> None: ...

    async def update(self, path: str, fields: dict[str, Any]) -> None: ...


def split_path(path: str) -> tuple[str, str]:
    """Splits ``a/b/c`` into the Redis hash key ``a:b`` and the field ``c``."""
    segments = [segment for segment in path.split(PATH_SEPARATOR) if segment]
    if len(segments) < 2:
        raise ValueError(f"Path '{path}' must have at least two segments")
    return KEY_SEPARATOR.join(segments[:-1]), segments[-1]


def collection_key(path: str) -> str:
    return KEY_SEPARATOR.join(segment for segment in path.split(PATH_SEPARATOR) if segment)


class RedisTreeStore:
    """Tree store implementation on top of a shared ``redis.asyncio`` client."""

    def __init__(self, client: redis.Redis):
        self._client = client

    async def get(self, path: str) -> Snapshot:
        try:
            key, field = split_path(path)
            raw = await self._client.hget(key, field)
            if raw is not None:
                return Snapshot(path, json.loads(raw))

            children = await self._client.hgetall(collection_key(path))
        except RedisError as e:
            logger.error("Redis error reading path", path=path, error=str(e))
            raise StoreError(f"Failed to read '{path}' from the store") from e

        if not children:
            return Snapshot(path)
        return Snapshot(
            path, {name: json.loads(raw_value) for name, raw_value in children.items()}
        )

    async def set(self, path: str, value: Any) -> None:
        key, field = split_path(path)
        try:
            await self._client.hset(key, field, json.dumps(value, ensure_ascii=False))
        except RedisError as e:
            logger.error("Redis error writing path", path=path, error=str(e))
            raise StoreError(f"Failed to write '{path}' to the store") from e

    async def update(self, path: str, fields: dict[str, Any]) -> None:
        """Shallow-merges ``fields`` into the object stored at ``path``."""
        key, field = split_path(path)
        try:
            raw = await self._client.hget(key, field)
            current = json.loads(raw) if raw is not None else {}
            if not isinstance(current, dict):
                current = {}
            current.update(fields)
            await self._client.hset(key, field, json.dumps(current, ensure_ascii=False))
        except RedisError as e:
            logger.error("Redis error updating path", path=path, error=str(e))
            raise StoreError(f"Failed to update '{path}' in the store") from e
