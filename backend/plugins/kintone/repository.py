from datetime import date
from typing import Annotated

from fastapi import Depends
from structlog import get_logger

from backend.config import settings
from backend.utils.dependencies import get_tree_store
from backend.utils.tree_store import TreeStore

from .models import DailySummary, HostRecord

logger = get_logger(__name__)


class KintoneRepository:
    """Reads and writes the kintone telemetry entities in the tree store."""

    def __init__(self, store: TreeStore, root: str = "kintone"):
        self._store = store
        self._root = root.strip("/")

    def _path(self, *segments: str) -> str:
        return "/".join((self._root, *segments))

    async def get_counters(self) -> dict[str, int] | None:
        snapshot = await self._store.get(self._path("counter"))
        return snapshot.val() if snapshot.exists() else None

    async def get_counter(self, host_id: str) -> int | None:
        snapshot = await self._store.get(self._path("counter", host_id))
        return int(snapshot.val()) if snapshot.exists() else None

    async def set_counter(self, host_id: str, value: int) -> None:
        await self._store.set(self._path("counter", host_id), value)

    async def get_host(self, host_id: str) -> HostRecord | None:
        snapshot = await self._store.get(self._path("users", host_id))
        if not snapshot.exists():
            return None
        return HostRecord.model_validate(snapshot.val())

    async def create_host(self, host_id: str, record: HostRecord) -> None:
        await self._store.set(
            self._path("users", host_id), record.model_dump(by_alias=True)
        )

    async def set_plugin_names(self, host_id: str, plugin_names: list[str]) -> None:
        await self._store.update(
            self._path("users", host_id), {"pluginNames": plugin_names}
        )

    async def has_install_date(self, host_id: str) -> bool:
        snapshot = await self._store.get(self._path("installDate", host_id))
        return snapshot.exists()

    async def set_install_date(self, host_id: str, day: date) -> None:
        await self._store.set(self._path("installDate", host_id), day.isoformat())

    async def set_last_modified(self, host_id: str, day: date) -> None:
        await self._store.set(self._path("lastModified", host_id), day.isoformat())

    async def has_summary(self, day: date) -> bool:
        snapshot = await self._store.get(self._path("summary", day.isoformat()))
        return snapshot.exists()

    async def set_summary(self, day: date, summary: DailySummary) -> None:
        await self._store.set(
            self._path("summary", day.isoformat()), summary.model_dump(by_alias=True)
        )


def get_kintone_repository(
    store: Annotated[TreeStore, Depends(get_tree_store)],
) -> KintoneRepository:
    return KintoneRepository(store, root=settings.store_root)
