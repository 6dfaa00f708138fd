from datetime import date, timedelta
from typing import Annotated, Any

import structlog.contextvars
from fastapi import Depends
from structlog import get_logger

from backend.utils.dependencies import Clock, get_clock, get_fallback_client
from backend.utils.exceptions import FallbackDeliveryError, ServiceError
from backend.utils.fallback_client import FallbackClient

from ..hostname import to_host_id
from ..messages import UNEXPECTED_ERROR
from ..models import HostRecord
from ..repository import KintoneRepository, get_kintone_repository
from ..summary import DailySummaryWriter
from .models import UserEventPayload

logger = get_logger(__name__)

# The summary written while recording is dated nine hours ahead of local time.
SUMMARY_CLOCK_OFFSET = timedelta(hours=9)


def merge_plugin_names(requested: list[Any], registered: list[Any]) -> list[Any]:
    """Union of both lists without duplicates, requested names first."""
    return list(dict.fromkeys([*requested, *registered]))


class UserEventService:
    """
    Records one usage event. Every store update is best effort: a failing
    step is logged and the following steps still run.
    """

    def __init__(
        self,
        repository: KintoneRepository,
        fallback: FallbackClient,
        clock: Clock,
    ):
        self.repository = repository
        self.summary_writer = DailySummaryWriter(repository)
        self.fallback = fallback
        self.clock = clock

    async def record(self, payload: UserEventPayload) -> None:
        """
        Raises:
            ServiceError: If the host records could not be updated. The payload
                has been handed to the fallback endpoint by then.
        """
        failed = False
        try:
            await self.update_host(payload)
        except Exception:
            logger.exception("Failed to update host records in the store")
            failed = True

        try:
            await self.summary_writer.refresh(self.clock() + SUMMARY_CLOCK_OFFSET)
        except Exception as e:
            logger.error("Failed to store the daily summary", error=str(e))

        if failed:
            await self.forward_to_fallback(payload)
            raise ServiceError(UNEXPECTED_ERROR)

    async def update_host(self, payload: UserEventPayload) -> None:
        host_id = to_host_id(payload.hostname)
        today = self.clock().date()
        structlog.contextvars.bind_contextvars(host_id=host_id)
        log = logger.bind(host_id=host_id)

        try:
            await self.upsert_host(host_id, payload.plugin_names or [])
        except Exception as e:
            log.error("Failed to update the host record", error=str(e))

        try:
            await self.increment_counter(host_id)
        except Exception as e:
            log.error("Failed to increment the host counter", error=str(e))

        try:
            await self.set_install_date(host_id, today)
        except Exception as e:
            log.error("Failed to set the install date", error=str(e))

        try:
            await self.repository.set_last_modified(host_id, today)
        except Exception as e:
            log.error("Failed to set the last modified date", error=str(e))

    async def upsert_host(self, host_id: str, plugin_names: list[Any]) -> None:
        if not isinstance(plugin_names, list):
            raise TypeError(f"pluginNames must be a list, got {type(plugin_names).__name__}")

        record = await self.repository.get_host(host_id)
        if record is None:
            await self.repository.create_host(
                host_id, HostRecord(name="", plugin_names=plugin_names)
            )
            logger.info("New host registered", host_id=host_id)
            return

        registered = record.plugin_names
        if all(name in registered for name in plugin_names):
            return

        await self.repository.set_plugin_names(
            host_id, merge_plugin_names(plugin_names, registered)
        )

    async def increment_counter(self, host_id: str) -> int:
        current = await self.repository.get_counter(host_id)
        value = (current or 0) + 1
        await self.repository.set_counter(host_id, value)
        return value

    async def set_install_date(self, host_id: str, today: date) -> bool:
        if await self.repository.has_install_date(host_id):
            return False
        await self.repository.set_install_date(host_id, today)
        return True

    async def forward_to_fallback(self, payload: UserEventPayload) -> None:
        try:
            await self.fallback.deliver(payload.as_sent())
        except FallbackDeliveryError as e:
            logger.error("Payload could not be forwarded", error=e.detail)


def get_user_event_service(
    repository: Annotated[KintoneRepository, Depends(get_kintone_repository)],
    fallback: Annotated[FallbackClient, Depends(get_fallback_client)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> UserEventService:
    return UserEventService(repository, fallback, clock)
