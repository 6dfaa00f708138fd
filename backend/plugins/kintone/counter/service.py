from typing import Annotated

from fastapi import Depends
from structlog import get_logger

from backend.utils.dependencies import Clock, get_clock
from backend.utils.exceptions import ServiceError, serialize_error

from ..messages import COUNTER_FETCHED, UNEXPECTED_ERROR
from ..models import CounterTotals
from ..repository import KintoneRepository, get_kintone_repository
from ..summary import DailySummaryWriter
from .models import CounterResponse

logger = get_logger(__name__)


class CounterService:
    def __init__(self, repository: KintoneRepository, clock: Clock):
        self.repository = repository
        self.summary_writer = DailySummaryWriter(repository)
        self.clock = clock

    async def get_totals(self) -> CounterResponse:
        """
        Sums every host counter and snapshots the totals for today's local
        date if no summary exists yet.

        Raises:
            ServiceError: If the counters cannot be read.
        """
        try:
            counters = await self.repository.get_counters()
        except Exception as e:
            logger.exception("Failed to read host counters")
            raise ServiceError(f"{UNEXPECTED_ERROR}{serialize_error(e)}") from e

        totals = CounterTotals.from_mapping(counters)

        try:
            await self.summary_writer.write_if_absent(self.clock(), totals)
        except Exception as e:
            logger.error("Failed to store the daily summary", error=str(e))

        return CounterResponse(
            result=COUNTER_FETCHED, counter=totals.counter, num_users=totals.num_users
        )


def get_counter_service(
    repository: Annotated[KintoneRepository, Depends(get_kintone_repository)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> CounterService:
    return CounterService(repository, clock)
