from datetime import datetime

from structlog import get_logger

from .models import CounterTotals, DailySummary
from .repository import KintoneRepository

logger = get_logger(__name__)


def build_summary(moment: datetime, totals: CounterTotals) -> DailySummary:
    return DailySummary(
        unix_time=int(moment.timestamp()),
        num_users=totals.num_users,
        counter=totals.counter,
    )


class DailySummaryWriter:
    """
    Writes the aggregate snapshot for the calendar date of a given moment,
    unless one already exists for that date.

    The existence check and the write are separate store calls, so two
    concurrent first writers can both write; the last one wins.
    """

    def __init__(self, repository: KintoneRepository):
        self.repository = repository

    async def write_if_absent(self, moment: datetime, totals: CounterTotals) -> bool:
        """Stores ``totals`` for ``moment``'s date. Returns True if written."""
        day = moment.date()
        if await self.repository.has_summary(day):
            return False

        await self.repository.set_summary(day, build_summary(moment, totals))
        logger.info(
            "Daily summary written",
            date=day.isoformat(),
            num_users=totals.num_users,
            counter=totals.counter,
        )
        return True

    async def refresh(self, moment: datetime) -> bool:
        """
        Like ``write_if_absent`` but reads the counters itself, and only after
        the date is known to have no summary yet.
        """
        day = moment.date()
        if await self.repository.has_summary(day):
            return False

        counters = await self.repository.get_counters()
        if counters is None:
            logger.error("No host counters stored, daily summary skipped", date=day.isoformat())
            return False

        totals = CounterTotals.from_mapping(counters)
        await self.repository.set_summary(day, build_summary(moment, totals))
        logger.info(
            "Daily summary written",
            date=day.isoformat(),
            num_users=totals.num_users,
            counter=totals.counter,
        )
        return True
