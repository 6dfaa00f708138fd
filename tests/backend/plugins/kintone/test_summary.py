from datetime import datetime

import pytest

from backend.plugins.kintone.models import CounterTotals
from backend.plugins.kintone.summary import DailySummaryWriter

MOMENT = datetime(2026, 10, 19, 12, 0)


@pytest.fixture
def writer(repository) -> DailySummaryWriter:
    return DailySummaryWriter(repository)


def test_totals_from_mapping():
    totals = CounterTotals.from_mapping({"a": 2, "b": 5, "c": 1})
    assert (totals.counter, totals.num_users) == (8, 3)


@pytest.mark.parametrize("counters", [None, {}])
def test_totals_from_absent_mapping_are_zero(counters):
    assert CounterTotals.from_mapping(counters) == CounterTotals(counter=0, num_users=0)


@pytest.mark.asyncio
async def test_write_if_absent_writes_once(writer, store):
    assert await writer.write_if_absent(MOMENT, CounterTotals(counter=4, num_users=2))
    assert not await writer.write_if_absent(MOMENT, CounterTotals(counter=9, num_users=9))

    assert store.read("kintone/summary/2026-10-19") == {
        "unixTime": int(MOMENT.timestamp()),
        "numUsers": 2,
        "counter": 4,
    }


@pytest.mark.asyncio
async def test_refresh_reads_counters_at_write_time(writer, store):
    await store.set("kintone/counter/foo", 2)
    await store.set("kintone/counter/bar", 5)

    assert await writer.refresh(MOMENT)

    assert store.read("kintone/summary/2026-10-19")["counter"] == 7
    assert store.read("kintone/summary/2026-10-19")["numUsers"] == 2


@pytest.mark.asyncio
async def test_refresh_skips_when_no_counters(writer, store):
    assert not await writer.refresh(MOMENT)
    assert store.read("kintone/summary") is None


@pytest.mark.asyncio
async def test_refresh_skips_existing_summary(writer, store):
    await store.set("kintone/summary/2026-10-19", {"unixTime": 1, "numUsers": 1, "counter": 1})
    await store.set("kintone/counter/foo", 10)

    assert not await writer.refresh(MOMENT)
    assert store.read("kintone/summary/2026-10-19")["counter"] == 1
