from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HostRecord(BaseModel):
    """Stored at ``users/{hostId}``; ``name`` is a placeholder kept empty."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    plugin_names: list[Any] = Field(default_factory=list, alias="pluginNames")


class DailySummary(BaseModel):
    """Once-per-date aggregate stored at ``summary/{isoDate}``."""

    model_config = ConfigDict(populate_by_name=True)

    unix_time: int = Field(..., alias="unixTime")
    num_users: int = Field(..., alias="numUsers")
    counter: int


class CounterTotals(BaseModel):
    counter: int = 0
    num_users: int = 0

    @classmethod
    def from_mapping(cls, counters: dict[str, int] | None) -> "CounterTotals":
        """Totals over a ``hostId -> count`` mapping; absent means no hosts yet."""
        counters = counters or {}
        return cls(
            counter=sum(int(count) for count in counters.values()),
            num_users=len(counters),
        )
