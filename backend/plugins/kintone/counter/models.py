"""Pydantic models for the counter plugin API responses."""

from pydantic import BaseModel, ConfigDict, Field


class CounterResponse(BaseModel):
    """Totals returned to the plugin clients."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"result": "取得完了", "counter": 1520, "numUsers": 37}
        },
    )

    result: str
    counter: int
    num_users: int = Field(..., alias="numUsers")
