from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class UserEventPayload(BaseModel):
    """
    JSON text posted by the plugin clients.

    Fields are typed loosely: a wrong type must not reject the whole event.
    ``page``, ``email`` and ``app_name`` are still sent by older clients and
    are accepted as anything, but nothing is recorded for them. Unknown keys
    are kept so the payload can be forwarded unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    hostname: Any = None
    plugin_names: Any = Field(default=None, alias="pluginNames")
    page: Any = None
    email: Any = None
    app_name: Any = Field(default=None, alias="appName")

    def as_sent(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)


class MessageResponse(BaseModel):
    """Response carrying only the localized result message."""

    result: str

    model_config = ConfigDict(
        json_schema_extra={"example": {"result": "データベースへ追加しました"}}
    )
