from typing import Any

import httpx
import structlog

from backend.utils.exceptions import FallbackDeliveryError

logger = structlog.get_logger(__name__)

FALLBACK_SOURCE_TAG = "ribbit-next-app"


class FallbackClient:
    """
    Forwards telemetry the store could not record to an external receiver
    (a Google Apps Script web app) so it can be replayed out of band.
    """

    def __init__(
        self,
        endpoint: str | None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.endpoint = endpoint
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def configured(self) -> bool:
        return bool(self.endpoint)

    async def deliver(self, payload: dict[str, Any]) -> bool:
        """
        Posts ``payload`` tagged with ``from`` to the fallback endpoint.

        Returns False without sending anything when no endpoint is configured.
        """
        if not self.configured:
            logger.warning("Fallback endpoint is not configured, payload dropped")
            return False

        body = {**payload, "from": FALLBACK_SOURCE_TAG}
        log = logger.bind(endpoint=self.endpoint)
        try:
            response = await self._client.post(self.endpoint, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.error(
                "Fallback endpoint returned an error",
                status_code=e.response.status_code,
                response=e.response.text,
            )
            raise FallbackDeliveryError(
                f"Fallback endpoint returned an error: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            log.error("Could not reach fallback endpoint", error=str(e))
            raise FallbackDeliveryError("Could not reach the fallback endpoint") from e

        log.info("Payload forwarded to fallback endpoint")
        return True

    async def close(self) -> None:
        await self._client.aclose()
