import json

import httpx
import pytest

from backend.utils.exceptions import FallbackDeliveryError
from backend.utils.fallback_client import FallbackClient

ENDPOINT = "https://script.google.com/macros/s/fake/exec"


def client_with(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_deliver_posts_payload_with_source_tag():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    fallback = FallbackClient(ENDPOINT, client=client_with(handler))

    assert await fallback.deliver({"hostname": "foo.cybozu.com", "pluginNames": ["x"]})

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert str(requests[0].url) == ENDPOINT
    assert json.loads(requests[0].content) == {
        "hostname": "foo.cybozu.com",
        "pluginNames": ["x"],
        "from": "ribbit-next-app",
    }


@pytest.mark.asyncio
async def test_unconfigured_endpoint_is_a_no_op():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    fallback = FallbackClient(None, client=client_with(handler))

    assert not fallback.configured
    assert await fallback.deliver({"hostname": "foo"}) is False


@pytest.mark.asyncio
async def test_error_status_raises_delivery_error():
    fallback = FallbackClient(
        ENDPOINT, client=client_with(lambda request: httpx.Response(503, text="busy"))
    )

    with pytest.raises(FallbackDeliveryError, match="503"):
        await fallback.deliver({})


@pytest.mark.asyncio
async def test_transport_error_raises_delivery_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    fallback = FallbackClient(ENDPOINT, client=client_with(handler))

    with pytest.raises(FallbackDeliveryError):
        await fallback.deliver({})
    await fallback.close()
