import pytest

from backend.utils.middleware import origin_host_id


@pytest.mark.parametrize(
    "origin, expected",
    [
        ("https://foo.cybozu.com", "foo"),
        ("https://foo.s.kintone.com/k/12/", "foo"),
        ("https://a.b.cybozu.com:443", "a_dot_b"),
        ("not a url", "___undefined"),
        (None, None),
        ("", None),
    ],
)
def test_origin_host_id(origin, expected):
    assert origin_host_id(origin) == expected


def test_response_carries_correlation_headers(test_client):
    response = test_client.get(
        "/health",
        headers={"x-correlation-id": "abc-123", "origin": "https://foo.cybozu.com"},
    )

    assert response.headers["X-Correlation-ID"] == "abc-123"
    assert response.headers["X-Process-Time"].endswith("s")
