"""Tests for the exchange rate adapter."""

import httpx
import pytest

from backend.planner.currency.provider import fetch_exchange_rate
from backend.planner.errors import ExternalServiceUnavailableError


def mock_client(handler: object) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_fetch_exchange_rate_reads_info_rate() -> None:
    """Adapter sends the currency pair and parses info.rate."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "info": {"rate": 0.0119}, "result": 0.0119})

    rate = await fetch_exchange_rate(
        "INR", "USD", base_url="https://rates.test", client=mock_client(handler)
    )

    assert rate == 0.0119
    request = seen[0]
    assert request.url.path == "/convert"
    assert request.url.params["from"] == "INR"
    assert request.url.params["to"] == "USD"
    assert request.url.params["amount"] == "1"
    assert "access_key" not in request.url.params


@pytest.mark.asyncio
async def test_fetch_exchange_rate_sends_access_key_when_set() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"info": {"quote": 0.012}})

    rate = await fetch_exchange_rate(
        "INR", "USD", base_url="https://rates.test", api_key="secret", client=mock_client(handler)
    )

    assert rate == 0.012
    assert seen[0].url.params["access_key"] == "secret"


@pytest.mark.asyncio
async def test_fetch_exchange_rate_falls_back_to_result() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"result": 0.0121})

    rate = await fetch_exchange_rate("INR", "USD", client=mock_client(handler))

    assert rate == 0.0121


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"info": {"rate": 0}},
        {"info": {"rate": -1.5}},
        {"result": None},
        {"success": False, "error": {"type": "invalid_access_key"}},
        ["not", "an", "object"],
    ],
)
async def test_fetch_exchange_rate_rejects_unusable_payloads(payload: object) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    with pytest.raises(ExternalServiceUnavailableError):
        await fetch_exchange_rate("INR", "USD", client=mock_client(handler))


@pytest.mark.asyncio
async def test_fetch_exchange_rate_http_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    with pytest.raises(ExternalServiceUnavailableError):
        await fetch_exchange_rate("INR", "USD", client=mock_client(handler))


@pytest.mark.asyncio
async def test_fetch_exchange_rate_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(ExternalServiceUnavailableError):
        await fetch_exchange_rate("INR", "USD", client=mock_client(handler))


@pytest.mark.asyncio
async def test_fetch_exchange_rate_invalid_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    with pytest.raises(ExternalServiceUnavailableError):
        await fetch_exchange_rate("INR", "USD", client=mock_client(handler))


def raw_json(body: bytes) -> httpx.Response:
    """Response with a literal JSON body, including tokens like NaN."""
    return httpx.Response(200, content=body, headers={"Content-Type": "application/json"})


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        b'{"result": NaN}',
        b'{"info": {"rate": Infinity}}',
        b'{"info": {"quote": -Infinity}}',
        b'{"info": {"rate": "NaN"}}',
        b'{"info": {"rate": "not a number"}}',
        b'{"info": {"rate": true}}',
    ],
)
async def test_fetch_exchange_rate_rejects_non_finite_rates(body: bytes) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return raw_json(body)

    with pytest.raises(ExternalServiceUnavailableError):
        await fetch_exchange_rate("INR", "USD", client=mock_client(handler))


@pytest.mark.asyncio
async def test_fetch_exchange_rate_accepts_numeric_string() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"info": {"rate": "0.0125"}})

    rate = await fetch_exchange_rate("INR", "USD", client=mock_client(handler))

    assert rate == 0.0125


@pytest.mark.asyncio
async def test_fetch_exchange_rate_prefers_first_present_field() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"info": {"rate": None, "quote": 0.011}, "result": 0.02})

    rate = await fetch_exchange_rate("INR", "USD", client=mock_client(handler))

    assert rate == 0.011
