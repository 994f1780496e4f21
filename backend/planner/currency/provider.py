"""Exchange rate adapter for exchangerate.host-style ``/convert`` APIs."""

import math
from typing import Any

import httpx

from backend.planner.errors import ExternalServiceUnavailableError


def _extract_rate(data: Any) -> float | None:
    """Pull the first usable rate out of a provider response.

    Accepted shapes: ``{"info": {"rate": x}}``, ``{"info": {"quote": x}}``
    and ``{"result": x}`` (amount is always 1, so result equals the rate).
    The first field present wins; numbers and numeric strings are accepted.
    """
    if not isinstance(data, dict):
        return None

    info = data.get("info")
    candidates = []
    if isinstance(info, dict):
        candidates.extend([info.get("rate"), info.get("quote")])
    candidates.append(data.get("result"))

    value = next((c for c in candidates if c is not None), None)
    if value is None or isinstance(value, bool) or not isinstance(value, int | float | str):
        return None
    try:
        return float(value)
    except ValueError:
        return None


async def fetch_exchange_rate(
    base_currency: str,
    target_currency: str,
    *,
    base_url: str = "https://api.exchangerate.host",
    api_key: str = "",
    timeout_seconds: float = 8.0,
    client: httpx.AsyncClient | None = None,
) -> float:
    """Fetch the rate converting one unit of base into target currency.

    Args:
        base_currency: Currency code converted from
        target_currency: Currency code converted to
        base_url: Provider base URL
        api_key: Provider access key, sent only when set
        timeout_seconds: Upper bound on the whole request
        client: Optional httpx client (for testing with mocks)

    Returns:
        Positive exchange rate

    Raises:
        ExternalServiceUnavailableError: On network errors, timeouts, non-2xx
            responses, or a response without a positive rate
    """
    params: dict[str, str | int] = {
        "from": base_currency,
        "to": target_currency,
        "amount": 1,
    }
    if api_key:
        params["access_key"] = api_key

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout_seconds)
        close_client = True

    try:
        response = await client.get(
            f"{base_url.rstrip('/')}/convert", params=params, timeout=timeout_seconds
        )
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as e:
        raise ExternalServiceUnavailableError(
            f"Exchange rate provider request failed: {type(e).__name__}",
            {"base_currency": base_currency, "target_currency": target_currency},
        ) from e
    except ValueError as e:
        raise ExternalServiceUnavailableError(
            "Exchange rate provider returned invalid JSON",
            {"base_currency": base_currency, "target_currency": target_currency},
        ) from e
    finally:
        if close_client:
            await client.aclose()

    rate = _extract_rate(data)
    if rate is None or not math.isfinite(rate) or rate <= 0:
        raise ExternalServiceUnavailableError(
            "Exchange rate provider returned no positive rate",
            {"base_currency": base_currency, "target_currency": target_currency, "rate": rate},
        )
    return rate
