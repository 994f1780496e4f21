"""Tests for the exchange rate cache."""

import asyncio
import threading
from datetime import datetime

import httpx
import pytest

from backend.planner.config import Settings
from backend.planner.currency.cache import CurrencyRateCache
from backend.planner.db.inmemory import InMemoryCurrencyConfigStore
from backend.planner.errors import InvalidInputError
from backend.planner.models.currency import CurrencyConfig


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingProvider:
    """MockTransport handler returning a fixed rate and counting calls."""

    def __init__(self, rate: float | None = 0.0125, status_code: int = 200) -> None:
        self.rate = rate
        self.status_code = status_code
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        return httpx.Response(self.status_code, json={"info": {"rate": self.rate}})


def make_cache(
    store: InMemoryCurrencyConfigStore,
    settings: Settings,
    provider: CountingProvider,
    clock: FakeClock | None = None,
) -> CurrencyRateCache:
    """Create a cache wired to a mocked provider.

    Args:
        store: Durable config store
        settings: Test settings
        provider: MockTransport handler
        clock: Optional fake clock for TTL tests

    Returns:
        CurrencyRateCache
    """
    client = httpx.AsyncClient(transport=httpx.MockTransport(provider))
    return CurrencyRateCache(store, settings, client=client, clock=clock or FakeClock())


def stored(rate: float, percentage: float = 0.0) -> InMemoryCurrencyConfigStore:
    return InMemoryCurrencyConfigStore(
        CurrencyConfig(last_rate=rate, conversion_percentage=percentage, last_fetched_at=datetime(2026, 1, 1))
    )


@pytest.mark.asyncio
async def test_convert_applies_rate_and_markup(settings: Settings) -> None:
    """1000 at rate 0.012 with a 5% markup is 12.6."""
    provider = CountingProvider()
    cache = make_cache(stored(0.012, percentage=5), settings, provider)

    conversion = await cache.convert(1000)

    assert conversion.converted == pytest.approx(12.6)
    assert conversion.rate == 0.012
    assert conversion.percentage == 5
    assert conversion.base == 1000
    assert conversion.base_currency == "INR"
    assert conversion.target_currency == "USD"
    assert provider.calls == 0


@pytest.mark.asyncio
async def test_transactional_conversion_rounds_to_four_places(settings: Settings) -> None:
    cache = make_cache(stored(0.0123456), settings, CountingProvider())

    display = await cache.convert(1)
    frozen = await cache.convert(1, transactional=True)

    assert display.converted == pytest.approx(0.0123456)
    assert frozen.converted == 0.0123


@pytest.mark.asyncio
async def test_empty_cache_refreshes_and_persists(
    settings: Settings, currency_store: InMemoryCurrencyConfigStore
) -> None:
    provider = CountingProvider(rate=0.0125)
    cache = make_cache(currency_store, settings, provider)

    conversion = await cache.convert(100)

    assert provider.calls == 1
    assert conversion.rate == 0.0125
    saved = currency_store.load()
    assert saved is not None
    assert saved.last_rate == 0.0125
    assert saved.last_fetched_at is not None


@pytest.mark.asyncio
async def test_zero_stored_rate_triggers_refresh(settings: Settings) -> None:
    provider = CountingProvider(rate=0.013)
    cache = make_cache(stored(0.0), settings, provider)

    conversion = await cache.convert(100)

    assert provider.calls == 1
    assert conversion.rate == 0.013


@pytest.mark.asyncio
async def test_provider_failure_falls_back_to_stored_rate(settings: Settings) -> None:
    store = stored(0.0118)
    cache = make_cache(store, settings, CountingProvider(status_code=500))

    rate = await cache.refresh()

    assert rate == 0.0118
    assert (await cache.convert(100)).rate == 0.0118


@pytest.mark.asyncio
async def test_provider_failure_without_stored_rate_uses_default(
    settings: Settings, currency_store: InMemoryCurrencyConfigStore
) -> None:
    cache = make_cache(currency_store, settings, CountingProvider(rate=-1))

    conversion = await cache.convert(1000)

    assert conversion.rate == settings.fallback_exchange_rate
    assert conversion.converted == pytest.approx(12.0)
    # Default rate is never persisted as if it were fetched
    assert currency_store.load() is None


@pytest.mark.asyncio
async def test_cache_serves_until_ttl_then_reloads_store(settings: Settings) -> None:
    clock = FakeClock()
    store = stored(0.012)
    cache = make_cache(store, settings, CountingProvider(), clock=clock)

    assert (await cache.convert(1)).rate == 0.012

    store.save_rate("INR", "USD", 0.02, datetime(2026, 1, 2))
    clock.advance(30)
    assert (await cache.convert(1)).rate == 0.012

    clock.advance(31)
    assert (await cache.convert(1)).rate == 0.02


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_refresh(
    settings: Settings, currency_store: InMemoryCurrencyConfigStore
) -> None:
    provider = CountingProvider(rate=0.0125)
    cache = make_cache(currency_store, settings, provider)

    results = await asyncio.gather(*(cache.convert(10) for _ in range(5)))

    assert provider.calls == 1
    assert all(r.rate == 0.0125 for r in results)


@pytest.mark.asyncio
async def test_explicit_refresh_updates_cached_rate(settings: Settings) -> None:
    provider = CountingProvider(rate=0.0131)
    cache = make_cache(stored(0.012), settings, provider)
    assert (await cache.convert(1)).rate == 0.012

    assert await cache.refresh() == 0.0131

    assert (await cache.convert(1)).rate == 0.0131


@pytest.mark.asyncio
async def test_update_percentage_persists_and_applies(settings: Settings) -> None:
    store = stored(0.012)
    cache = make_cache(store, settings, CountingProvider())
    await cache.convert(1)

    config = cache.update_conversion_percentage(10)

    assert config.conversion_percentage == 10
    assert (await cache.convert(1000)).converted == pytest.approx(13.2)


@pytest.mark.parametrize("percentage", [float("nan"), float("inf"), -150.0])
def test_update_percentage_rejects_invalid_values(
    settings: Settings, percentage: float
) -> None:
    cache = make_cache(stored(0.012), settings, CountingProvider())

    with pytest.raises(InvalidInputError):
        cache.update_conversion_percentage(percentage)


@pytest.mark.asyncio
async def test_current_config_is_none_before_any_write(
    settings: Settings, currency_store: InMemoryCurrencyConfigStore
) -> None:
    cache = make_cache(currency_store, settings, CountingProvider())

    assert await cache.current_config() is None


class FlakyStore(InMemoryCurrencyConfigStore):
    """Store whose reads or writes can be switched to fail."""

    def __init__(self, config: CurrencyConfig | None = None) -> None:
        super().__init__(config)
        self.fail_load = False
        self.fail_save = False
        self.load_threads: list[int] = []

    def load(self) -> CurrencyConfig | None:
        self.load_threads.append(threading.get_ident())
        if self.fail_load:
            raise RuntimeError("db down")
        return super().load()

    def save_rate(
        self, base_currency: str, target_currency: str, rate: float, fetched_at: datetime
    ) -> CurrencyConfig:
        if self.fail_save:
            raise RuntimeError("db down")
        return super().save_rate(base_currency, target_currency, rate, fetched_at)


@pytest.mark.asyncio
async def test_non_finite_provider_rate_is_never_stored(settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, content=b'{"result": NaN}', headers={"Content-Type": "application/json"}
        )

    store = stored(0.0118)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    cache = CurrencyRateCache(store, settings, client=client, clock=FakeClock())

    rate = await cache.refresh()

    assert rate == 0.0118
    assert (await cache.convert(1000)).converted == pytest.approx(11.8)
    saved = store.load()
    assert saved is not None and saved.last_rate == 0.0118


@pytest.mark.asyncio
async def test_store_write_failure_keeps_fetched_rate(settings: Settings) -> None:
    store = FlakyStore()
    store.fail_save = True
    provider = CountingProvider(rate=0.0125)
    cache = make_cache(store, settings, provider)

    conversion = await cache.convert(1000)

    assert conversion.rate == 0.0125
    assert conversion.converted == pytest.approx(12.5)
    assert (await cache.convert(1)).rate == 0.0125
    assert provider.calls == 1
    assert store.load() is None


@pytest.mark.asyncio
async def test_store_read_failure_refreshes_from_provider(settings: Settings) -> None:
    store = FlakyStore()
    store.fail_load = True
    cache = make_cache(store, settings, CountingProvider(rate=0.013))

    assert (await cache.convert(100)).rate == 0.013


@pytest.mark.asyncio
async def test_store_and_provider_down_uses_default(settings: Settings) -> None:
    store = FlakyStore()
    store.fail_load = True
    store.fail_save = True
    cache = make_cache(store, settings, CountingProvider(status_code=503))

    assert await cache.refresh() == settings.fallback_exchange_rate
    assert (await cache.convert(1000)).converted == pytest.approx(12.0)


@pytest.mark.asyncio
async def test_reload_failure_serves_previous_copy(settings: Settings) -> None:
    clock = FakeClock()
    store = FlakyStore(CurrencyConfig(last_rate=0.012, last_fetched_at=datetime(2026, 1, 1)))
    provider = CountingProvider(rate=0.02)
    cache = make_cache(store, settings, provider, clock=clock)
    assert (await cache.convert(1)).rate == 0.012

    store.fail_load = True
    clock.advance(61)

    assert (await cache.convert(1)).rate == 0.012
    assert provider.calls == 0


@pytest.mark.asyncio
async def test_store_reads_run_off_the_event_loop_thread(settings: Settings) -> None:
    store = FlakyStore(CurrencyConfig(last_rate=0.012))
    cache = make_cache(store, settings, CountingProvider())

    await cache.convert(1)

    assert store.load_threads
    assert threading.get_ident() not in store.load_threads
