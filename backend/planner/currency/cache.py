"""Process-wide exchange rate cache over the durable CurrencyConfig store.

Readers always get a number: a fresh rate, the last stored rate, or the
configured default. Provider and store failures are logged and counted here
and never reach the pricing caller. Store calls run in a worker thread so a
slow database never stalls the event loop.
"""

import asyncio
import logging
import math
import time
from collections.abc import Callable
from datetime import datetime

import httpx

from backend.planner.config import Settings
from backend.planner.currency.provider import fetch_exchange_rate
from backend.planner.db.repositories import CurrencyConfigStore
from backend.planner.errors import ExternalServiceUnavailableError, InvalidInputError
from backend.planner.models.currency import Conversion, ConversionContext, CurrencyConfig
from backend.planner.utils.logging import StructuredEventLogger
from backend.planner.utils.metrics import PrometheusPlannerMetrics

logger = logging.getLogger(__name__)

_TRANSACTIONAL_DECIMALS = 4


def convert_amount(
    ctx: ConversionContext, base_amount: float, *, transactional: bool = False
) -> Conversion:
    """Convert a base-currency amount with an already resolved rate and markup.

    ``converted = base_amount * rate * (1 + percentage / 100)``. Display
    aggregation keeps full precision; transactional use (booking freeze)
    rounds to 4 decimal places.
    """
    converted = base_amount * ctx.rate * (1 + ctx.percentage / 100)
    if transactional:
        converted = round(converted, _TRANSACTIONAL_DECIMALS)

    return Conversion(
        base=base_amount,
        converted=converted,
        rate=ctx.rate,
        percentage=ctx.percentage,
        base_currency=ctx.base_currency,
        target_currency=ctx.target_currency,
    )


class CurrencyRateCache:
    """TTL cache of the current rate and admin markup."""

    def __init__(
        self,
        store: CurrencyConfigStore,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
        metrics: PrometheusPlannerMetrics | None = None,
    ) -> None:
        self._store = store
        self._settings = settings
        self._client = client
        self._clock = clock
        self._metrics = metrics or PrometheusPlannerMetrics()
        self._events = StructuredEventLogger(logger)
        self._config: CurrencyConfig | None = None
        self._cached_at: float | None = None
        self._refresh_lock = asyncio.Lock()

    def _remember(self, config: CurrencyConfig) -> None:
        self._config = config
        self._cached_at = self._clock()

    def _is_fresh(self) -> bool:
        if self._config is None or self._cached_at is None:
            return False
        return self._clock() - self._cached_at < self._settings.currency_cache_ttl_seconds

    def invalidate(self) -> None:
        """Drop the in-memory copy; the next read goes to the store."""
        self._config = None
        self._cached_at = None

    async def _load_stored(self) -> CurrencyConfig | None:
        """Stored config, or None when there is none or the store failed."""
        try:
            return await asyncio.to_thread(self._store.load)
        except Exception:
            logger.exception("Failed to load currency config from store")
            return None

    async def current_config(self) -> CurrencyConfig | None:
        """Cached config, reloaded from the store once the TTL has passed.

        If the reload fails the previous copy keeps being served.
        """
        if self._is_fresh():
            return self._config

        try:
            stored = await asyncio.to_thread(self._store.load)
        except Exception:
            logger.exception("Failed to reload currency config, serving cached copy")
            return self._config

        if stored is None:
            self.invalidate()
        else:
            self._remember(stored)
        return self._config

    async def get_context(self) -> ConversionContext:
        """Rate and markup for a conversion, refreshing first if there is no rate."""
        config = await self.current_config()
        if config is None or config.last_rate <= 0:
            async with self._refresh_lock:
                # Another caller may have refreshed while we waited
                config = await self.current_config()
                if config is None or config.last_rate <= 0:
                    await self.refresh()
                    config = self._config

        assert config is not None
        return ConversionContext(
            rate=config.last_rate,
            percentage=config.conversion_percentage,
            base_currency=config.base_currency,
            target_currency=config.target_currency,
        )

    async def convert(self, base_amount: float, *, transactional: bool = False) -> Conversion:
        """Convert a base-currency amount into the target currency."""
        ctx = await self.get_context()
        return convert_amount(ctx, base_amount, transactional=transactional)

    async def _fallback_rate(self) -> tuple[float, str]:
        stored = await self._load_stored()
        if stored is not None and stored.last_rate > 0:
            return stored.last_rate, "stored"
        return self._settings.fallback_exchange_rate, "default"

    async def _keep_in_memory(self, **update: object) -> None:
        current = self._config or await self._load_stored() or CurrencyConfig(
            base_currency=self._settings.base_currency,
            target_currency=self._settings.target_currency,
        )
        self._remember(current.model_copy(update=update))

    async def refresh(self) -> float:
        """Fetch a new rate from the provider and cache it.

        On success the rate is persisted. On provider failure the last stored
        rate (or the configured default) is cached in memory only, so the
        stored record keeps reflecting the last real fetch. If persisting a
        fetched rate fails, the rate is still served from memory.

        Returns:
            Rate now in effect
        """
        base = self._settings.base_currency
        target = self._settings.target_currency
        start = time.perf_counter()

        try:
            rate = await fetch_exchange_rate(
                base,
                target,
                base_url=self._settings.exchange_rate_base_url,
                api_key=self._settings.exchange_rate_api_key,
                timeout_seconds=self._settings.rate_fetch_timeout_ms / 1000,
                client=self._client,
            )
        except ExternalServiceUnavailableError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            rate, source = await self._fallback_rate()
            self._metrics.record_fx_refresh("fallback", latency_ms)
            self._events.log_rate_refresh(
                "fallback", rate, source, latency_ms, error_reason=e.message
            )
            await self._keep_in_memory(last_rate=rate)
            return rate

        latency_ms = (time.perf_counter() - start) * 1000
        fetched_at = datetime.utcnow()
        try:
            config = await asyncio.to_thread(
                self._store.save_rate, base, target, rate, fetched_at
            )
        except Exception as e:
            self._metrics.record_fx_refresh("persist_failed", latency_ms)
            self._events.log_rate_refresh(
                "persist_failed",
                rate,
                "provider",
                latency_ms,
                error_reason=f"{type(e).__name__}: {e}",
            )
            await self._keep_in_memory(last_rate=rate, last_fetched_at=fetched_at)
            return rate

        self._remember(config)
        self._metrics.record_fx_refresh("success", latency_ms)
        self._events.log_rate_refresh("success", rate, "provider", latency_ms)
        return rate

    def update_conversion_percentage(self, percentage: float) -> CurrencyConfig:
        """Persist a new admin markup and drop the cached copy.

        Raises:
            InvalidInputError: Non-finite value or a markup below -100%
        """
        if not math.isfinite(percentage) or percentage < -100:
            raise InvalidInputError(
                "conversion_percentage must be a number not below -100",
                {"field": "conversion_percentage", "value": percentage},
            )

        config = self._store.save_percentage(percentage)
        self.invalidate()
        logger.info("Conversion percentage set to %s", percentage)
        return config
