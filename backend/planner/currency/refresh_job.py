"""Daily background exchange rate refresh.

Only the cached/stored rate is updated. Stored itinerary pricing is kept in
the base currency and booking quotes are frozen, so nothing is recomputed.
"""

import asyncio
import logging
from datetime import datetime, timedelta

from backend.planner.currency.cache import CurrencyRateCache

logger = logging.getLogger(__name__)


def seconds_until_next_run(now: datetime, hour: int) -> float:
    """Seconds from ``now`` until the next ``hour``:00 (tomorrow if already past)."""
    next_run = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if next_run <= now:
        next_run += timedelta(days=1)
    return (next_run - now).total_seconds()


async def run_daily_rate_refresh(
    cache: CurrencyRateCache,
    hour: int,
    stop_event: asyncio.Event,
) -> None:
    """Refresh the rate once a day at ``hour`` until ``stop_event`` is set."""
    logger.info("Rate refresh job started, runs daily at %02d:00", hour)

    while not stop_event.is_set():
        delay = seconds_until_next_run(datetime.now(), hour)
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

        if stop_event.is_set():
            break

        try:
            rate = await cache.refresh()
        except Exception:
            logger.exception("Scheduled rate refresh failed, retrying at next run")
            continue
        logger.info("Scheduled rate refresh complete: rate=%s", rate)

    logger.info("Rate refresh job stopped")
