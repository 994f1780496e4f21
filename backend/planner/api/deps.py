"""FastAPI dependencies wiring stores, the rate cache and the service.

In-memory stores are used when no DATABASE_URL is configured.
"""

from collections.abc import Generator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from backend.planner.config import get_settings
from backend.planner.currency.cache import CurrencyRateCache
from backend.planner.db.engine import get_session_factory
from backend.planner.db.inmemory import (
    InMemoryCatalog,
    InMemoryCurrencyConfigStore,
    InMemoryItineraryRepository,
)
from backend.planner.db.repositories import CurrencyConfigStore
from backend.planner.db.sql_repositories import (
    SqlCatalogReader,
    SqlCurrencyConfigStore,
    SqlItineraryRepository,
)
from backend.planner.services.itinerary_service import ItineraryService


@lru_cache
def get_inmemory_catalog() -> InMemoryCatalog:
    return InMemoryCatalog()


@lru_cache
def get_inmemory_itineraries() -> InMemoryItineraryRepository:
    return InMemoryItineraryRepository()


@lru_cache
def get_rate_cache() -> CurrencyRateCache:
    """Process-wide rate cache."""
    settings = get_settings()
    store: CurrencyConfigStore
    if settings.database_url:
        store = SqlCurrencyConfigStore(get_session_factory())
    else:
        store = InMemoryCurrencyConfigStore()
    return CurrencyRateCache(store, settings)


def get_itinerary_service(
    rate_cache: Annotated[CurrencyRateCache, Depends(get_rate_cache)],
) -> Generator[ItineraryService, None, None]:
    """Per-request service; SQL stores share one session for the request."""
    settings = get_settings()
    if not settings.database_url:
        yield ItineraryService(
            get_inmemory_catalog(), get_inmemory_itineraries(), rate_cache, settings
        )
        return

    with get_session_factory()() as session:
        yield ItineraryService(
            SqlCatalogReader(session), SqlItineraryRepository(session), rate_cache, settings
        )
