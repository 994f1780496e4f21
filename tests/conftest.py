"""Shared pytest fixtures for all test suites."""

import uuid

import pytest

from backend.planner.config import Settings
from backend.planner.db.context import RequestContext
from backend.planner.db.inmemory import (
    InMemoryCatalog,
    InMemoryCurrencyConfigStore,
    InMemoryItineraryRepository,
)
from backend.planner.models.catalog import Activity, City, Transfer
from backend.planner.models.common import (
    FlightType,
    PackageTier,
    PublishStatus,
    Role,
    TransferType,
)

PUBLISHED = PublishStatus.published


def _cities() -> list[City]:
    return [
        City(
            city_id="jaipur",
            name="Jaipur",
            destination_id="rajasthan",
            status=PUBLISHED,
            minimum_required_days=2,
            packages={PackageTier.days_7_8: 60000.0, PackageTier.days_9_10: 75000.0},
            transfers=[
                Transfer(type=TransferType.airport_pickup, price=1000.0),
                Transfer(type=TransferType.intercity, price=2000.0),
            ],
        ),
        City(
            city_id="udaipur",
            name="Udaipur",
            destination_id="rajasthan",
            status=PUBLISHED,
            minimum_required_days=3,
            packages={PackageTier.days_7_8: 48000.0},
            transfers=[Transfer(type=TransferType.airport_drop, price=1000.0)],
        ),
        City(city_id="goa", name="Goa", status=PublishStatus.draft),
        City(city_id="agra", name="Agra", status=PublishStatus.deleted),
    ]


def _activities() -> list[Activity]:
    return [
        Activity(
            activity_id="jai-dep",
            name="Flight to Jaipur",
            city_id="jaipur",
            price=4000.0,
            transfers=[Transfer(type=TransferType.airport_pickup, price=500.0)],
            is_flight=True,
            flight_type=FlightType.departure,
            status=PUBLISHED,
        ),
        Activity(
            activity_id="jai-fort",
            name="Amber Fort",
            city_id="jaipur",
            badge="Full Day",
            price=1500.0,
            transfers=[Transfer(type=TransferType.local, price=300.0)],
            status=PUBLISHED,
        ),
        Activity(
            activity_id="jai-palace",
            name="City Palace",
            city_id="jaipur",
            badge="Half Day",
            price=800.0,
            start_time="10:00",
            status=PUBLISHED,
        ),
        Activity(
            activity_id="jai-bazaar",
            name="Johari Bazaar",
            city_id="jaipur",
            badge="Quarter Day",
            price=200.0,
            status=PUBLISHED,
        ),
        Activity(
            activity_id="jai-hawa",
            name="Hawa Mahal",
            city_id="jaipur",
            badge="Qurate Day",
            price=300.0,
            status=PUBLISHED,
        ),
        Activity(
            activity_id="jai-draft",
            name="Unreleased Tour",
            city_id="jaipur",
            badge="Quarter Day",
            price=999.0,
        ),
        Activity(
            activity_id="udr-ret",
            name="Flight from Udaipur",
            city_id="udaipur",
            price=4500.0,
            is_flight=True,
            flight_type=FlightType.returning,
            status=PUBLISHED,
        ),
        Activity(
            activity_id="udr-lake",
            name="Lake Pichola Boat Ride",
            city_id="udaipur",
            badge="Half Day",
            price=900.0,
            transfers=[Transfer(type=TransferType.local, price=200.0)],
            status=PUBLISHED,
        ),
        Activity(
            activity_id="udr-palace",
            name="City Palace Udaipur",
            city_id="udaipur",
            badge="Full Day",
            price=1200.0,
            status=PUBLISHED,
        ),
        Activity(
            activity_id="udr-garden",
            name="Saheliyon ki Bari",
            city_id="udaipur",
            badge="Quarter Day",
            price=150.0,
            status=PUBLISHED,
        ),
    ]


@pytest.fixture
def catalog() -> InMemoryCatalog:
    """Two published Rajasthan cities with flights and activities.

    A 6-day Jaipur -> Udaipur trip allocates 3 days to each city and
    schedules:
        day 1: jai-dep, jai-palace, jai-bazaar
        day 2: jai-fort
        day 3: jai-hawa
        day 4: udr-palace
        day 5: udr-lake, udr-garden
        day 6: udr-ret
    """
    return InMemoryCatalog(cities=_cities(), activities=_activities())


@pytest.fixture
def itinerary_repo() -> InMemoryItineraryRepository:
    return InMemoryItineraryRepository()


@pytest.fixture
def currency_store() -> InMemoryCurrencyConfigStore:
    return InMemoryCurrencyConfigStore()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment."""
    return Settings(
        _env_file=None,
        database_url=None,
        exchange_rate_base_url="https://rates.test",
        fallback_exchange_rate=0.012,
        currency_cache_ttl_seconds=60,
    )


@pytest.fixture
def traveler() -> RequestContext:
    return RequestContext(user_id=uuid.UUID("00000000-0000-0000-0000-0000000000aa"))


@pytest.fixture
def staff() -> RequestContext:
    return RequestContext(
        user_id=uuid.UUID("00000000-0000-0000-0000-0000000000ff"), role=Role.staff
    )
