"""In-memory implementations of repository interfaces."""

import threading
from datetime import datetime
from uuid import UUID

from backend.planner.errors import ConcurrentModificationError, NotFoundError
from backend.planner.models.catalog import Activity, City
from backend.planner.models.common import FlightType, PublishStatus
from backend.planner.models.currency import CurrencyConfig
from backend.planner.models.itinerary import Itinerary


class InMemoryCatalog:
    """In-memory implementation of CatalogReader."""

    def __init__(self, cities: list[City] | None = None, activities: list[Activity] | None = None) -> None:
        self._cities: dict[str, City] = {}
        self._activities: dict[str, Activity] = {}
        for city in cities or []:
            self.add_city(city)
        for activity in activities or []:
            self.add_activity(activity)

    def add_city(self, city: City) -> None:
        self._cities[city.city_id] = city

    def add_activity(self, activity: Activity) -> None:
        self._activities[activity.activity_id] = activity

    def find_city(self, city_id: str) -> City | None:
        city = self._cities.get(city_id)
        if city is None or city.status == PublishStatus.deleted:
            return None
        return city

    def find_published_city(self, city_id: str) -> City | None:
        city = self._cities.get(city_id)
        if city is None or city.status != PublishStatus.published:
            return None
        return city

    def find_published_cities(self, city_ids: list[str]) -> dict[str, City]:
        found: dict[str, City] = {}
        for city_id in city_ids:
            city = self.find_published_city(city_id)
            if city is not None:
                found[city_id] = city
        return found

    def find_activity(self, activity_id: str) -> Activity | None:
        activity = self._activities.get(activity_id)
        if activity is None or activity.status == PublishStatus.deleted:
            return None
        return activity

    def find_published_activity(self, activity_id: str) -> Activity | None:
        activity = self._activities.get(activity_id)
        if activity is None or activity.status != PublishStatus.published:
            return None
        return activity

    def find_published_activities_by_city(self, city_id: str) -> list[Activity]:
        return [
            a
            for a in self._activities.values()
            if a.city_id == city_id and not a.is_flight and a.status == PublishStatus.published
        ]

    def find_flight(self, city_id: str, flight_type: FlightType) -> Activity | None:
        return next(
            (
                a
                for a in self._activities.values()
                if a.city_id == city_id
                and a.is_flight
                and a.flight_type == flight_type
                and a.status == PublishStatus.published
            ),
            None,
        )


class InMemoryItineraryRepository:
    """In-memory implementation of ItineraryRepository."""

    def __init__(self) -> None:
        self._itineraries: dict[UUID, Itinerary] = {}
        self._lock = threading.Lock()

    def save(self, itinerary: Itinerary) -> Itinerary:
        stored = itinerary.model_copy(deep=True)
        with self._lock:
            self._itineraries[stored.itinerary_id] = stored
        return stored.model_copy(deep=True)

    def get(self, itinerary_id: UUID) -> Itinerary | None:
        itinerary = self._itineraries.get(itinerary_id)
        if itinerary is None:
            return None
        return itinerary.model_copy(deep=True)

    def list_for_owner(self, owner_id: UUID, limit: int = 50) -> list[Itinerary]:
        owned = [i for i in self._itineraries.values() if i.owner_id == owner_id]
        owned.sort(key=lambda i: i.created_at, reverse=True)
        return [i.model_copy(deep=True) for i in owned[:limit]]

    def list_all(self, limit: int = 50) -> list[Itinerary]:
        results = sorted(self._itineraries.values(), key=lambda i: i.created_at, reverse=True)
        return [i.model_copy(deep=True) for i in results[:limit]]

    def update(self, itinerary: Itinerary, expected_version: int) -> Itinerary:
        with self._lock:
            current = self._itineraries.get(itinerary.itinerary_id)
            if current is None:
                raise NotFoundError(
                    "Itinerary not found", {"itinerary_id": str(itinerary.itinerary_id)}
                )
            if current.version != expected_version:
                raise ConcurrentModificationError(
                    "Itinerary was modified by another request",
                    {
                        "itinerary_id": str(itinerary.itinerary_id),
                        "expected_version": expected_version,
                        "actual_version": current.version,
                    },
                )
            stored = itinerary.model_copy(
                update={"version": current.version + 1, "updated_at": datetime.utcnow()},
                deep=True,
            )
            self._itineraries[stored.itinerary_id] = stored
        return stored.model_copy(deep=True)


class InMemoryCurrencyConfigStore:
    """In-memory implementation of CurrencyConfigStore."""

    def __init__(self, config: CurrencyConfig | None = None) -> None:
        self._config = config

    def load(self) -> CurrencyConfig | None:
        if self._config is None:
            return None
        return self._config.model_copy()

    def save_rate(
        self, base_currency: str, target_currency: str, rate: float, fetched_at: datetime
    ) -> CurrencyConfig:
        current = self._config or CurrencyConfig()
        self._config = current.model_copy(
            update={
                "base_currency": base_currency,
                "target_currency": target_currency,
                "last_rate": rate,
                "last_fetched_at": fetched_at,
            }
        )
        return self._config.model_copy()

    def save_percentage(self, percentage: float) -> CurrencyConfig:
        current = self._config or CurrencyConfig()
        self._config = current.model_copy(update={"conversion_percentage": percentage})
        return self._config.model_copy()
