"""Repository protocol interfaces for data access."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from backend.planner.models.catalog import Activity, City
from backend.planner.models.common import FlightType
from backend.planner.models.currency import CurrencyConfig
from backend.planner.models.itinerary import Itinerary


class CatalogReader(Protocol):
    """Read-only access to cities and activities.

    Readers never return ``deleted`` records.
    """

    def find_city(self, city_id: str) -> City | None:
        """Get a non-deleted city by ID, any publish state."""
        ...

    def find_published_city(self, city_id: str) -> City | None:
        """Get a published city by ID."""
        ...

    def find_published_cities(self, city_ids: list[str]) -> dict[str, City]:
        """Get published cities keyed by ID. Missing IDs are absent from the result."""
        ...

    def find_activity(self, activity_id: str) -> Activity | None:
        """Get a non-deleted activity by ID, any publish state."""
        ...

    def find_published_activity(self, activity_id: str) -> Activity | None:
        """Get a published activity by ID."""
        ...

    def find_published_activities_by_city(self, city_id: str) -> list[Activity]:
        """Published non-flight activities of a city, in catalog order."""
        ...

    def find_flight(self, city_id: str, flight_type: FlightType) -> Activity | None:
        """First published flight of ``flight_type`` for a city."""
        ...


class ItineraryRepository(Protocol):
    """Repository for itinerary operations."""

    def save(self, itinerary: Itinerary) -> Itinerary:
        """Store a new itinerary.

        Args:
            itinerary: Itinerary to store (version 1)

        Returns:
            Stored itinerary
        """
        ...

    def get(self, itinerary_id: UUID) -> Itinerary | None:
        """Get itinerary by ID.

        Args:
            itinerary_id: Itinerary ID

        Returns:
            Itinerary or None if not found
        """
        ...

    def list_for_owner(self, owner_id: UUID, limit: int = 50) -> list[Itinerary]:
        """List an owner's itineraries, newest first."""
        ...

    def list_all(self, limit: int = 50) -> list[Itinerary]:
        """List all itineraries, newest first."""
        ...

    def update(self, itinerary: Itinerary, expected_version: int) -> Itinerary:
        """Replace a stored itinerary if nobody changed it in between.

        Allocations, days and pricing are written together.

        Args:
            itinerary: New itinerary state
            expected_version: Version the caller read

        Returns:
            Stored itinerary with its version bumped

        Raises:
            NotFoundError: If the itinerary does not exist
            ConcurrentModificationError: If the stored version differs
        """
        ...


class CurrencyConfigStore(Protocol):
    """Durable singleton store for the exchange rate configuration."""

    def load(self) -> CurrencyConfig | None:
        """Get the stored config, or None when nothing was ever written."""
        ...

    def save_rate(
        self, base_currency: str, target_currency: str, rate: float, fetched_at: datetime
    ) -> CurrencyConfig:
        """Upsert the last fetched rate."""
        ...

    def save_percentage(self, percentage: float) -> CurrencyConfig:
        """Upsert the admin markup percentage."""
        ...
