"""Split a trip's days across the selected cities."""

import logging

from backend.planner.db.repositories import CatalogReader
from backend.planner.errors import CapacityExceededError, InvalidInputError
from backend.planner.models.itinerary import CityAllocation

logger = logging.getLogger(__name__)


def allocate_days(total_days: int, city_ids: list[str], catalog: CatalogReader) -> list[CityAllocation]:
    """Allocate ``total_days`` across cities in selection order.

    Every city first receives its ``minimum_required_days``; the days left
    over are handed out one at a time, round-robin from the first city.

    Args:
        total_days: Trip length in days
        city_ids: Selected city IDs in visiting order
        catalog: Catalog reader for city minimums

    Returns:
        One CityAllocation per city, ``order`` matching the input position

    Raises:
        InvalidInputError: Empty/duplicate selection, bad trip length, or
            missing/unpublished cities
        CapacityExceededError: Sum of city minimums exceeds ``total_days``
    """
    if not city_ids:
        raise InvalidInputError("No cities selected", {"field": "city_ids"})
    if total_days < 1:
        raise InvalidInputError(
            "Trip length must be at least 1 day", {"field": "total_days", "value": total_days}
        )

    duplicates = sorted({c for c in city_ids if city_ids.count(c) > 1})
    if duplicates:
        raise InvalidInputError(
            "Each city can only be selected once", {"duplicate_city_ids": duplicates}
        )

    cities = catalog.find_published_cities(city_ids)
    missing = [c for c in city_ids if c not in cities]
    if missing:
        raise InvalidInputError(
            "Some selected cities are invalid or unpublished", {"city_ids": missing}
        )

    total_minimum = sum(cities[c].minimum_required_days for c in city_ids)
    if total_minimum > total_days:
        raise CapacityExceededError(
            f"Selected cities require minimum {total_minimum} days, but package allows only "
            f"{total_days} days. Please reduce number of cities.",
            {"required_days": total_minimum, "total_days": total_days},
        )

    allocated = [cities[c].minimum_required_days for c in city_ids]
    remaining = total_days - total_minimum
    index = 0
    while remaining > 0:
        allocated[index] += 1
        remaining -= 1
        index = (index + 1) % len(allocated)

    logger.debug("Allocated %s days across %s cities: %s", total_days, len(city_ids), allocated)

    return [
        CityAllocation(city_id=city_id, allocated_days=days, order=i + 1)
        for i, (city_id, days) in enumerate(zip(city_ids, allocated))
    ]
