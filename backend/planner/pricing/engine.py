"""Itinerary pricing in the base currency.

Stored pricing is always computed from price snapshots; a caller may ask for
live resolution, in which case every scheduled activity is presented as an
``ActivityReference`` and resolved against the catalog first.
"""

import logging

from backend.planner.db.repositories import CatalogReader
from backend.planner.errors import InvalidInputError
from backend.planner.models.common import tier_for_days
from backend.planner.models.itinerary import Itinerary
from backend.planner.models.pricing import (
    ActivityReference,
    ActivitySnapshot,
    PricedActivity,
    PricingBreakdown,
    PricingResult,
)

logger = logging.getLogger(__name__)


def priced_activities(itinerary: Itinerary, *, resolve_live: bool = False) -> list[PricedActivity]:
    """Present every scheduled activity in a form the engine can price."""
    priced: list[PricedActivity] = []
    for day in itinerary.days:
        for activity in day.activities:
            snapshot = activity.snapshot()
            if resolve_live:
                priced.append(ActivityReference(activity_id=activity.activity_id, fallback=snapshot))
            else:
                priced.append(snapshot)
    return priced


def resolve_activity(priced: PricedActivity, catalog: CatalogReader) -> ActivitySnapshot:
    """Resolve a reference to a fresh snapshot; snapshots pass through."""
    if isinstance(priced, ActivitySnapshot):
        return priced

    activity = catalog.find_activity(priced.activity_id)
    if activity is None:
        logger.warning(
            "Activity %s no longer resolvable, pricing from stored snapshot", priced.activity_id
        )
        return priced.fallback

    return ActivitySnapshot(
        activity_id=activity.activity_id,
        price=activity.price,
        transfer_charge=activity.transfer_total,
    )


def calculate_pricing(
    itinerary: Itinerary,
    catalog: CatalogReader,
    *,
    base_currency: str = "INR",
    resolve_live: bool = False,
) -> PricingResult:
    """Aggregate package, transfer and activity costs.

    The selected tier price is a whole-trip price, so each city is charged
    ``tier_price / total_days * allocated_days``. City transfers are charged
    once per stay.

    Args:
        itinerary: Itinerary with allocations and days in place
        catalog: Catalog reader for cities (and activities when resolving live)
        base_currency: Currency code stamped on the result
        resolve_live: Re-read activity prices from the catalog

    Returns:
        PricingResult in the base currency

    Raises:
        InvalidInputError: Traveler count below 1
    """
    if itinerary.total_travelers < 1:
        raise InvalidInputError(
            "Traveler count must be at least 1",
            {"field": "total_travelers", "value": itinerary.total_travelers},
        )

    tier = itinerary.selected_package or tier_for_days(itinerary.total_days)
    breakdown = PricingBreakdown()

    for alloc in itinerary.city_allocations:
        city = catalog.find_city(alloc.city_id)
        if city is None:
            logger.warning(
                "City %s not found while pricing itinerary %s",
                alloc.city_id,
                itinerary.itinerary_id,
            )
            continue

        tier_price = city.package_price(tier)
        if tier_price is None:
            logger.warning(
                "City %s has no price for package %s",
                city.city_id,
                tier.value if tier else None,
            )
            tier_price = 0.0

        per_day_cost = tier_price / itinerary.total_days
        breakdown.city_package_cost += per_day_cost * alloc.allocated_days
        breakdown.city_transfer_charges += city.transfer_total

    for priced in priced_activities(itinerary, resolve_live=resolve_live):
        snapshot = resolve_activity(priced, catalog)
        breakdown.activity_cost += snapshot.price
        breakdown.activity_transfer_charges += snapshot.transfer_charge

    per_person_cost = breakdown.per_person_cost
    return PricingResult(
        per_person_cost=per_person_cost,
        total_cost=per_person_cost * itinerary.total_travelers,
        currency=base_currency,
        breakdown=breakdown,
    )
