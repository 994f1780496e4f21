"""Day-by-day activity scheduling under a per-day capacity budget.

Two entry points:

- ``build_schedule`` places each city's fixed flight legs, then greedily fills
  the remaining capacity of every day with the city's published activities,
  largest first.
- ``replace_day_activities`` validates a manual edit of one day's activity set
  and returns the replacement day without touching the input itinerary.

An activity appears at most once per itinerary. Initial generation threads an
explicit ``used_activity_ids`` set through both phases; edits check the other
days of the itinerary instead.
"""

import logging
from dataclasses import dataclass, field
import datetime as dt

from backend.planner.db.repositories import CatalogReader
from backend.planner.errors import (
    CapacityExceededError,
    CityMismatchError,
    DuplicateAcrossDaysError,
    DuplicateInRequestError,
    FlightImmutableError,
    NotFoundError,
)
from backend.planner.models.catalog import Activity
from backend.planner.models.common import (
    DAY_CAPACITY,
    DEFAULT_START_TIME,
    FLIGHT_WEIGHT,
    RETURN_FLIGHT_START_TIME,
    FlightType,
)
from backend.planner.models.itinerary import (
    CityAllocation,
    DayPlan,
    Itinerary,
    RequestedActivity,
    ScheduledActivity,
)

logger = logging.getLogger(__name__)

_EPSILON = 1e-9


@dataclass
class DayDraft:
    """Mutable day under construction."""

    day_number: int
    city_id: str
    date: dt.date | None = None
    capacity_used: float = 0.0
    activities: list[ScheduledActivity] = field(default_factory=list)

    @property
    def remaining(self) -> float:
        return DAY_CAPACITY - self.capacity_used

    def add(self, activity: ScheduledActivity) -> None:
        self.activities.append(activity)
        self.capacity_used += activity.duration_weight

    def to_plan(self) -> DayPlan:
        return DayPlan(
            day_number=self.day_number,
            city_id=self.city_id,
            date=self.date,
            capacity_used=self.capacity_used,
            activities=list(self.activities),
        )


def schedule_activity(
    activity: Activity,
    order: int,
    *,
    weight: float | None = None,
    default_start: str = DEFAULT_START_TIME,
) -> ScheduledActivity:
    """Snapshot a catalog activity into a scheduled slot."""
    return ScheduledActivity(
        activity_id=activity.activity_id,
        name=activity.name,
        duration_weight=weight if weight is not None else activity.duration_weight,
        start_time=activity.start_time or default_start,
        price=activity.price,
        transfer_charge=activity.transfer_total,
        city_id=activity.city_id,
        is_flight=activity.is_flight,
        flight_type=activity.flight_type,
        order=order,
    )


def build_schedule(
    allocations: list[CityAllocation],
    departure_date: dt.date | None,
    catalog: CatalogReader,
) -> list[DayPlan]:
    """Build the full day plan for an allocated trip.

    Args:
        allocations: City allocations in visiting order
        departure_date: First calendar day of the trip, if known
        catalog: Catalog reader for flights and activities

    Returns:
        Contiguously numbered DayPlans, one per allocated day
    """
    days: list[DayDraft] = []
    used_activity_ids: set[str] = set()
    current_day = 1

    for alloc in sorted(allocations, key=lambda a: a.order):
        departure = catalog.find_flight(alloc.city_id, FlightType.departure)
        returning = catalog.find_flight(alloc.city_id, FlightType.returning)

        city_days: list[DayDraft] = []
        for offset in range(alloc.allocated_days):
            day_number = current_day + offset
            city_days.append(
                DayDraft(
                    day_number=day_number,
                    city_id=alloc.city_id,
                    date=departure_date + dt.timedelta(days=day_number - 1) if departure_date else None,
                )
            )

        # Departure leads the city's first day
        if departure and departure.activity_id not in used_activity_ids:
            city_days[0].add(schedule_activity(departure, order=1, weight=FLIGHT_WEIGHT))
            used_activity_ids.add(departure.activity_id)

        # Return is appended to the city's last day
        if returning and returning.activity_id not in used_activity_ids:
            last = city_days[-1]
            last.add(
                schedule_activity(
                    returning,
                    order=len(last.activities) + 1,
                    weight=FLIGHT_WEIGHT,
                    default_start=RETURN_FLIGHT_START_TIME,
                )
            )
            used_activity_ids.add(returning.activity_id)

        days.extend(city_days)
        current_day += alloc.allocated_days

    fill_default_activities(days, catalog, used_activity_ids)

    logger.info(
        "Built schedule: %s days, %s activities placed", len(days), len(used_activity_ids)
    )
    return [d.to_plan() for d in days]


def fill_default_activities(
    days: list[DayDraft],
    catalog: CatalogReader,
    used_activity_ids: set[str],
) -> None:
    """Fill each day's remaining capacity, largest activities first.

    Candidates are the day's city's published non-flight activities not yet in
    ``used_activity_ids``; ties keep catalog order. A candidate that does not
    fit is skipped and smaller ones are still tried. ``days`` and
    ``used_activity_ids`` are updated in place.
    """
    by_city: dict[str, list[Activity]] = {}

    for day in days:
        if day.city_id not in by_city:
            by_city[day.city_id] = sorted(
                catalog.find_published_activities_by_city(day.city_id),
                key=lambda a: a.duration_weight,
                reverse=True,
            )

        for activity in by_city[day.city_id]:
            if day.remaining <= _EPSILON:
                break
            if activity.activity_id in used_activity_ids:
                continue
            if activity.duration_weight <= day.remaining + _EPSILON:
                day.add(schedule_activity(activity, order=len(day.activities) + 1))
                used_activity_ids.add(activity.activity_id)


def _resolve_requested(
    requested: RequestedActivity, day: DayPlan, catalog: CatalogReader
) -> ScheduledActivity:
    """Existing slots keep their snapshot; new ones come from the catalog."""
    existing = next((a for a in day.activities if a.activity_id == requested.activity_id), None)
    if existing is not None:
        return existing

    activity = catalog.find_published_activity(requested.activity_id)
    if activity is None:
        raise NotFoundError(
            f"Activity {requested.activity_id} not found",
            {"activity_id": requested.activity_id},
        )
    return schedule_activity(activity, order=1)


def replace_day_activities(
    itinerary: Itinerary,
    day_number: int,
    requested: list[RequestedActivity],
    catalog: CatalogReader,
) -> DayPlan:
    """Validate and build a replacement activity set for one day.

    Flights already on the day are kept and come first; ``requested`` lists
    only non-flight activities. Requested activities are ordered by their
    suggested ``order`` (unset last), insertion order breaking ties.

    Args:
        itinerary: Current itinerary (not modified)
        day_number: Day to edit
        requested: Non-flight activities wanted on the day
        catalog: Catalog reader for newly added activities

    Returns:
        New DayPlan for ``day_number``

    Raises:
        NotFoundError: Unknown day or activity
        DuplicateInRequestError: Same activity requested twice
        FlightImmutableError: A requested activity is a flight
        DuplicateAcrossDaysError: Activity already on another day
        CityMismatchError: Activity belongs to another city
        CapacityExceededError: First activity that would overflow the day
    """
    day = itinerary.find_day(day_number)
    if day is None:
        raise NotFoundError(
            f"Day {day_number} not found in itinerary",
            {"itinerary_id": str(itinerary.itinerary_id), "day_number": day_number},
        )

    seen: set[str] = set()
    for item in requested:
        if item.activity_id in seen:
            raise DuplicateInRequestError(
                f"Activity {item.activity_id} is requested more than once",
                {"activity_id": item.activity_id, "day_number": day_number},
            )
        seen.add(item.activity_id)

    scheduled_elsewhere = {
        a.activity_id: d.day_number
        for d in itinerary.days
        if d.day_number != day_number
        for a in d.activities
        if not a.is_flight
    }

    ranked = sorted(
        enumerate(requested),
        key=lambda pair: (pair[1].order is None, pair[1].order or 0, pair[0]),
    )

    candidates: list[ScheduledActivity] = []
    for _, item in ranked:
        candidate = _resolve_requested(item, day, catalog)
        if candidate.is_flight:
            raise FlightImmutableError(
                f"Flight '{candidate.name}' cannot be added or removed manually",
                {"activity_id": candidate.activity_id, "day_number": day_number},
            )
        if candidate.activity_id in scheduled_elsewhere:
            other_day = scheduled_elsewhere[candidate.activity_id]
            raise DuplicateAcrossDaysError(
                f"Activity '{candidate.name}' is already scheduled on day {other_day}",
                {
                    "activity_id": candidate.activity_id,
                    "day_number": day_number,
                    "scheduled_on_day": other_day,
                },
            )
        if candidate.city_id != day.city_id:
            raise CityMismatchError(
                f"Activity '{candidate.name}' belongs to a different city than day {day_number}",
                {
                    "activity_id": candidate.activity_id,
                    "activity_city_id": candidate.city_id,
                    "day_city_id": day.city_id,
                },
            )
        candidates.append(candidate)

    draft = DayDraft(day_number=day.day_number, city_id=day.city_id, date=day.date)
    for flight in sorted(day.flights, key=lambda a: a.order):
        draft.add(flight.model_copy(update={"order": len(draft.activities) + 1}))

    for candidate in candidates:
        if candidate.duration_weight > draft.remaining + _EPSILON:
            raise CapacityExceededError(
                f"Adding '{candidate.name}' exceeds day {day_number} capacity: "
                f"{draft.capacity_used} + {candidate.duration_weight} > {DAY_CAPACITY}",
                {
                    "activity_id": candidate.activity_id,
                    "day_number": day_number,
                    "capacity_used": draft.capacity_used,
                    "duration_weight": candidate.duration_weight,
                    "capacity": DAY_CAPACITY,
                },
            )
        draft.add(candidate.model_copy(update={"order": len(draft.activities) + 1}))

    return draft.to_plan()
