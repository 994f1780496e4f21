"""Itinerary models - allocations, day plans and the editable itinerary record."""

import math
import uuid
import datetime as dt

from pydantic import BaseModel, Field, field_validator, model_validator

from backend.planner.models.common import (
    DAY_CAPACITY,
    FlightType,
    ItineraryStatus,
    PackageTier,
)
from backend.planner.models.pricing import ActivitySnapshot, PricingResult


class CityAllocation(BaseModel):
    """Days assigned to one city, in visiting order."""

    city_id: str
    allocated_days: int = Field(..., ge=1)
    order: int = Field(..., ge=1)


class ScheduledActivity(BaseModel):
    """Activity placed on a day, with a price snapshot."""

    activity_id: str
    name: str
    duration_weight: float = Field(..., gt=0, le=DAY_CAPACITY)
    start_time: str
    price: float = 0.0
    transfer_charge: float = 0.0
    city_id: str
    is_flight: bool = False
    flight_type: FlightType | None = None
    order: int = Field(..., ge=1)

    def snapshot(self) -> ActivitySnapshot:
        return ActivitySnapshot(
            activity_id=self.activity_id,
            price=self.price,
            transfer_charge=self.transfer_charge,
        )


class DayPlan(BaseModel):
    """Plan for a single day of the trip."""

    day_number: int = Field(..., ge=1)
    city_id: str
    date: dt.date | None = None
    capacity_used: float = Field(default=0.0, ge=0)
    activities: list[ScheduledActivity] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_capacity(self) -> "DayPlan":
        """Capacity must equal the placed weights and stay within one day."""
        total = sum(a.duration_weight for a in self.activities)
        if not math.isclose(total, self.capacity_used, abs_tol=1e-9):
            raise ValueError(
                f"capacity_used {self.capacity_used} does not match activity weights {total} "
                f"on day {self.day_number}"
            )
        if self.capacity_used > DAY_CAPACITY + 1e-9:
            raise ValueError(f"day {self.day_number} exceeds capacity: {self.capacity_used}")
        return self

    @field_validator("activities")
    @classmethod
    def validate_unique_orders(cls, v: list[ScheduledActivity]) -> list[ScheduledActivity]:
        """Orders are unique within a day."""
        orders = [a.order for a in v]
        if len(orders) != len(set(orders)):
            raise ValueError(f"duplicate activity order in day: {orders}")
        return v

    @property
    def flights(self) -> list[ScheduledActivity]:
        return [a for a in self.activities if a.is_flight]


class Itinerary(BaseModel):
    """Persisted itinerary owned by one traveler."""

    itinerary_id: uuid.UUID = Field(default_factory=uuid.uuid4)
    owner_id: uuid.UUID
    destination_id: str | None = None
    status: ItineraryStatus = ItineraryStatus.draft
    total_days: int = Field(..., ge=1)
    total_travelers: int = 1
    selected_package: PackageTier | None = None
    departure_date: dt.date | None = None
    city_allocations: list[CityAllocation] = Field(default_factory=list)
    days: list[DayPlan] = Field(default_factory=list)
    pricing: PricingResult | None = None
    version: int = 1
    created_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)
    updated_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)

    def find_day(self, day_number: int) -> DayPlan | None:
        return next((d for d in self.days if d.day_number == day_number), None)

    def with_day(self, day: DayPlan) -> "Itinerary":
        """Copy of this itinerary with ``day`` swapped in."""
        days = [day if d.day_number == day.day_number else d for d in self.days]
        return self.model_copy(update={"days": days})


class RequestedActivity(BaseModel):
    """Activity a caller wants on a day, with an optional suggested position."""

    activity_id: str
    order: int | None = Field(default=None, ge=1)


class ItineraryPatch(BaseModel):
    """Fields a caller intends to change. Unset fields are left alone."""

    total_travelers: int | None = Field(default=None, ge=1)
    selected_package: PackageTier | None = None
    departure_date: dt.date | None = None
    status: ItineraryStatus | None = None

    @model_validator(mode="after")
    def validate_patch(self) -> "ItineraryPatch":
        """Reject empty patches and explicit nulls on required fields."""
        if not self.model_fields_set:
            raise ValueError("patch must set at least one field")
        for name in ("total_travelers", "status"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")
        return self

    def changes(self) -> dict:
        return {name: getattr(self, name) for name in self.model_fields_set}


class ItineraryRequest(BaseModel):
    """Input for building a new itinerary."""

    city_ids: list[str] = Field(..., min_length=1)
    total_days: int
    total_travelers: int = 1
    selected_package: PackageTier | None = None
    departure_date: dt.date | None = None
    destination_id: str | None = None
    user_id: uuid.UUID | None = None  # staff may build on behalf of a traveler
