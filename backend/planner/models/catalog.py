"""Catalog models - cities and activities read by the engine, never mutated."""

from pydantic import BaseModel, Field, model_validator

from backend.planner.models.common import (
    FlightType,
    PackageTier,
    PublishStatus,
    TransferType,
    VehicleType,
    badge_weight,
)


class Transfer(BaseModel):
    """Transfer charge attached to a city stay or an activity."""

    type: TransferType
    vehicle_type: VehicleType = VehicleType.sedan
    price: float = Field(default=0.0, ge=0)


def transfer_total(transfers: list[Transfer]) -> float:
    """Sum of transfer prices."""
    return sum(t.price for t in transfers)


class City(BaseModel):
    """City with package tiers and per-stay transfers."""

    city_id: str
    name: str
    destination_id: str | None = None
    status: PublishStatus = PublishStatus.draft
    minimum_required_days: int = Field(default=1, ge=1)
    packages: dict[PackageTier, float] = Field(default_factory=dict)
    transfers: list[Transfer] = Field(default_factory=list)

    def package_price(self, tier: PackageTier | None) -> float | None:
        """Whole-trip package price for ``tier``, or None when not offered."""
        if tier is None:
            return None
        return self.packages.get(tier)

    @property
    def transfer_total(self) -> float:
        return transfer_total(self.transfers)


class Activity(BaseModel):
    """Schedulable activity or flight leg owned by a city."""

    activity_id: str
    name: str
    city_id: str
    badge: str = "Quarter Day"
    price: float = Field(default=0.0, ge=0)
    start_time: str | None = None
    transfers: list[Transfer] = Field(default_factory=list)
    is_flight: bool = False
    flight_type: FlightType | None = None
    status: PublishStatus = PublishStatus.draft

    @model_validator(mode="after")
    def validate_flight_type(self) -> "Activity":
        """Flights must say which direction they fly."""
        if self.is_flight and self.flight_type is None:
            raise ValueError(f"flight activity {self.activity_id} requires a flight_type")
        return self

    @property
    def duration_weight(self) -> float:
        return badge_weight(self.badge)

    @property
    def transfer_total(self) -> float:
        return transfer_total(self.transfers)

    @property
    def is_schedulable(self) -> bool:
        return self.status == PublishStatus.published
