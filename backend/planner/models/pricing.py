"""Pricing models - per-person breakdown and the activity price variants."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class PricingBreakdown(BaseModel):
    """Base-currency cost components, per person."""

    city_package_cost: float = 0.0
    city_transfer_charges: float = 0.0
    activity_cost: float = 0.0
    activity_transfer_charges: float = 0.0

    @property
    def per_person_cost(self) -> float:
        return (
            self.city_package_cost
            + self.city_transfer_charges
            + self.activity_cost
            + self.activity_transfer_charges
        )


class PricingResult(BaseModel):
    """Stored pricing of an itinerary, always in the base currency."""

    per_person_cost: float
    total_cost: float
    currency: str
    breakdown: PricingBreakdown


class ActivitySnapshot(BaseModel):
    """Activity price fields copied at scheduling time."""

    kind: Literal["snapshot"] = "snapshot"
    activity_id: str
    price: float = 0.0
    transfer_charge: float = 0.0


class ActivityReference(BaseModel):
    """Activity that must be resolved against the catalog before pricing."""

    kind: Literal["reference"] = "reference"
    activity_id: str
    fallback: ActivitySnapshot


PricedActivity = Annotated[ActivitySnapshot | ActivityReference, Field(discriminator="kind")]
