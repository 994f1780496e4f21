"""Models package - re-exports for convenience."""

from backend.planner.models.catalog import Activity, City, Transfer
from backend.planner.models.common import (
    FlightType,
    ItineraryStatus,
    PackageTier,
    PublishStatus,
    Role,
    TransferType,
    VehicleType,
)
from backend.planner.models.currency import (
    BookingQuote,
    Conversion,
    ConversionContext,
    CurrencyConfig,
    DisplayPricing,
)
from backend.planner.models.itinerary import (
    CityAllocation,
    DayPlan,
    Itinerary,
    ItineraryPatch,
    ItineraryRequest,
    RequestedActivity,
    ScheduledActivity,
)
from backend.planner.models.pricing import (
    ActivityReference,
    ActivitySnapshot,
    PricedActivity,
    PricingBreakdown,
    PricingResult,
)

__all__ = [
    # Common
    "FlightType",
    "ItineraryStatus",
    "PackageTier",
    "PublishStatus",
    "Role",
    "TransferType",
    "VehicleType",
    # Catalog
    "Activity",
    "City",
    "Transfer",
    # Itinerary
    "CityAllocation",
    "DayPlan",
    "Itinerary",
    "ItineraryPatch",
    "ItineraryRequest",
    "RequestedActivity",
    "ScheduledActivity",
    # Pricing
    "ActivityReference",
    "ActivitySnapshot",
    "PricedActivity",
    "PricingBreakdown",
    "PricingResult",
    # Currency
    "BookingQuote",
    "Conversion",
    "ConversionContext",
    "CurrencyConfig",
    "DisplayPricing",
]
