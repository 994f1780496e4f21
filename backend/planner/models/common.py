"""Common types and enums shared across all models."""

from enum import Enum


class PublishStatus(str, Enum):
    """Catalog record lifecycle."""

    draft = "draft"
    published = "published"
    deleted = "deleted"


class FlightType(str, Enum):
    """Direction of a flight leg."""

    departure = "departure"
    returning = "return"


class TransferType(str, Enum):
    """Transfer kind."""

    airport_pickup = "Airport Pickup"
    airport_drop = "Airport Drop"
    intercity = "Intercity Transfer"
    local = "Local Transport"


class VehicleType(str, Enum):
    """Transfer vehicle class."""

    sedan = "Sedan"
    suv = "SUV"
    tempo_traveller = "Tempo Traveller"
    bus = "Bus"
    private_cab = "Private Cab"


class PackageTier(str, Enum):
    """Package price bucket keyed by a day-count range."""

    days_7_8 = "7-8"
    days_9_10 = "9-10"
    days_11_12 = "11-12"
    days_13_14 = "13-14"

    @property
    def day_range(self) -> tuple[int, int]:
        low, high = self.value.split("-")
        return int(low), int(high)


class ItineraryStatus(str, Enum):
    """Itinerary lifecycle."""

    draft = "draft"
    confirmed = "confirmed"


class Role(str, Enum):
    """Caller role."""

    user = "User"
    staff = "Staff"
    admin = "Admin"
    superadmin = "SuperAdmin"


STAFF_ROLES = frozenset({Role.staff, Role.admin, Role.superadmin})

# Day capacity is normalized to 1.0
DAY_CAPACITY = 1.0
FLIGHT_WEIGHT = 0.25
DEFAULT_BADGE_WEIGHT = 0.25

BADGE_WEIGHTS: dict[str, float] = {
    "Quarter Day": 0.25,
    "Qurate Day": 0.25,  # legacy spelling still present in stored records
    "Half Day": 0.5,
    "Full Day": 1.0,
    "Overnight": 1.0,
}

DEFAULT_START_TIME = "09:00"
RETURN_FLIGHT_START_TIME = "18:00"


def badge_weight(badge: str | None) -> float:
    """Map an activity badge to its share of a day's capacity."""
    if badge is None:
        return DEFAULT_BADGE_WEIGHT
    return BADGE_WEIGHTS.get(badge, DEFAULT_BADGE_WEIGHT)


def tier_for_days(total_days: int) -> PackageTier | None:
    """Return the package tier whose day range contains ``total_days``."""
    for tier in PackageTier:
        low, high = tier.day_range
        if low <= total_days <= high:
            return tier
    return None
