"""Typed failures raised by the planning engine.

Every error carries a human-readable message and a ``details`` dict with the
entity ids and expected/actual values a caller needs to render a precise
message. The HTTP layer maps ``code`` to a status code.
"""

from typing import Any


class PlannerError(Exception):
    """Base class for all planner failures."""

    code = "PLANNER_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}


class InvalidInputError(PlannerError):
    """Malformed or missing required input."""

    code = "INVALID_INPUT"


class NotFoundError(PlannerError):
    """Missing city, activity, day or itinerary."""

    code = "NOT_FOUND"


class CapacityExceededError(PlannerError):
    """Trip or day capacity overflow."""

    code = "CAPACITY_EXCEEDED"


class FlightImmutableError(PlannerError):
    """Flight legs cannot be added or removed through a day edit."""

    code = "FLIGHT_IMMUTABLE"


class DuplicateInRequestError(PlannerError):
    """The same activity was requested twice for one day."""

    code = "DUPLICATE_IN_REQUEST"


class DuplicateAcrossDaysError(PlannerError):
    """Activity already scheduled on another day of the itinerary."""

    code = "DUPLICATE_ACROSS_DAYS"


class CityMismatchError(PlannerError):
    """Activity belongs to a different city than the day."""

    code = "CITY_MISMATCH"


class UnauthorizedError(PlannerError):
    """Caller does not own the resource or lacks the required role."""

    code = "UNAUTHORIZED"


class ExternalServiceUnavailableError(PlannerError):
    """External rate provider failed, timed out or returned garbage."""

    code = "EXTERNAL_SERVICE_UNAVAILABLE"


class ConcurrentModificationError(PlannerError):
    """Itinerary changed since it was read (optimistic version check)."""

    code = "CONCURRENT_MODIFICATION"
