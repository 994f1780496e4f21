"""Request context for ownership enforcement."""

from dataclasses import dataclass
from uuid import UUID

from backend.planner.models.common import STAFF_ROLES, Role


@dataclass(frozen=True)
class RequestContext:
    """Caller identity and role.

    Used to enforce itinerary ownership in every service operation.
    """

    user_id: UUID
    role: Role = Role.user

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
