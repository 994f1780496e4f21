"""Itinerary orchestration: allocate, schedule, price and persist.

Every mutation is computed on a copy and written in one repository call, so a
failed build or edit leaves no partial state behind. Edits to an existing
itinerary go through the repository's optimistic version check.
"""

import asyncio
import logging
from datetime import timedelta
from uuid import UUID

from backend.planner.config import Settings, get_settings
from backend.planner.currency.cache import CurrencyRateCache, convert_amount
from backend.planner.db.context import RequestContext
from backend.planner.db.repositories import CatalogReader, ItineraryRepository
from backend.planner.errors import (
    ConcurrentModificationError,
    InvalidInputError,
    NotFoundError,
    PlannerError,
    UnauthorizedError,
)
from backend.planner.models.common import ItineraryStatus, tier_for_days
from backend.planner.models.currency import BookingQuote, DisplayPricing
from backend.planner.models.itinerary import (
    Itinerary,
    ItineraryPatch,
    ItineraryRequest,
    RequestedActivity,
)
from backend.planner.models.pricing import PricingResult
from backend.planner.pricing.engine import calculate_pricing
from backend.planner.scheduling import scheduler
from backend.planner.scheduling.allocator import allocate_days
from backend.planner.utils.logging import StructuredEventLogger
from backend.planner.utils.metrics import PrometheusPlannerMetrics

logger = logging.getLogger(__name__)


class ItineraryService:
    """Entry point for building, editing and quoting itineraries."""

    def __init__(
        self,
        catalog: CatalogReader,
        itineraries: ItineraryRepository,
        rate_cache: CurrencyRateCache,
        settings: Settings | None = None,
        metrics: PrometheusPlannerMetrics | None = None,
    ) -> None:
        self._catalog = catalog
        self._itineraries = itineraries
        self._rate_cache = rate_cache
        self._settings = settings or get_settings()
        self._metrics = metrics or PrometheusPlannerMetrics()
        self._events = StructuredEventLogger(logger)

    def _price(self, itinerary: Itinerary) -> PricingResult:
        return calculate_pricing(
            itinerary, self._catalog, base_currency=self._settings.base_currency
        )

    def _load_owned(self, itinerary_id: UUID, ctx: RequestContext) -> Itinerary:
        itinerary = self._itineraries.get(itinerary_id)
        if itinerary is None:
            raise NotFoundError("Itinerary not found", {"itinerary_id": str(itinerary_id)})
        if itinerary.owner_id != ctx.user_id and not ctx.is_staff:
            raise UnauthorizedError(
                "You do not have access to this itinerary",
                {"itinerary_id": str(itinerary_id)},
            )
        return itinerary

    def _check_version(self, itinerary: Itinerary, expected_version: int | None) -> int:
        if expected_version is None:
            return itinerary.version
        if expected_version != itinerary.version:
            raise ConcurrentModificationError(
                "Itinerary was modified by another request",
                {
                    "itinerary_id": str(itinerary.itinerary_id),
                    "expected_version": expected_version,
                    "actual_version": itinerary.version,
                },
            )
        return expected_version

    def build_itinerary(self, request: ItineraryRequest, ctx: RequestContext) -> Itinerary:
        """Allocate days, schedule activities, price and store a new itinerary.

        Raises:
            InvalidInputError: Bad traveler count or city selection
            CapacityExceededError: City minimums exceed the trip length
            UnauthorizedError: Non-staff caller building for another user
        """
        owner_id = ctx.user_id
        if request.user_id is not None and request.user_id != ctx.user_id:
            if not ctx.is_staff:
                raise UnauthorizedError(
                    "Only staff can build itineraries for other users",
                    {"user_id": str(request.user_id)},
                )
            owner_id = request.user_id

        if request.total_travelers < 1:
            raise InvalidInputError(
                "Traveler count must be at least 1",
                {"field": "total_travelers", "value": request.total_travelers},
            )

        try:
            allocations = allocate_days(request.total_days, request.city_ids, self._catalog)
            days = scheduler.build_schedule(allocations, request.departure_date, self._catalog)
        except PlannerError as e:
            self._metrics.inc_build("rejected")
            self._events.log_event(
                "itinerary_build", "rejected", code=e.code, owner_id=str(owner_id)
            )
            raise

        destination_id = request.destination_id
        if destination_id is None:
            first_city = self._catalog.find_published_city(request.city_ids[0])
            destination_id = first_city.destination_id if first_city else None

        itinerary = Itinerary(
            owner_id=owner_id,
            destination_id=destination_id,
            total_days=request.total_days,
            total_travelers=request.total_travelers,
            selected_package=request.selected_package or tier_for_days(request.total_days),
            departure_date=request.departure_date,
            city_allocations=allocations,
            days=days,
        )
        itinerary.pricing = self._price(itinerary)

        saved = self._itineraries.save(itinerary)
        self._metrics.inc_build("success")
        self._events.log_event(
            "itinerary_build",
            "success",
            itinerary_id=str(saved.itinerary_id),
            owner_id=str(owner_id),
            total_days=saved.total_days,
            cities=len(allocations),
        )
        return saved

    def get_itinerary(self, itinerary_id: UUID, ctx: RequestContext) -> Itinerary:
        return self._load_owned(itinerary_id, ctx)

    def list_itineraries(self, ctx: RequestContext, limit: int = 50) -> list[Itinerary]:
        """Caller's itineraries; staff see everyone's."""
        if ctx.is_staff:
            return self._itineraries.list_all(limit=limit)
        return self._itineraries.list_for_owner(ctx.user_id, limit=limit)

    def replace_day_activities(
        self,
        itinerary_id: UUID,
        day_number: int,
        requested: list[RequestedActivity],
        ctx: RequestContext,
        expected_version: int | None = None,
    ) -> Itinerary:
        """Replace one day's non-flight activities and re-price.

        Args:
            itinerary_id: Itinerary to edit
            day_number: Day to replace
            requested: Non-flight activities wanted on the day
            ctx: Caller context
            expected_version: Version the caller last read, if it wants the
                edit rejected when someone else changed the itinerary

        Returns:
            Stored itinerary with the new day and pricing

        Raises:
            PlannerError: Any edit validation failure; stored state is unchanged
        """
        itinerary = self._load_owned(itinerary_id, ctx)
        version = self._check_version(itinerary, expected_version)

        try:
            day = scheduler.replace_day_activities(
                itinerary, day_number, requested, self._catalog
            )
        except PlannerError as e:
            self._metrics.inc_day_edit("rejected")
            self._events.log_event(
                "day_edit",
                "rejected",
                code=e.code,
                itinerary_id=str(itinerary_id),
                day_number=day_number,
            )
            raise

        updated = itinerary.with_day(day)
        updated.pricing = self._price(updated)

        saved = self._itineraries.update(updated, expected_version=version)
        self._metrics.inc_day_edit("success")
        self._events.log_event(
            "day_edit",
            "success",
            itinerary_id=str(itinerary_id),
            day_number=day_number,
            activities=len(day.activities),
            version=saved.version,
        )
        return saved

    def apply_patch(
        self,
        itinerary_id: UUID,
        patch: ItineraryPatch,
        ctx: RequestContext,
        expected_version: int | None = None,
    ) -> Itinerary:
        """Apply a validated set of field changes and re-price.

        A new departure date re-dates every day. A cleared package falls back
        to the tier matching the trip length.
        """
        itinerary = self._load_owned(itinerary_id, ctx)
        version = self._check_version(itinerary, expected_version)

        changes = patch.changes()
        if "selected_package" in changes and changes["selected_package"] is None:
            changes["selected_package"] = tier_for_days(itinerary.total_days)

        if "departure_date" in changes:
            start = changes["departure_date"]
            changes["days"] = [
                d.model_copy(
                    update={"date": start + timedelta(days=d.day_number - 1) if start else None}
                )
                for d in itinerary.days
            ]

        updated = itinerary.model_copy(update=changes)
        updated.pricing = self._price(updated)

        saved = self._itineraries.update(updated, expected_version=version)
        logger.info(
            "Patched itinerary %s: %s", itinerary_id, ", ".join(sorted(patch.changes()))
        )
        return saved

    async def display_pricing(self, itinerary: Itinerary) -> DisplayPricing:
        """Convert stored base-currency pricing for display. Never persisted.

        Both amounts are converted with the same rate and markup.
        """
        pricing = itinerary.pricing or await asyncio.to_thread(self._price, itinerary)
        ctx = await self._rate_cache.get_context()
        per_person = convert_amount(ctx, pricing.per_person_cost)
        total = convert_amount(ctx, pricing.total_cost)

        return DisplayPricing(
            per_person_cost=pricing.per_person_cost,
            total_cost=pricing.total_cost,
            currency=pricing.currency,
            converted_per_person_cost=per_person.converted,
            converted_total_cost=total.converted,
            target_currency=total.target_currency,
            exchange_rate=total.rate,
            conversion_percentage=total.percentage,
        )

    async def freeze_booking_quote(self, itinerary_id: UUID, ctx: RequestContext) -> BookingQuote:
        """Freeze the converted price of a confirmed itinerary.

        Raises:
            InvalidInputError: Itinerary is not confirmed
        """
        itinerary = await asyncio.to_thread(self._load_owned, itinerary_id, ctx)
        if itinerary.status != ItineraryStatus.confirmed:
            raise InvalidInputError(
                "Only confirmed itineraries can be quoted for booking",
                {"itinerary_id": str(itinerary_id), "status": itinerary.status.value},
            )

        pricing = itinerary.pricing or await asyncio.to_thread(self._price, itinerary)
        conversion = await self._rate_cache.convert(pricing.total_cost, transactional=True)

        quote = BookingQuote(
            itinerary_id=itinerary.itinerary_id,
            per_person_cost=pricing.per_person_cost,
            total_cost=pricing.total_cost,
            base_currency=pricing.currency,
            converted_total_cost=conversion.converted,
            target_currency=conversion.target_currency,
            exchange_rate=conversion.rate,
            conversion_percentage=conversion.percentage,
        )
        self._events.log_event(
            "booking_quote",
            "success",
            itinerary_id=str(itinerary_id),
            converted_total_cost=quote.converted_total_cost,
            exchange_rate=quote.exchange_rate,
        )
        return quote
