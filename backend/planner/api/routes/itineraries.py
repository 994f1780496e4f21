"""Itinerary endpoints - build, read, patch, day edits and booking quotes."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from backend.planner.api.auth import get_current_context
from backend.planner.api.deps import get_itinerary_service
from backend.planner.db.context import RequestContext
from backend.planner.models.currency import BookingQuote, DisplayPricing
from backend.planner.models.itinerary import (
    Itinerary,
    ItineraryPatch,
    ItineraryRequest,
    RequestedActivity,
)
from backend.planner.services.itinerary_service import ItineraryService

router = APIRouter(prefix="/itineraries", tags=["itineraries"])

ServiceDep = Annotated[ItineraryService, Depends(get_itinerary_service)]
ContextDep = Annotated[RequestContext, Depends(get_current_context)]


class ItineraryView(BaseModel):
    """Itinerary with its on-read display conversion."""

    itinerary: Itinerary
    display_pricing: DisplayPricing | None = None


class ReplaceDayActivitiesRequest(BaseModel):
    """Request body for PUT /itineraries/{id}/days/{day}/activities."""

    activities: list[RequestedActivity] = Field(default_factory=list)


@router.post("", response_model=Itinerary, status_code=status.HTTP_201_CREATED)
def build_itinerary(request: ItineraryRequest, ctx: ContextDep, service: ServiceDep) -> Itinerary:
    """Allocate, schedule and price a new itinerary."""
    return service.build_itinerary(request, ctx)


@router.get("", response_model=list[Itinerary])
def list_itineraries(
    ctx: ContextDep,
    service: ServiceDep,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[Itinerary]:
    return service.list_itineraries(ctx, limit=limit)


@router.get("/{itinerary_id}", response_model=ItineraryView)
async def get_itinerary(
    itinerary_id: uuid.UUID, ctx: ContextDep, service: ServiceDep
) -> ItineraryView:
    """Itinerary plus converted display pricing (computed, never stored)."""
    itinerary = await run_in_threadpool(service.get_itinerary, itinerary_id, ctx)
    display = await service.display_pricing(itinerary) if itinerary.pricing else None
    return ItineraryView(itinerary=itinerary, display_pricing=display)


@router.patch("/{itinerary_id}", response_model=Itinerary)
def patch_itinerary(
    itinerary_id: uuid.UUID,
    patch: ItineraryPatch,
    ctx: ContextDep,
    service: ServiceDep,
    expected_version: Annotated[int | None, Query(ge=1)] = None,
) -> Itinerary:
    return service.apply_patch(itinerary_id, patch, ctx, expected_version=expected_version)


@router.put("/{itinerary_id}/days/{day_number}/activities", response_model=Itinerary)
def replace_day_activities(
    itinerary_id: uuid.UUID,
    day_number: int,
    body: ReplaceDayActivitiesRequest,
    ctx: ContextDep,
    service: ServiceDep,
    expected_version: Annotated[int | None, Query(ge=1)] = None,
) -> Itinerary:
    """Replace a day's non-flight activities; flights stay in place."""
    return service.replace_day_activities(
        itinerary_id, day_number, body.activities, ctx, expected_version=expected_version
    )


@router.post("/{itinerary_id}/booking-quote", response_model=BookingQuote)
async def create_booking_quote(
    itinerary_id: uuid.UUID, ctx: ContextDep, service: ServiceDep
) -> BookingQuote:
    """Freeze the converted price of a confirmed itinerary."""
    return await service.freeze_booking_quote(itinerary_id, ctx)
