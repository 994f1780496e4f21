"""Currency endpoints - config, ad-hoc conversion, admin markup and refresh."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from backend.planner.api.auth import get_current_context
from backend.planner.api.deps import get_rate_cache
from backend.planner.currency.cache import CurrencyRateCache
from backend.planner.db.context import RequestContext
from backend.planner.errors import UnauthorizedError
from backend.planner.models.currency import Conversion, CurrencyConfig

router = APIRouter(prefix="/currency", tags=["currency"])

CacheDep = Annotated[CurrencyRateCache, Depends(get_rate_cache)]
ContextDep = Annotated[RequestContext, Depends(get_current_context)]


class PercentageUpdate(BaseModel):
    """Request body for PUT /currency/percentage."""

    conversion_percentage: float


class RefreshResponse(BaseModel):
    rate: float


def _require_staff(ctx: RequestContext) -> None:
    if not ctx.is_staff:
        raise UnauthorizedError("Staff role required", {"role": ctx.role.value})


@router.get("/config", response_model=CurrencyConfig)
async def get_config(cache: CacheDep) -> CurrencyConfig:
    """Current rate and markup, refreshing first when no rate is known."""
    await cache.get_context()
    config = await cache.current_config()
    assert config is not None
    return config


@router.get("/convert", response_model=Conversion)
async def convert(
    cache: CacheDep,
    amount: Annotated[float, Query(ge=0)],
    transactional: bool = False,
) -> Conversion:
    return await cache.convert(amount, transactional=transactional)


@router.put("/percentage", response_model=CurrencyConfig)
def update_percentage(body: PercentageUpdate, ctx: ContextDep, cache: CacheDep) -> CurrencyConfig:
    """Set the admin markup applied on top of the exchange rate."""
    _require_staff(ctx)
    return cache.update_conversion_percentage(body.conversion_percentage)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_rate(ctx: ContextDep, cache: CacheDep) -> RefreshResponse:
    """Fetch a new rate now. Provider failures fall back, never error."""
    _require_staff(ctx)
    return RefreshResponse(rate=await cache.refresh())
