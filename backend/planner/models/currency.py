"""Currency models - rate configuration, conversions and frozen booking quotes."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CurrencyConfig(BaseModel):
    """Process-wide exchange rate record (singleton in the store)."""

    base_currency: str = "INR"
    target_currency: str = "USD"
    conversion_percentage: float = 0.0
    last_rate: float = 0.0
    last_fetched_at: datetime | None = None


class ConversionContext(BaseModel):
    """Rate and admin markup used for one conversion."""

    rate: float
    percentage: float
    base_currency: str
    target_currency: str


class Conversion(BaseModel):
    """Base amount converted into the target currency."""

    base: float
    converted: float
    rate: float
    percentage: float
    base_currency: str
    target_currency: str


class DisplayPricing(BaseModel):
    """On-read conversion of stored pricing. Never persisted."""

    per_person_cost: float
    total_cost: float
    currency: str
    converted_per_person_cost: float
    converted_total_cost: float
    target_currency: str
    exchange_rate: float
    conversion_percentage: float


class BookingQuote(BaseModel):
    """Conversion frozen at booking time; later rate refreshes never touch it."""

    model_config = ConfigDict(frozen=True)

    itinerary_id: uuid.UUID
    per_person_cost: float
    total_cost: float
    base_currency: str
    converted_total_cost: float
    target_currency: str
    exchange_rate: float
    conversion_percentage: float
    frozen_at: datetime = Field(default_factory=datetime.utcnow)
