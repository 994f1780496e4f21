"""SQLAlchemy ORM models for catalog, itineraries and currency config."""

import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

# JSONB on Postgres, plain JSON elsewhere (sqlite in tests)
JsonDoc = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class CityRow(Base):
    """City table - package tiers and transfers kept as JSON documents."""

    __tablename__ = "city"
    __table_args__ = (Index("idx_city_status", "status"),)

    city_id: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    destination_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="draft")
    minimum_required_days: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    packages: Mapped[dict[str, Any]] = mapped_column(JsonDoc, nullable=False, default=dict)
    transfers: Mapped[list[dict[str, Any]]] = mapped_column(JsonDoc, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    activities: Mapped[list["ActivityRow"]] = relationship("ActivityRow", back_populates="city")


class ActivityRow(Base):
    """Activity table - includes flight legs."""

    __tablename__ = "activity"
    __table_args__ = (
        Index("idx_activity_city_status", "city_id", "status"),
        Index("idx_activity_flight", "city_id", "flight_type"),
    )

    activity_id: Mapped[str] = mapped_column(Text, primary_key=True)
    city_id: Mapped[str] = mapped_column(Text, ForeignKey("city.city_id"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    badge: Mapped[str] = mapped_column(Text, nullable=False, default="Quarter Day")
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    start_time: Mapped[str | None] = mapped_column(Text, nullable=True)
    transfers: Mapped[list[dict[str, Any]]] = mapped_column(JsonDoc, nullable=False, default=list)
    is_flight: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    flight_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="draft")
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    city: Mapped["CityRow"] = relationship("CityRow", back_populates="activities")


class ItineraryRow(Base):
    """Itinerary table - allocations, days and pricing stored as one document row."""

    __tablename__ = "itinerary"
    __table_args__ = (Index("idx_itinerary_owner_created", "owner_id", "created_at"),)

    itinerary_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    destination_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="draft")
    total_days: Mapped[int] = mapped_column(Integer, nullable=False)
    total_travelers: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    selected_package: Mapped[str | None] = mapped_column(Text, nullable=True)
    departure_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    city_allocations: Mapped[list[dict[str, Any]]] = mapped_column(JsonDoc, nullable=False)
    days: Mapped[list[dict[str, Any]]] = mapped_column(JsonDoc, nullable=False)
    pricing: Mapped[dict[str, Any] | None] = mapped_column(JsonDoc, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class CurrencyConfigRow(Base):
    """Currency config table - a single row with id=1."""

    __tablename__ = "currency_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    base_currency: Mapped[str] = mapped_column(Text, nullable=False, default="INR")
    target_currency: Mapped[str] = mapped_column(Text, nullable=False, default="USD")
    conversion_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    last_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    last_fetched_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
