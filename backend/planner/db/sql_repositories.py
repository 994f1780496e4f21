"""SQL implementations of repository interfaces."""

import uuid
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session, sessionmaker

from backend.planner.db.models import ActivityRow, CityRow, CurrencyConfigRow, ItineraryRow
from backend.planner.errors import ConcurrentModificationError, NotFoundError
from backend.planner.models.catalog import Activity, City
from backend.planner.models.common import FlightType, PublishStatus
from backend.planner.models.currency import CurrencyConfig
from backend.planner.models.itinerary import CityAllocation, DayPlan, Itinerary
from backend.planner.models.pricing import PricingResult

_CONFIG_ROW_ID = 1


def _city_from_row(row: CityRow) -> City:
    return City(
        city_id=row.city_id,
        name=row.name,
        destination_id=row.destination_id,
        status=PublishStatus(row.status),
        minimum_required_days=row.minimum_required_days,
        packages=row.packages or {},
        transfers=row.transfers or [],
    )


def _activity_from_row(row: ActivityRow) -> Activity:
    return Activity(
        activity_id=row.activity_id,
        name=row.name,
        city_id=row.city_id,
        badge=row.badge,
        price=float(row.price or 0),
        start_time=row.start_time,
        transfers=row.transfers or [],
        is_flight=row.is_flight,
        flight_type=FlightType(row.flight_type) if row.flight_type else None,
        status=PublishStatus(row.status),
    )


class SqlCatalogReader:
    """SQL implementation of CatalogReader."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_city(self, city_id: str) -> City | None:
        row = self._session.execute(
            select(CityRow).where(
                CityRow.city_id == city_id, CityRow.status != PublishStatus.deleted.value
            )
        ).scalar_one_or_none()
        return _city_from_row(row) if row else None

    def find_published_city(self, city_id: str) -> City | None:
        row = self._session.execute(
            select(CityRow).where(
                CityRow.city_id == city_id, CityRow.status == PublishStatus.published.value
            )
        ).scalar_one_or_none()
        return _city_from_row(row) if row else None

    def find_published_cities(self, city_ids: list[str]) -> dict[str, City]:
        if not city_ids:
            return {}
        rows = self._session.execute(
            select(CityRow).where(
                CityRow.city_id.in_(city_ids), CityRow.status == PublishStatus.published.value
            )
        ).scalars()
        return {row.city_id: _city_from_row(row) for row in rows}

    def find_activity(self, activity_id: str) -> Activity | None:
        row = self._session.execute(
            select(ActivityRow).where(
                ActivityRow.activity_id == activity_id,
                ActivityRow.status != PublishStatus.deleted.value,
            )
        ).scalar_one_or_none()
        return _activity_from_row(row) if row else None

    def find_published_activity(self, activity_id: str) -> Activity | None:
        row = self._session.execute(
            select(ActivityRow).where(
                ActivityRow.activity_id == activity_id,
                ActivityRow.status == PublishStatus.published.value,
            )
        ).scalar_one_or_none()
        return _activity_from_row(row) if row else None

    def find_published_activities_by_city(self, city_id: str) -> list[Activity]:
        rows = self._session.execute(
            select(ActivityRow)
            .where(
                ActivityRow.city_id == city_id,
                ActivityRow.is_flight.is_(False),
                ActivityRow.status == PublishStatus.published.value,
            )
            .order_by(ActivityRow.position, ActivityRow.activity_id)
        ).scalars()
        return [_activity_from_row(row) for row in rows]

    def find_flight(self, city_id: str, flight_type: FlightType) -> Activity | None:
        row = self._session.execute(
            select(ActivityRow)
            .where(
                ActivityRow.city_id == city_id,
                ActivityRow.is_flight.is_(True),
                ActivityRow.flight_type == flight_type.value,
                ActivityRow.status == PublishStatus.published.value,
            )
            .order_by(ActivityRow.position, ActivityRow.activity_id)
            .limit(1)
        ).scalar_one_or_none()
        return _activity_from_row(row) if row else None


def _itinerary_from_row(row: ItineraryRow) -> Itinerary:
    return Itinerary(
        itinerary_id=row.itinerary_id,
        owner_id=row.owner_id,
        destination_id=row.destination_id,
        status=row.status,
        total_days=row.total_days,
        total_travelers=row.total_travelers,
        selected_package=row.selected_package,
        departure_date=row.departure_date,
        city_allocations=[CityAllocation.model_validate(a) for a in row.city_allocations],
        days=[DayPlan.model_validate(d) for d in row.days],
        pricing=PricingResult.model_validate(row.pricing) if row.pricing else None,
        version=row.version,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _itinerary_columns(itinerary: Itinerary) -> dict:
    data = itinerary.model_dump(mode="json")
    return {
        "owner_id": itinerary.owner_id,
        "destination_id": itinerary.destination_id,
        "status": itinerary.status.value,
        "total_days": itinerary.total_days,
        "total_travelers": itinerary.total_travelers,
        "selected_package": itinerary.selected_package.value if itinerary.selected_package else None,
        "departure_date": itinerary.departure_date,
        "city_allocations": data["city_allocations"],
        "days": data["days"],
        "pricing": data["pricing"],
    }


class SqlItineraryRepository:
    """SQL implementation of ItineraryRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def save(self, itinerary: Itinerary) -> Itinerary:
        row = ItineraryRow(
            itinerary_id=itinerary.itinerary_id,
            version=itinerary.version,
            created_at=itinerary.created_at,
            updated_at=itinerary.updated_at,
            **_itinerary_columns(itinerary),
        )
        self._session.add(row)
        self._session.commit()
        return _itinerary_from_row(row)

    def get(self, itinerary_id: uuid.UUID) -> Itinerary | None:
        row = self._session.get(ItineraryRow, itinerary_id)
        return _itinerary_from_row(row) if row else None

    def list_for_owner(self, owner_id: uuid.UUID, limit: int = 50) -> list[Itinerary]:
        rows = self._session.execute(
            select(ItineraryRow)
            .where(ItineraryRow.owner_id == owner_id)
            .order_by(ItineraryRow.created_at.desc())
            .limit(limit)
        ).scalars()
        return [_itinerary_from_row(row) for row in rows]

    def list_all(self, limit: int = 50) -> list[Itinerary]:
        rows = self._session.execute(
            select(ItineraryRow).order_by(ItineraryRow.created_at.desc()).limit(limit)
        ).scalars()
        return [_itinerary_from_row(row) for row in rows]

    def update(self, itinerary: Itinerary, expected_version: int) -> Itinerary:
        now = datetime.utcnow()
        result = self._session.execute(
            update(ItineraryRow)
            .where(
                ItineraryRow.itinerary_id == itinerary.itinerary_id,
                ItineraryRow.version == expected_version,
            )
            .values(version=expected_version + 1, updated_at=now, **_itinerary_columns(itinerary))
        )

        if result.rowcount == 0:
            self._session.rollback()
            actual = self._session.execute(
                select(ItineraryRow.version).where(
                    ItineraryRow.itinerary_id == itinerary.itinerary_id
                )
            ).scalar_one_or_none()
            if actual is None:
                raise NotFoundError(
                    "Itinerary not found", {"itinerary_id": str(itinerary.itinerary_id)}
                )
            raise ConcurrentModificationError(
                "Itinerary was modified by another request",
                {
                    "itinerary_id": str(itinerary.itinerary_id),
                    "expected_version": expected_version,
                    "actual_version": actual,
                },
            )

        self._session.commit()
        return itinerary.model_copy(update={"version": expected_version + 1, "updated_at": now})


def _config_from_row(row: CurrencyConfigRow) -> CurrencyConfig:
    return CurrencyConfig(
        base_currency=row.base_currency,
        target_currency=row.target_currency,
        conversion_percentage=float(row.conversion_percentage or 0),
        last_rate=float(row.last_rate or 0),
        last_fetched_at=row.last_fetched_at,
    )


class SqlCurrencyConfigStore:
    """SQL implementation of CurrencyConfigStore (singleton row).

    Owned by the process-wide rate cache, so every call opens its own session.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def _get_or_create_row(self, session: Session) -> CurrencyConfigRow:
        row = session.get(CurrencyConfigRow, _CONFIG_ROW_ID)
        if row is None:
            row = CurrencyConfigRow(
                id=_CONFIG_ROW_ID,
                base_currency="INR",
                target_currency="USD",
                conversion_percentage=0.0,
                last_rate=0.0,
            )
            session.add(row)
        return row

    def load(self) -> CurrencyConfig | None:
        with self._session_factory() as session:
            row = session.get(CurrencyConfigRow, _CONFIG_ROW_ID)
            return _config_from_row(row) if row else None

    def save_rate(
        self, base_currency: str, target_currency: str, rate: float, fetched_at: datetime
    ) -> CurrencyConfig:
        with self._session_factory() as session:
            row = self._get_or_create_row(session)
            row.base_currency = base_currency
            row.target_currency = target_currency
            row.last_rate = rate
            row.last_fetched_at = fetched_at
            session.commit()
            return _config_from_row(row)

    def save_percentage(self, percentage: float) -> CurrencyConfig:
        with self._session_factory() as session:
            row = self._get_or_create_row(session)
            row.conversion_percentage = percentage
            session.commit()
            return _config_from_row(row)
