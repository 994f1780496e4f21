"""Tests for day allocation across cities."""

import pytest

from backend.planner.db.inmemory import InMemoryCatalog
from backend.planner.errors import CapacityExceededError, InvalidInputError
from backend.planner.models.catalog import City
from backend.planner.models.common import PublishStatus
from backend.planner.scheduling.allocator import allocate_days


def make_catalog(*minimums: int) -> InMemoryCatalog:
    """Build a catalog with one published city per minimum.

    Args:
        minimums: minimum_required_days per city; cities are named c1, c2, ...

    Returns:
        InMemoryCatalog with the cities in order
    """
    return InMemoryCatalog(
        cities=[
            City(
                city_id=f"c{i}",
                name=f"City {i}",
                status=PublishStatus.published,
                minimum_required_days=minimum,
            )
            for i, minimum in enumerate(minimums, start=1)
        ]
    )


def test_extra_day_goes_to_first_city() -> None:
    """Minimums 3 and 4 over 8 days give the spare day to the first city."""
    catalog = make_catalog(3, 4)

    allocations = allocate_days(8, ["c1", "c2"], catalog)

    assert [a.allocated_days for a in allocations] == [4, 4]
    assert [a.order for a in allocations] == [1, 2]
    assert [a.city_id for a in allocations] == ["c1", "c2"]


def test_minimums_exceeding_trip_length_name_both_numbers() -> None:
    """Minimums summing to 10 cannot fit an 8-day trip."""
    catalog = make_catalog(4, 3, 3)

    with pytest.raises(CapacityExceededError) as exc_info:
        allocate_days(8, ["c1", "c2", "c3"], catalog)

    assert "10" in exc_info.value.message
    assert "8" in exc_info.value.message
    assert exc_info.value.details == {"required_days": 10, "total_days": 8}


def test_round_robin_spreads_extra_days_evenly() -> None:
    """Extra days cycle from the first city and never differ by more than one."""
    catalog = make_catalog(1, 2, 1)

    allocations = allocate_days(9, ["c1", "c2", "c3"], catalog)

    extras = [a.allocated_days - m for a, m in zip(allocations, [1, 2, 1])]
    assert extras == [2, 2, 1]
    assert max(extras) - min(extras) <= 1
    assert sum(a.allocated_days for a in allocations) == 9


def test_exact_fit_gets_only_minimums() -> None:
    catalog = make_catalog(2, 3)

    allocations = allocate_days(5, ["c1", "c2"], catalog)

    assert [a.allocated_days for a in allocations] == [2, 3]


def test_order_follows_selection_not_catalog() -> None:
    catalog = make_catalog(1, 1, 1)

    allocations = allocate_days(4, ["c3", "c1", "c2"], catalog)

    assert [(a.city_id, a.order, a.allocated_days) for a in allocations] == [
        ("c3", 1, 2),
        ("c1", 2, 1),
        ("c2", 3, 1),
    ]


@pytest.mark.parametrize("total_days", [1, 7, 14, 30])
def test_allocations_always_sum_to_total_days(total_days: int) -> None:
    catalog = make_catalog(1)

    allocations = allocate_days(total_days, ["c1"], catalog)

    assert sum(a.allocated_days for a in allocations) == total_days


def test_empty_city_list_is_invalid() -> None:
    with pytest.raises(InvalidInputError):
        allocate_days(7, [], make_catalog(1))


def test_non_positive_trip_length_is_invalid() -> None:
    with pytest.raises(InvalidInputError):
        allocate_days(0, ["c1"], make_catalog(1))


def test_duplicate_city_is_invalid() -> None:
    with pytest.raises(InvalidInputError) as exc_info:
        allocate_days(7, ["c1", "c1"], make_catalog(1))

    assert exc_info.value.details["duplicate_city_ids"] == ["c1"]


def test_unpublished_and_unknown_cities_are_invalid(catalog: InMemoryCatalog) -> None:
    """Draft, deleted and unknown cities are all rejected by id."""
    with pytest.raises(InvalidInputError) as exc_info:
        allocate_days(10, ["jaipur", "goa", "agra", "nowhere"], catalog)

    assert exc_info.value.details["city_ids"] == ["goa", "agra", "nowhere"]
