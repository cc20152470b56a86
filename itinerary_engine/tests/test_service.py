from __future__ import annotations

from datetime import date

import pytest

from itinerary_engine.recommendations.errors import (
    EmptyPoolError,
    NoDestinationsError,
    NoMatchingLocationsError,
)
from itinerary_engine.recommendations.models import (
    Enhancement,
    Preferences,
    QuickRequest,
    Strategy,
)
from itinerary_engine.recommendations.pool import RawCatalog
from itinerary_engine.recommendations.service import (
    generate,
    quick_preferences,
    to_error_response,
    to_generate_response,
)


def _fees(result):
    return [d.entry_fee for d in result.destinations]


@pytest.fixture
def catalog(make_location, make_hotel, make_leg) -> RawCatalog:
    location, hotel, leg = make_location, make_hotel, make_leg
    return RawCatalog(
        locations=[
            location("fort", entry_fee=200, rating=4.4, tags=("historical",), latitude=23.72, longitude=90.39),
            location("palace", entry_fee=100, rating=4.5, tags=("heritage", "museum"), latitude=23.71, longitude=90.41),
            location("beach", entry_fee=0, rating=4.6, tags=("beach", "family-friendly"), latitude=21.43, longitude=92.01),
            location("forest", entry_fee=1500, rating=4.7, tags=("wildlife", "adventure"), latitude=22.0, longitude=89.18),
        ],
        hotels=[
            hotel("h-fort", "fort", 2500),
            hotel("h-palace", "palace", 6500, amenities=("wifi", "breakfast")),
            hotel("h-beach", "beach", 4500, amenities=("pool", "family-rooms")),
            hotel("h-forest", "forest", 3500, amenities=("eco-certified",)),
        ],
        transport=[
            leg("t-beach", "beach", 1800, from_location_id="fort", estimated_duration=10),
            leg("t-forest", "forest", 900, from_location_id="fort", estimated_duration=6),
        ],
    )


def test_scenario_budget_partial_fill(priced_catalog):
    prefs = Preferences(budget=150, duration=3, optimization_goal="budget")

    result = generate(priced_catalog, prefs)

    assert _fees(result) == [40, 50]
    assert result.total_cost == 90
    assert result.destination_count == 2
    assert result.remaining_budget == 60
    assert result.strategy_used is Strategy.budget


def test_scenario_min_rating_excludes_everything(priced_catalog):
    prefs = Preferences(budget=150, duration=3, min_rating=4.5)

    with pytest.raises(NoMatchingLocationsError) as excinfo:
        generate(priced_catalog, prefs)

    assert excinfo.value.counts.filtered.locations == 0
    assert excinfo.value.counts.available.locations == 5


def test_scenario_cheapest_over_budget(priced_catalog):
    prefs = Preferences(budget=30, duration=3)

    with pytest.raises(NoDestinationsError) as excinfo:
        generate(priced_catalog, prefs)

    assert excinfo.value.counts.filtered.locations == 5


def test_empty_catalog_raises_empty_pool():
    with pytest.raises(EmptyPoolError):
        generate(RawCatalog(), Preferences(budget=100, duration=1))


def test_generate_is_deterministic(catalog):
    prefs = Preferences(budget=50_000, duration=3, optimization_goal="comfort", enhancements=["eco-friendly"])

    first = generate(catalog, prefs)
    second = generate(catalog, prefs)

    assert [d.id for d in first.destinations] == [d.id for d in second.destinations]
    assert first.total_cost == second.total_cost


@pytest.mark.parametrize("strategy", list(Strategy))
@pytest.mark.parametrize("budget", [5_000, 12_000, 20_000, 100_000])
def test_budget_and_duration_hold_for_every_strategy(strategy, budget, catalog):
    prefs = Preferences(budget=budget, duration=3, optimization_goal=strategy)

    try:
        result = generate(catalog, prefs)
    except NoDestinationsError:
        return
    assert result.total_cost <= budget
    assert result.destination_count <= 3
    assert sum(d.cost for d in result.days) == pytest.approx(result.total_cost)


def test_duration_is_filled_when_enough_is_affordable(catalog):
    result = generate(catalog, Preferences(budget=100_000, duration=4))
    assert result.destination_count == 4
    assert len(result.days) == 4


def test_strategy_argument_overrides_goal(catalog):
    prefs = Preferences(budget=100_000, duration=1, optimization_goal="budget")

    result = generate(catalog, prefs, strategy=Strategy.comfort)

    assert result.strategy_used is Strategy.comfort
    assert [d.id for d in result.destinations] == ["forest"]


def test_result_carries_summary_details(catalog):
    prefs = Preferences(
        budget=100_000,
        duration=3,
        interests=["cultural"],
        enhancements=["luxury"],
        start_date=date(2026, 5, 1),
    )

    result = generate(catalog, prefs)

    assert [d.id for d in result.destinations] == ["palace"]
    assert result.features == [Enhancement.luxury]
    assert result.filters_applied == ["approval", "interests"]
    assert result.destinations[0].nights == 3
    assert result.days[-1].travel_date == date(2026, 5, 3)


def test_generate_response_rounds_and_summarises(catalog):
    prefs = Preferences(budget=10_000.555, duration=1, start_date=date(2026, 5, 1))

    response = to_generate_response(generate(catalog, prefs), prefs)

    assert response.success is True
    assert response.itinerary.end_date == date(2026, 5, 1)
    assert response.summary.remaining_budget == round(10_000.555 - response.summary.total_cost, 2)
    assert response.summary.destination_count == len(response.itinerary.destinations)


def test_error_response_keeps_code_and_counts(priced_catalog):
    with pytest.raises(NoDestinationsError) as excinfo:
        generate(priced_catalog, Preferences(budget=10, duration=2))

    body = to_error_response(excinfo.value)

    assert body.success is False
    assert body.code == "NO_DESTINATIONS"
    assert body.counts.filtered.locations == 5


def test_quick_preferences_fills_defaults():
    prefs = quick_preferences(QuickRequest(), today=date(2026, 1, 10))

    assert prefs.budget == 1000
    assert prefs.duration == 3
    assert prefs.interests == frozenset({"cultural", "historical"})
    assert prefs.min_rating == 3.5
    assert prefs.optimization_goal is Strategy.budget
    assert prefs.start_date == date(2026, 1, 10)


def test_quick_preferences_keeps_caller_values():
    prefs = quick_preferences(QuickRequest(budget=20_000, duration=5, interests=["beach"]))

    assert prefs.budget == 20_000
    assert prefs.duration == 5
    assert prefs.interests == frozenset({"beach"})
