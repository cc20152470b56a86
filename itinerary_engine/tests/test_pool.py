from __future__ import annotations

import pytest

from itinerary_engine.recommendations.errors import EmptyPoolError
from itinerary_engine.recommendations.pool import expand_interests


def test_only_approved_records_enter_the_pool(make_pool, make_location, make_hotel):
    pool = make_pool(
        [
            make_location("a"),
            make_location("b", approval_status="pending"),
            make_location("c", approval_status=None),
        ],
        [make_hotel("h1", "a", 100), make_hotel("h2", "a", 50, approval_status="rejected")],
    )

    assert [c.id for c in pool.candidates] == ["a"]
    assert pool.candidates[0].hotel.id == "h1"
    assert pool.counts.available.locations == 1
    assert pool.counts.available.hotels == 1


def test_first_record_wins_on_duplicate_ids(make_pool, make_location):
    first = make_location("a", entry_fee=10)
    duplicate = make_location("a", entry_fee=99)

    pool = make_pool([first, duplicate])

    assert len(pool) == 1
    assert pool.candidates[0].location.entry_fee == 10


def test_invalid_records_are_dropped(make_pool, make_location):
    pool = make_pool([make_location("a"), {"id": "broken", "approval_status": "approved"}])
    assert [c.id for c in pool.candidates] == ["a"]


def test_no_approved_locations_raises(make_pool, make_location):
    with pytest.raises(EmptyPoolError) as excinfo:
        make_pool([make_location("a", approval_status="pending")])

    assert excinfo.value.code == "NO_LOCATIONS"
    assert excinfo.value.counts.available.locations == 0


def test_destination_and_country_scope(make_pool, make_location):
    locations = [
        make_location("dhaka", city="Dhaka"),
        make_location("cox", city="Cox's Bazar"),
        make_location("kathmandu", city="Kathmandu", country="Nepal"),
    ]

    by_city = make_pool(locations, destination="cox's")
    by_country = make_pool(locations, country="nepal")

    assert [c.id for c in by_city.candidates] == ["cox"]
    assert by_city.counts.available.locations == 1
    assert [c.id for c in by_country.candidates] == ["kathmandu"]
    assert "geography" in by_city.filters_applied


def test_destination_outside_catalog_raises(make_pool, make_location):
    with pytest.raises(EmptyPoolError):
        make_pool([make_location("a", city="Dhaka")], destination="Sylhet")


def test_min_rating_filters_locations_and_hotels(make_pool, make_location, make_hotel):
    pool = make_pool(
        [make_location("a", rating=4.6), make_location("b", rating=3.0)],
        [
            make_hotel("h1", "a", 50, rating=3.5),
            make_hotel("h2", "a", 80, rating=4.8),
            make_hotel("h3", "a", 60),
            make_hotel("h4", "b", 20, rating=5.0),
        ],
        min_rating=4.5,
    )

    assert [c.id for c in pool.candidates] == ["a"]
    assert {h.id for h in pool.hotels} == {"h2", "h3"}
    # cheapest surviving hotel
    assert pool.candidates[0].hotel.id == "h3"
    assert pool.counts.available.hotels == 4
    assert pool.counts.filtered.hotels == 2
    assert pool.filters_applied == ("approval", "rating")


def test_interests_match_through_synonyms(make_pool, make_location):
    pool = make_pool(
        [
            make_location("fort", tags=("historical",)),
            make_location("beach", tags=("beach",)),
            make_location("hill", tags=("mountain",)),
        ],
        interests=["cultural"],
    )

    assert [c.id for c in pool.candidates] == ["fort"]
    assert pool.filters_applied == ("approval", "interests")


def test_expand_interests_includes_synonyms():
    expanded = expand_interests(["adventure", "unknown"])
    assert {"adventure", "natural", "mountain", "hiking", "outdoor", "unknown"} <= expanded


def test_links_cheapest_hotel_and_arriving_leg(make_pool, make_location, make_hotel, make_leg):
    pool = make_pool(
        [make_location("a"), make_location("b")],
        [make_hotel("h2", "a", 100), make_hotel("h1", "a", 100), make_hotel("h3", "b", 40)],
        [
            make_leg("t1", "a", 30, from_location_id="b"),
            make_leg("t0", "a", 30),
            make_leg("t2", "b", 10, from_location_id="a"),
        ],
    )
    a, b = pool.candidates

    # equal rates fall back to id order
    assert a.hotel.id == "h1"
    assert a.transport.id == "t0"
    assert b.hotel.id == "h3"
    assert b.transport.id == "t2"


def test_counts_are_monotonic(make_pool, make_location, make_hotel, make_leg):
    pool = make_pool(
        [make_location("a", tags=("beach",)), make_location("b", tags=("museum",))],
        [make_hotel("h1", "a", 10), make_hotel("h2", "b", 10)],
        [make_leg("t1", "a", 5), make_leg("t2", "b", 5)],
        interests=["beach"],
    )

    counts = pool.counts
    assert counts.filtered.locations == 1 <= counts.available.locations == 2
    assert counts.filtered.hotels == 1 <= counts.available.hotels == 2
    assert counts.filtered.transport == 1 <= counts.available.transport == 2


def test_no_match_leaves_an_empty_pool(make_pool, make_location):
    pool = make_pool([make_location("a", rating=3.0)], min_rating=4.5)

    assert len(pool) == 0
    assert pool.counts.available.locations == 1
    assert pool.counts.filtered.locations == 0


def test_malformed_tag_values_do_not_break_the_pool(make_pool, make_location):
    pool = make_pool([make_location("a"), make_location("b", tags=(), category=7) | {"tags": 5}])

    assert [c.id for c in pool.candidates] == ["a", "b"]
    assert pool.candidates[1].tags == ()
