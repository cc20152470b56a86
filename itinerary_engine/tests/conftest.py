from __future__ import annotations

from typing import Any

import pytest

from itinerary_engine.analytics.store import clear_events
from itinerary_engine.itineraries.store import clear_itineraries
from itinerary_engine.recommendations.models import Preferences
from itinerary_engine.recommendations.pool import CandidatePool, RawCatalog, build_pool


def location(
    id: str,
    entry_fee: float = 0.0,
    rating: float = 4.0,
    tags: tuple[str, ...] = ("cultural",),
    city: str = "Dhaka",
    country: str = "Bangladesh",
    latitude: float | None = 23.72,
    longitude: float | None = 90.40,
    approval_status: str = "approved",
    **extra: Any,
) -> dict[str, Any]:
    return {
        "id": id,
        "name": f"Place {id}",
        "entry_fee": entry_fee,
        "rating": rating,
        "tags": list(tags),
        "city": city,
        "country": country,
        "latitude": latitude,
        "longitude": longitude,
        "approval_status": approval_status,
        **extra,
    }


def hotel(
    id: str,
    location_id: str,
    nightly_rate: float,
    amenities: tuple[str, ...] = (),
    rating: float | None = None,
    approval_status: str = "approved",
) -> dict[str, Any]:
    return {
        "id": id,
        "name": f"Hotel {id}",
        "location_id": location_id,
        "nightly_rate": nightly_rate,
        "amenities": list(amenities),
        "rating": rating,
        "approval_status": approval_status,
    }


def leg(
    id: str,
    to_location_id: str,
    fare: float,
    from_location_id: str | None = None,
    estimated_duration: float | None = None,
    approval_status: str = "approved",
) -> dict[str, Any]:
    return {
        "id": id,
        "name": f"Leg {id}",
        "type": "bus",
        "from_location_id": from_location_id,
        "to_location_id": to_location_id,
        "fare": fare,
        "estimated_duration": estimated_duration,
        "approval_status": approval_status,
    }


@pytest.fixture
def make_location():
    return location


@pytest.fixture
def make_hotel():
    return hotel


@pytest.fixture
def make_leg():
    return leg


@pytest.fixture
def make_pool():
    def _make(
        locations: list[dict[str, Any]],
        hotels: list[dict[str, Any]] | None = None,
        transport: list[dict[str, Any]] | None = None,
        **preferences: Any,
    ) -> CandidatePool:
        preferences.setdefault("budget", 10_000)
        preferences.setdefault("duration", 3)
        return build_pool(locations, hotels or [], transport or [], Preferences(**preferences))

    return _make


@pytest.fixture
def priced_catalog() -> RawCatalog:
    """Five stops costing 50, 80, 120, 40 and 200 in entry fees alone."""
    return RawCatalog(locations=[
        location("a", entry_fee=50),
        location("b", entry_fee=80),
        location("c", entry_fee=120),
        location("d", entry_fee=40),
        location("e", entry_fee=200),
    ])


@pytest.fixture(autouse=True)
def _clean_host_state():
    clear_events()
    clear_itineraries()
    yield
    clear_events()
    clear_itineraries()
