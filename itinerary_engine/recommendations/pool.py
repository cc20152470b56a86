"""
Candidate pool construction.

Responsibilities:
- Parse collaborator records into typed records, dropping invalid ones.
- Keep approved, de-duplicated records inside the requested geographic scope.
- Apply the soft filters (minimum rating, then interests) as pandas masks.
- Link each surviving location to its cheapest hotel and arriving transport leg.
- Report per-category counts before and after preference filtering.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, TypeVar

import pandas as pd
from pydantic import BaseModel, ValidationError

from .errors import EmptyPoolError
from .models import (
    CandidateCounts,
    HotelRecord,
    LocationRecord,
    PoolCounts,
    Preferences,
    TransportRecord,
)

logger = logging.getLogger(__name__)

# Related tags an interest also matches.
INTEREST_SYNONYMS: dict[str, tuple[str, ...]] = {
    "relaxation": ("beach", "resort", "spa"),
    "adventure": ("natural", "mountain", "hiking", "outdoor"),
    "cultural": ("historical", "heritage", "museum", "temple"),
    "shopping": ("market", "bazaar", "mall"),
    "nature": ("natural", "park", "forest", "wildlife", "scenic"),
    "beach": ("coastal", "seaside", "ocean"),
    "historical": ("heritage", "ancient", "monument", "cultural"),
}

_R = TypeVar("_R", bound=BaseModel)


def expand_interest(interest: str) -> frozenset[str]:
    return frozenset((interest, *INTEREST_SYNONYMS.get(interest, ())))


def expand_interests(interests: Iterable[str]) -> frozenset[str]:
    expanded: set[str] = set()
    for interest in interests:
        expanded |= expand_interest(interest)
    return frozenset(expanded)


@dataclass(frozen=True)
class RawCatalog:
    """Read-only records supplied by the host for one request."""

    locations: list[dict[str, Any]] = field(default_factory=list)
    hotels: list[dict[str, Any]] = field(default_factory=list)
    transport: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class Candidate:
    location: LocationRecord
    hotel: HotelRecord | None = None
    transport: TransportRecord | None = None

    @property
    def id(self) -> str:
        return self.location.id

    @property
    def name(self) -> str:
        return self.location.name

    @property
    def tags(self) -> tuple[str, ...]:
        return self.location.tags

    @property
    def rating(self) -> float:
        return self.location.rating

    @property
    def amenity_count(self) -> int:
        return len(self.hotel.amenities) if self.hotel else 0


@dataclass(frozen=True)
class CandidatePool:
    """Filtered candidates shared, unchanged, by every strategy of a request."""

    candidates: tuple[Candidate, ...]
    hotels: tuple[HotelRecord, ...]
    transport: tuple[TransportRecord, ...]
    interests: frozenset[str]
    counts: CandidateCounts
    filters_applied: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.candidates)

    def matched_interests(self, candidate: Candidate) -> int:
        """Count requested interests the candidate satisfies, directly or via a synonym."""
        tags = set(candidate.tags)
        return sum(1 for interest in self.interests if tags & expand_interest(interest))


def _parse(model: type[_R], raw_records: Iterable[dict[str, Any]]) -> list[_R]:
    """Validate records, keeping approved ones; the first record wins per id."""
    records: list[_R] = []
    seen: set[str] = set()
    for raw in raw_records:
        try:
            record = model.model_validate(raw)
        except ValidationError as exc:
            record_id = raw.get("id") if isinstance(raw, dict) else None
            logger.warning(
                "Dropping invalid %s %r: %d validation error(s)",
                model.__name__, record_id, exc.error_count(),
            )
            continue
        if record.approval_status != "approved" or record.id in seen:
            continue
        seen.add(record.id)
        records.append(record)
    return records


def _location_frame(locations: list[LocationRecord]) -> pd.DataFrame:
    return pd.DataFrame({
        "id": [loc.id for loc in locations],
        "city_lower": [(loc.city or "").strip().lower() for loc in locations],
        "country_lower": [(loc.country or "").strip().lower() for loc in locations],
        "rating": [loc.rating for loc in locations],
        "tags": [set(loc.tags) for loc in locations],
    })


def build_pool(
    raw_locations: Iterable[dict[str, Any]],
    raw_hotels: Iterable[dict[str, Any]],
    raw_transport: Iterable[dict[str, Any]],
    preferences: Preferences,
) -> CandidatePool:
    locations = _parse(LocationRecord, raw_locations)
    hotels = _parse(HotelRecord, raw_hotels)
    legs = _parse(TransportRecord, raw_transport)
    filters = ["approval"]

    if not locations:
        raise EmptyPoolError(
            "No approved locations are available yet. Add and approve at least "
            "one location before generating recommendations.",
            counts=CandidateCounts(),
        )

    df = _location_frame(locations)

    # --- Hard filters: geographic scope ---
    scope = pd.Series(True, index=df.index)
    if preferences.destination:
        destination = preferences.destination.strip().lower()
        scope = scope & df["city_lower"].str.contains(destination, na=False, regex=False)
    if preferences.country:
        scope = scope & (df["country_lower"] == preferences.country.strip().lower())
    if preferences.destination or preferences.country:
        filters.append("geography")

    in_scope = df.loc[scope]
    scoped_ids = set(in_scope["id"])
    available = PoolCounts(
        locations=len(in_scope),
        hotels=sum(1 for h in hotels if h.location_id in scoped_ids),
        transport=sum(1 for t in legs if t.to_location_id in scoped_ids),
    )
    if in_scope.empty:
        raise EmptyPoolError(
            "No approved locations are available for the requested destination.",
            counts=CandidateCounts(available=available),
        )

    # --- Soft filters ---
    mask = pd.Series(True, index=in_scope.index)
    if preferences.min_rating > 0:
        mask = mask & (in_scope["rating"] >= preferences.min_rating)
        filters.append("rating")
    if preferences.interests:
        wanted = expand_interests(preferences.interests)
        mask = mask & in_scope["tags"].apply(lambda tags: bool(wanted & tags)).astype(bool)
        filters.append("interests")

    kept_ids = set(in_scope.loc[mask, "id"])
    kept_hotels = tuple(
        h for h in hotels
        if h.location_id in kept_ids
        and (h.rating is None or h.rating >= preferences.min_rating)
    )
    kept_legs = tuple(t for t in legs if t.to_location_id in kept_ids)

    cheapest_hotel: dict[str, HotelRecord] = {}
    for hotel in sorted(kept_hotels, key=lambda h: (h.nightly_rate, h.id)):
        cheapest_hotel.setdefault(hotel.location_id, hotel)
    cheapest_leg: dict[str, TransportRecord] = {}
    for leg in sorted(kept_legs, key=lambda t: (t.fare, t.id)):
        cheapest_leg.setdefault(leg.to_location_id, leg)

    candidates = tuple(
        Candidate(loc, cheapest_hotel.get(loc.id), cheapest_leg.get(loc.id))
        for loc in locations
        if loc.id in kept_ids
    )
    counts = CandidateCounts(
        available=available,
        filtered=PoolCounts(
            locations=len(candidates),
            hotels=len(kept_hotels),
            transport=len(kept_legs),
        ),
    )
    logger.info(
        "Pool built: %d/%d locations, %d/%d hotels, %d/%d transport after filters %s",
        counts.filtered.locations, available.locations,
        counts.filtered.hotels, available.hotels,
        counts.filtered.transport, available.transport,
        filters,
    )

    return CandidatePool(
        candidates=candidates,
        hotels=kept_hotels,
        transport=kept_legs,
        interests=preferences.interests,
        counts=counts,
        filters_applied=tuple(filters),
    )
