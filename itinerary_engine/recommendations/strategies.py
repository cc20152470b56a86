"""
Ranking strategies.

Each optimisation goal maps to a pure ranking function over the candidate
pool. Every ranking is a total order: ties fall back to ascending candidate
id, so identical input always yields identical output.

* **budget**   cheapest first, then higher rating.
* **activity** most requested interests matched (or most tags when no
  interests were given), then higher rating.
* **comfort**  higher rating, then more hotel amenities, then cheaper.
* **time**     greedy nearest-neighbour tour: the cheapest stop first, then
  repeatedly the stop with the shortest travel time from the previous one.
"""
from __future__ import annotations

import logging
import math
from typing import Callable

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .cost import estimate
from .errors import InvalidCandidateDataError, NoMatchingLocationsError
from .models import Strategy
from .pool import Candidate, CandidatePool

logger = logging.getLogger(__name__)

Ranker = Callable[[CandidatePool, EngineConfig], list[Candidate]]


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    radius_km = 6371.0
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlon / 2) ** 2
    )
    return radius_km * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _require_position(candidate: Candidate) -> tuple[float, float]:
    position = candidate.location.position
    if position is None:
        raise InvalidCandidateDataError(
            f"Location {candidate.id} ({candidate.name}) has no position"
        )
    lat, lon = position
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        raise InvalidCandidateDataError(
            f"Location {candidate.id} ({candidate.name}) has an invalid position ({lat}, {lon})"
        )
    return position


def _leg_hours(pool: CandidatePool) -> dict[tuple[str, str], float]:
    """Shortest known leg duration per (from, to) location pair."""
    hours: dict[tuple[str, str], float] = {}
    for leg in pool.transport:
        if leg.from_location_id and leg.to_location_id and leg.estimated_duration is not None:
            key = (leg.from_location_id, leg.to_location_id)
            hours[key] = min(hours.get(key, math.inf), leg.estimated_duration)
    return hours


def travel_hours(
    origin: Candidate,
    target: Candidate,
    legs: dict[tuple[str, str], float] | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    """A known transport leg's duration, else road distance over average speed."""
    if legs:
        known = legs.get((origin.id, target.id))
        if known is not None:
            return known
    lat1, lon1 = _require_position(origin)
    lat2, lon2 = _require_position(target)
    road_km = haversine(lat1, lon1, lat2, lon2) * config.road_factor
    return road_km / config.travel_speed_kmh


def _rank_budget(pool: CandidatePool, config: EngineConfig) -> list[Candidate]:
    return sorted(
        pool.candidates,
        key=lambda c: (estimate(c, config=config), -c.rating, c.id),
    )


def _variety(pool: CandidatePool, candidate: Candidate) -> int:
    if pool.interests:
        return pool.matched_interests(candidate)
    return len(candidate.tags)


def _rank_activity(pool: CandidatePool, config: EngineConfig) -> list[Candidate]:
    return sorted(
        pool.candidates,
        key=lambda c: (-_variety(pool, c), -c.rating, c.id),
    )


def _rank_comfort(pool: CandidatePool, config: EngineConfig) -> list[Candidate]:
    return sorted(
        pool.candidates,
        key=lambda c: (-c.rating, -c.amenity_count, estimate(c, config=config), c.id),
    )


def _rank_time(pool: CandidatePool, config: EngineConfig) -> list[Candidate]:
    for candidate in pool.candidates:
        _require_position(candidate)

    remaining = sorted(pool.candidates, key=lambda c: (estimate(c, config=config), c.id))
    if not remaining:
        return []

    legs = _leg_hours(pool)
    tour = [remaining.pop(0)]
    while remaining:
        current = tour[-1]
        nearest = min(
            remaining,
            key=lambda c: (travel_hours(current, c, legs, config), estimate(c, config=config), c.id),
        )
        remaining.remove(nearest)
        tour.append(nearest)
    return tour


_RANKERS: dict[Strategy, Ranker] = {
    Strategy.budget: _rank_budget,
    Strategy.activity: _rank_activity,
    Strategy.comfort: _rank_comfort,
    Strategy.time: _rank_time,
}


def rank(
    strategy: Strategy | str,
    pool: CandidatePool,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[Candidate]:
    """Return the pool's candidates in *strategy* order.

    Raises ``NoMatchingLocationsError`` instead of returning an empty list.
    """
    strategy = Strategy(strategy)
    ranked = _RANKERS[strategy](pool, config)
    if not ranked:
        raise NoMatchingLocationsError(
            "No locations match your current preferences. Try lowering "
            "min_rating, changing interests, or removing destination filters.",
            counts=pool.counts,
        )
    logger.info("Strategy %s ranked %d candidates", strategy.value, len(ranked))
    return ranked
