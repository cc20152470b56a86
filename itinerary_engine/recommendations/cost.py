"""Deterministic cost estimates for single candidates and whole itineraries."""
from __future__ import annotations

import math
from typing import Sequence

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .pool import Candidate


def nights_per_stop(stops: int, duration: int | None = None) -> list[int]:
    """One night per stop; nights the stops don't cover go to the last stop."""
    nights = [1] * stops
    if stops and duration is not None and duration > stops:
        nights[-1] += duration - stops
    return nights


def estimate(
    candidate: Candidate,
    nights: int = 1,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    """Entry fee + nightly hotel rate x nights + arriving transport fare share."""
    entry = candidate.location.entry_fee
    lodging = candidate.hotel.nightly_rate * nights if candidate.hotel else 0.0
    fare = candidate.transport.fare * config.transport_fare_share if candidate.transport else 0.0
    return entry + lodging + fare


def stop_costs(
    candidates: Sequence[Candidate],
    duration: int | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[float]:
    nights = nights_per_stop(len(candidates), duration)
    return [estimate(c, n, config) for c, n in zip(candidates, nights)]


def estimate_itinerary(
    candidates: Sequence[Candidate],
    duration: int | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    # Unrounded; presentation layers round.
    return math.fsum(stop_costs(candidates, duration, config))
