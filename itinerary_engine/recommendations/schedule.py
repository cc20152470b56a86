from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .cost import estimate
from .models import DayPlan
from .pool import Candidate


def plan_days(
    destinations: Sequence[Candidate],
    duration: int,
    start_date: date | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[DayPlan]:
    """Lay destinations out one per day; leftover days extend the last stop.

    Day costs add up to the itinerary estimate: an arrival day carries the
    stop's full one-night estimate, an extended day one more hotel night.
    """
    if not destinations:
        return []

    days: list[DayPlan] = []
    for index in range(duration):
        arrival = index < len(destinations)
        stop = destinations[min(index, len(destinations) - 1)]
        if arrival:
            cost = estimate(stop, nights=1, config=config)
        else:
            cost = stop.hotel.nightly_rate if stop.hotel else 0.0
        days.append(DayPlan(
            day=index + 1,
            travel_date=start_date + timedelta(days=index) if start_date else None,
            location_id=stop.id,
            location_name=stop.name,
            hotel_id=stop.hotel.id if stop.hotel else None,
            arrival=arrival,
            cost=cost,
        ))
    return days
