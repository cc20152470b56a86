"""
Enhancement post-processing.

Enhancements are preferences, never requirements. Each tag has a concrete
predicate over the allocated destinations:

* ``luxury``          keep stops whose linked hotel rate is in the top
                      quartile of the linked hotel rates across the pool.
                      A stop is linked to its cheapest hotel, so a pricier
                      hotel at the same stop does not raise the bar.
* ``adventure``       keep stops tagged with an adventure/outdoor tag.
* ``cultural``        keep stops tagged with a cultural/heritage tag.
* ``family-friendly`` keep stops tagged family-friendly, or whose hotel
                      offers a family amenity.
* ``eco-friendly``    move eco-tagged stops (or stops with an eco-certified
                      hotel) to the front; nothing is removed.

A tag is skipped, and left out of the reported features, when no destination
qualifies or when the reshaped itinerary would exceed the budget (dropping or
reordering stops moves the extra nights to a different last stop).
"""
from __future__ import annotations

import logging
from typing import AbstractSet, Callable, Sequence

import numpy as np

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .cost import estimate_itinerary
from .models import Enhancement
from .pool import Candidate, CandidatePool

logger = logging.getLogger(__name__)

ADVENTURE_TAGS = frozenset({"adventure", "mountain", "hiking", "trekking", "outdoor", "water-sports"})
CULTURAL_TAGS = frozenset({"cultural", "historical", "heritage", "museum", "temple", "religious", "art"})
FAMILY_TAGS = frozenset({"family-friendly", "family", "kids", "park", "zoo"})
FAMILY_AMENITIES = frozenset({"family-rooms", "kids-club", "playground", "babysitting"})
ECO_TAGS = frozenset({"eco-friendly", "eco", "sustainable", "wildlife"})
ECO_AMENITIES = frozenset({"eco-certified", "solar-power", "organic-meals"})

Handler = Callable[[list[Candidate], CandidatePool, EngineConfig], list[Candidate]]


def _matches(candidate: Candidate, tags: frozenset[str], amenities: frozenset[str]) -> bool:
    if tags & set(candidate.tags):
        return True
    return candidate.hotel is not None and bool(amenities & set(candidate.hotel.amenities))


def _keep_tagged(tags: frozenset[str], amenities: frozenset[str] = frozenset()) -> Handler:
    def handler(selected: list[Candidate], pool: CandidatePool, config: EngineConfig) -> list[Candidate]:
        return [c for c in selected if _matches(c, tags, amenities)]

    return handler


def _luxury(selected: list[Candidate], pool: CandidatePool, config: EngineConfig) -> list[Candidate]:
    rates = [c.hotel.nightly_rate for c in pool.candidates if c.hotel is not None]
    if not rates:
        return []
    threshold = float(np.quantile(rates, config.luxury_quantile))
    return [c for c in selected if c.hotel is not None and c.hotel.nightly_rate >= threshold]


def _eco_first(selected: list[Candidate], pool: CandidatePool, config: EngineConfig) -> list[Candidate]:
    eco = [c for c in selected if _matches(c, ECO_TAGS, ECO_AMENITIES)]
    if not eco:
        return []
    return eco + [c for c in selected if not _matches(c, ECO_TAGS, ECO_AMENITIES)]


_HANDLERS: dict[Enhancement, Handler] = {
    Enhancement.luxury: _luxury,
    Enhancement.adventure: _keep_tagged(ADVENTURE_TAGS),
    Enhancement.cultural: _keep_tagged(CULTURAL_TAGS),
    Enhancement.family_friendly: _keep_tagged(FAMILY_TAGS, FAMILY_AMENITIES),
    Enhancement.eco_friendly: _eco_first,
}


def apply_enhancements(
    selected: Sequence[Candidate],
    enhancements: AbstractSet[Enhancement],
    pool: CandidatePool,
    duration: int,
    budget: float,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> tuple[list[Candidate], list[Enhancement]]:
    """Return the reshaped destination list and the enhancements actually applied."""
    current = list(selected)
    applied: list[Enhancement] = []
    # Enum order, so the outcome does not depend on set iteration order
    for enhancement in Enhancement:
        if enhancement not in enhancements:
            continue
        reshaped = _HANDLERS[enhancement](current, pool, config)
        if not reshaped:
            logger.info("Enhancement %s skipped: no destination qualifies", enhancement.value)
            continue
        if estimate_itinerary(reshaped, duration, config) > budget:
            logger.info("Enhancement %s skipped: itinerary would exceed budget", enhancement.value)
            continue
        current = reshaped
        applied.append(enhancement)
    return current, applied
