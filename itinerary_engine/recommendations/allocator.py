from __future__ import annotations

import logging
from typing import Sequence

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .cost import estimate, estimate_itinerary
from .errors import NoDestinationsError
from .pool import Candidate

logger = logging.getLogger(__name__)


def _admit_one_night(
    ranked: Sequence[Candidate],
    duration: int,
    budget: float,
    config: EngineConfig,
) -> list[Candidate]:
    selected: list[Candidate] = []
    running = 0.0
    for candidate in ranked:
        if len(selected) >= duration:
            break
        cost = estimate(candidate, 1, config)
        if running + cost <= budget:
            selected.append(candidate)
            running += cost
        else:
            logger.debug(
                "Skipping %s: %.2f would exceed budget %.2f", candidate.id, running + cost, budget,
            )
    return selected


def _admit_as_last_stop(
    ranked: Sequence[Candidate],
    duration: int,
    budget: float,
    config: EngineConfig,
) -> list[Candidate]:
    selected: list[Candidate] = []
    for candidate in ranked:
        if len(selected) >= duration:
            break
        projected = estimate_itinerary([*selected, candidate], duration, config)
        if projected <= budget:
            selected.append(candidate)
        else:
            logger.debug(
                "Skipping %s as last stop: %.2f would exceed budget %.2f",
                candidate.id, projected, budget,
            )
    return selected


def select(
    ranked: Sequence[Candidate],
    duration: int,
    budget: float,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[Candidate]:
    """Greedily admit candidates in rank order while they fit the budget.

    A candidate that does not fit is skipped, not treated as a stop signal:
    a cheaper one further down the ranking may still fit. The ledger charges
    each admitted stop one night. When fewer than ``duration`` stops are
    admitted the last stop takes the remaining nights; if that overruns the
    budget, the walk is repeated charging every newcomer those nights as if
    it were the last stop.

    Returns at most ``duration`` candidates; a shorter list is a valid
    partial itinerary. Raises ``NoDestinationsError`` if nothing fits.
    """
    selected = _admit_one_night(ranked, duration, budget, config)
    if selected and estimate_itinerary(selected, duration, config) > budget:
        logger.debug("Extra nights overrun budget %.2f, re-walking with last-stop ledger", budget)
        selected = _admit_as_last_stop(ranked, duration, budget, config)

    if not selected:
        raise NoDestinationsError(
            f"None of the {len(ranked)} matching destinations fits within a budget "
            f"of {budget:g}. Try raising the budget."
        )

    logger.info(
        "Admitted %d of %d ranked candidates (%.2f of %.2f spent)",
        len(selected), len(ranked), estimate_itinerary(selected, duration, config), budget,
    )
    return selected
