"""
Recommendation pipeline.

Responsibilities:
- Run one request through pooling, ranking, allocating and enhancing.
- Surface any stage failure as the same exception it was raised as.
- Compare all strategies over one shared pool, isolating per-strategy failures.
- Convert results and failures into the response envelopes the host returns.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date

from .allocator import select
from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .cost import estimate_itinerary, nights_per_stop, stop_costs
from .enhancements import apply_enhancements
from .errors import RecommendationError, Stage
from .models import (
    ComparisonEntry,
    ComparisonOut,
    CompareResponse,
    DestinationOut,
    ErrorResponse,
    GenerateResponse,
    ItineraryOut,
    ItineraryResult,
    Preferences,
    QuickRequest,
    Strategy,
    SummaryOut,
)
from .pool import Candidate, CandidatePool, RawCatalog, build_pool
from .schedule import plan_days
from .strategies import rank

logger = logging.getLogger(__name__)

QUICK_BUDGET = 1000.0
QUICK_DURATION = 3
QUICK_INTERESTS = ("cultural", "historical")
QUICK_MIN_RATING = 3.5


def _destinations(
    final: list[Candidate], duration: int, config: EngineConfig,
) -> list[DestinationOut]:
    nights = nights_per_stop(len(final), duration)
    costs = stop_costs(final, duration, config)
    return [
        DestinationOut(
            order=index + 1,
            id=c.id,
            name=c.name,
            city=c.location.city,
            country=c.location.country,
            tags=list(c.tags),
            rating=c.rating,
            entry_fee=c.location.entry_fee,
            latitude=c.location.latitude,
            longitude=c.location.longitude,
            hotel=c.hotel,
            transport=c.transport,
            nights=n,
            estimated_cost=cost,
        )
        for index, (c, n, cost) in enumerate(zip(final, nights, costs))
    ]


def recommend(
    pool: CandidatePool,
    preferences: Preferences,
    strategy: Strategy | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> ItineraryResult:
    """Rank, allocate and enhance over an already built pool."""
    strategy = Strategy(strategy or preferences.optimization_goal)
    stage = Stage.ranking
    try:
        logger.debug("Stage %s (%s)", stage.value, strategy.value)
        ranked = rank(strategy, pool, config)

        stage = Stage.allocating
        logger.debug("Stage %s (%s)", stage.value, strategy.value)
        selected = select(ranked, preferences.duration, preferences.budget, config)

        stage = Stage.enhancing
        logger.debug("Stage %s (%s)", stage.value, strategy.value)
        final, features = apply_enhancements(
            selected,
            preferences.enhancements,
            pool,
            preferences.duration,
            preferences.budget,
            config,
        )
    except RecommendationError as exc:
        if exc.counts is None:
            exc.counts = pool.counts
        logger.info("Strategy %s failed at %s: %s", strategy.value, stage.value, exc.code)
        raise

    destinations = _destinations(final, preferences.duration, config)
    result = ItineraryResult(
        destinations=destinations,
        total_cost=estimate_itinerary(final, preferences.duration, config),
        budget=preferences.budget,
        strategy_used=strategy,
        features=features,
        counts=pool.counts,
        filters_applied=list(pool.filters_applied),
        days=plan_days(final, preferences.duration, preferences.start_date, config),
    )
    logger.debug("Stage %s (%s)", Stage.done.value, strategy.value)
    logger.info(
        "Strategy %s: %d destinations, total %.2f of %.2f, features %s",
        strategy.value,
        result.destination_count,
        result.total_cost,
        preferences.budget,
        [f.value for f in features],
    )
    return result


def generate(
    raw: RawCatalog,
    preferences: Preferences,
    strategy: Strategy | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> ItineraryResult:
    """Build a pool from *raw* and produce one itinerary.

    ``strategy`` overrides ``preferences.optimization_goal`` when given.
    """
    logger.debug("Stage %s", Stage.pooling.value)
    pool = build_pool(raw.locations, raw.hotels, raw.transport, preferences)
    return recommend(pool, preferences, strategy, config)


def _compare_one(
    strategy: Strategy,
    pool: CandidatePool,
    preferences: Preferences,
    config: EngineConfig,
) -> ComparisonEntry:
    try:
        result = recommend(pool, preferences, strategy, config)
    except RecommendationError as exc:
        return ComparisonEntry(strategy=strategy, ok=False, code=exc.code, error=exc.message)
    except Exception as exc:
        logger.warning("Strategy %s failed during comparison", strategy.value, exc_info=True)
        return ComparisonEntry(strategy=strategy, ok=False, code="STRATEGY_FAILED", error=str(exc))
    return ComparisonEntry(
        strategy=strategy,
        ok=True,
        cost=result.total_cost,
        destination_count=result.destination_count,
        features=result.features,
    )


def compare_all(
    raw: RawCatalog,
    preferences: Preferences,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[ComparisonEntry]:
    """Run every strategy over one shared pool.

    Always returns one entry per strategy, in ``Strategy`` order. Only an
    ``EmptyPoolError`` from building the pool propagates.
    """
    pool = build_pool(raw.locations, raw.hotels, raw.transport, preferences)
    strategies = list(Strategy)
    with ThreadPoolExecutor(max_workers=max(1, config.compare_max_workers)) as executor:
        futures = {
            s: executor.submit(_compare_one, s, pool, preferences, config)
            for s in strategies
        }
        entries = [futures[s].result() for s in strategies]
    logger.info(
        "Compared %d strategies, %d succeeded",
        len(entries), sum(1 for e in entries if e.ok),
    )
    return entries


def quick_preferences(request: QuickRequest, today: date | None = None) -> Preferences:
    """Fill the quick-recommendation defaults around what the caller supplied."""
    return Preferences(
        budget=request.budget or QUICK_BUDGET,
        duration=request.duration or QUICK_DURATION,
        interests=request.interests or QUICK_INTERESTS,
        optimization_goal=Strategy.budget,
        min_rating=QUICK_MIN_RATING,
        start_date=today or date.today(),
    )


# ---------------------------------------------------------------------------
# Response envelopes
# ---------------------------------------------------------------------------


def _rounded(value: float) -> float:
    return round(value, 2)


def to_generate_response(result: ItineraryResult, preferences: Preferences) -> GenerateResponse:
    destinations = [
        d.model_copy(update={"estimated_cost": _rounded(d.estimated_cost)})
        for d in result.destinations
    ]
    days = [day.model_copy(update={"cost": _rounded(day.cost)}) for day in result.days]
    total = _rounded(result.total_cost)
    return GenerateResponse(
        itinerary=ItineraryOut(
            destinations=destinations,
            total_cost=total,
            start_date=preferences.start_date,
            end_date=preferences.trip_end,
            days=days,
        ),
        summary=SummaryOut(
            strategy_used=result.strategy_used,
            total_cost=total,
            destination_count=result.destination_count,
            remaining_budget=_rounded(result.remaining_budget),
            counts=result.counts,
            features=result.features,
            filters_applied=result.filters_applied,
        ),
    )


def to_error_response(exc: RecommendationError) -> ErrorResponse:
    return ErrorResponse(code=exc.code, message=exc.message, counts=exc.counts)


def to_compare_response(entries: list[ComparisonEntry]) -> CompareResponse:
    rounded = [
        e.model_copy(update={"cost": _rounded(e.cost)}) if e.cost is not None else e
        for e in entries
    ]
    return CompareResponse(
        comparison=ComparisonOut(
            strategies=[e.strategy for e in entries],
            recommendations=rounded,
        ),
    )
