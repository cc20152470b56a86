from __future__ import annotations

import logging
import time

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from .analytics.aggregator import compute_analytics
from .analytics.store import COMPARE_EVENT, GENERATE_EVENT, get_events, record_event
from .itineraries.store import get_itinerary, save_itinerary
from .recommendations.data_store import get_catalog, get_dataframe
from .recommendations.errors import EmptyPoolError, RecommendationError
from .recommendations.models import (
    CompareResponse,
    Enhancement,
    GenerateResponse,
    Preferences,
    QuickRequest,
    SaveItineraryRequest,
    SavedItinerary,
    Strategy,
)
from .recommendations.service import (
    compare_all,
    generate,
    quick_preferences,
    to_compare_response,
    to_error_response,
    to_generate_response,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="Itinerary Recommendation API", version="1.0.0")


def _elapsed_ms(start_time: float) -> float:
    return round((time.time() - start_time) * 1000, 1)


def _status_for(exc: RecommendationError) -> int:
    return 404 if isinstance(exc, EmptyPoolError) else 422


def _run_generate(
    preferences: Preferences,
    strategy: Strategy | None = None,
) -> GenerateResponse | JSONResponse:
    start_time = time.time()
    event = {
        "strategy": (strategy or preferences.optimization_goal).value,
        "interests": sorted(preferences.interests),
        "enhancements": sorted(e.value for e in preferences.enhancements),
        "budget": preferences.budget,
        "duration": preferences.duration,
    }
    try:
        result = generate(get_catalog(), preferences, strategy)
    except RecommendationError as exc:
        record_event(GENERATE_EVENT, {
            **event,
            "success": False,
            "code": exc.code,
            "response_time_ms": _elapsed_ms(start_time),
        })
        return JSONResponse(
            status_code=_status_for(exc),
            content=to_error_response(exc).model_dump(mode="json"),
        )

    record_event(GENERATE_EVENT, {
        **event,
        "success": True,
        "destination_count": result.destination_count,
        "total_cost": result.total_cost,
        "response_time_ms": _elapsed_ms(start_time),
    })
    return to_generate_response(result, preferences)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    df = get_dataframe()
    cities: list[str] = []
    countries: list[str] = []
    tags: set[str] = set()
    if not df.empty:
        approved = df[df["approval_status"].fillna("").str.lower() == "approved"]
        cities = sorted(approved["city"].dropna().unique().tolist())
        countries = sorted(approved["country"].dropna().unique().tolist())
        for val in approved["tags"].dropna():
            for tag in str(val).split(","):
                tag = tag.strip().lower()
                if tag:
                    tags.add(tag)
    return {
        "cities": cities,
        "countries": countries,
        "interests": sorted(tags),
        "strategies": [s.value for s in Strategy],
        "enhancements": [e.value for e in Enhancement],
    }


# ── Recommendation endpoints ─────────────────────────────────────────────


@app.post("/recommendations/generate", response_model=GenerateResponse)
def generate_recommendation(body: Preferences):
    return _run_generate(body)


@app.post("/recommendations/strategy/{strategy}", response_model=GenerateResponse)
def generate_with_strategy(strategy: Strategy, body: Preferences):
    return _run_generate(body, strategy)


@app.post("/recommendations/quick", response_model=GenerateResponse)
def quick_recommendation(body: QuickRequest | None = None):
    return _run_generate(quick_preferences(body or QuickRequest()))


@app.post("/recommendations/compare", response_model=CompareResponse)
def compare_strategies(body: Preferences):
    start_time = time.time()
    try:
        entries = compare_all(get_catalog(), body)
    except RecommendationError as exc:
        record_event(COMPARE_EVENT, {
            "interests": sorted(body.interests),
            "success": False,
            "code": exc.code,
            "response_time_ms": _elapsed_ms(start_time),
        })
        return JSONResponse(
            status_code=_status_for(exc),
            content=to_error_response(exc).model_dump(mode="json"),
        )

    record_event(COMPARE_EVENT, {
        "interests": sorted(body.interests),
        "success": True,
        "failed_strategies": [e.strategy.value for e in entries if not e.ok],
        "response_time_ms": _elapsed_ms(start_time),
    })
    return to_compare_response(entries)


@app.post("/recommendations/save", response_model=SavedItinerary, status_code=201)
def save_recommendation(body: SaveItineraryRequest) -> SavedItinerary:
    saved = save_itinerary(body)
    logger.info("Saved itinerary %s (%s)", saved.id, saved.strategy.value)
    return saved


@app.get("/recommendations/itinerary/{itinerary_id}", response_model=SavedItinerary)
def read_itinerary(itinerary_id: str) -> SavedItinerary:
    saved = get_itinerary(itinerary_id)
    if saved is None:
        raise HTTPException(status_code=404, detail="Itinerary not found")
    return saved


# ── Analytics ────────────────────────────────────────────────────────────


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())
