from __future__ import annotations

import threading
import time
import uuid

from ..recommendations.models import SaveItineraryRequest, SavedItinerary

DEFAULT_TITLE = "Smart Recommendation Itinerary"

_itineraries: dict[str, SavedItinerary] = {}
_lock = threading.Lock()


def generate_tags(request: SaveItineraryRequest) -> list[str]:
    """Tags for a saved itinerary: provenance, strategy, interests, applied features."""
    tags = ["ai-generated", "smart-recommendation"]
    tags.append(f"{request.itinerary.strategy_used.value}-optimized")
    tags.extend(sorted(request.preferences.interests))
    tags.extend(f.value for f in request.itinerary.features)
    # De-duplicate, keeping first occurrence
    return list(dict.fromkeys(tags))


def save_itinerary(request: SaveItineraryRequest) -> SavedItinerary:
    itinerary = request.itinerary
    preferences = request.preferences
    strategy = itinerary.strategy_used
    saved = SavedItinerary(
        id=uuid.uuid4().hex,
        title=request.title or DEFAULT_TITLE,
        description=f"Generated using {strategy.value} optimization strategy",
        destination=itinerary.destinations[0].name if itinerary.destinations else "",
        strategy=strategy,
        start_date=preferences.start_date,
        end_date=preferences.trip_end,
        budget=preferences.budget,
        estimated_cost=round(itinerary.total_cost, 2),
        days=itinerary.days,
        tags=generate_tags(request),
        created_at=time.time(),
    )
    with _lock:
        _itineraries[saved.id] = saved
    return saved


def get_itinerary(itinerary_id: str) -> SavedItinerary | None:
    with _lock:
        return _itineraries.get(itinerary_id)


def clear_itineraries() -> None:
    with _lock:
        _itineraries.clear()
