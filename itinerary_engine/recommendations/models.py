from __future__ import annotations

import math
import re
from datetime import date, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Strategy(str, Enum):
    budget = "budget"
    activity = "activity"
    comfort = "comfort"
    time = "time"


class Enhancement(str, Enum):
    luxury = "luxury"
    adventure = "adventure"
    cultural = "cultural"
    family_friendly = "family-friendly"
    eco_friendly = "eco-friendly"


# ---------------------------------------------------------------------------
# Raw record normalisation
# ---------------------------------------------------------------------------

_NUMBER_RE = re.compile(r"(-?[0-9]+(?:\.[0-9]+)?)")


def _pick(raw: dict[str, Any], *keys: str) -> Any:
    """Return the first non-None value among *keys* (dotted paths allowed)."""
    for key in keys:
        value: Any = raw
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
                value = value[int(part)]
            else:
                value = None
                break
        if value is not None:
            return value
    return None


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, dict):
        value = value.get("average", value.get("amount"))
    if isinstance(value, str):
        match = _NUMBER_RE.search(value)
        if not match:
            return None
        value = match.group(1)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _as_tags(*values: Any) -> tuple[str, ...]:
    tags: set[str] = set()
    for value in values:
        if isinstance(value, str):
            parts = value.split(",")
        elif isinstance(value, (list, tuple, set, frozenset)):
            parts = value
        else:
            continue
        for part in parts:
            text = str(part).strip().lower()
            if text:
                tags.add(text)
    return tuple(sorted(tags))


def _as_id(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _approval(raw: dict[str, Any]) -> str:
    status = _pick(raw, "approval_status", "approvalStatus")
    return str(status).strip().lower() if status else "pending"


class LocationRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    country: str | None = None
    city: str | None = None
    tags: tuple[str, ...] = ()
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    rating_count: int = Field(default=0, ge=0)
    entry_fee: float = Field(default=0.0, ge=0.0)
    currency: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    approval_status: str = "pending"

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        rating = _as_float(_pick(data, "rating", "averageRating"))
        count = _as_float(_pick(data, "rating_count", "rating.count", "ratingCount"))
        return {
            "id": _as_id(_pick(data, "id", "_id")),
            "name": str(data.get("name") or "").strip(),
            "description": data.get("description") or "",
            "country": data.get("country"),
            "city": data.get("city"),
            "tags": _as_tags(data.get("tags"), data.get("category")),
            # Clamp to [0, 5]
            "rating": max(0.0, min(5.0, rating)) if rating is not None else 0.0,
            "rating_count": int(count) if count else 0,
            "entry_fee": _as_float(_pick(data, "entry_fee", "entryFee")) or 0.0,
            "currency": _pick(data, "currency", "entryFee.currency"),
            "latitude": _as_float(_pick(data, "latitude", "coordinates.latitude")),
            "longitude": _as_float(_pick(data, "longitude", "coordinates.longitude")),
            "approval_status": _approval(data),
        }

    @property
    def position(self) -> tuple[float, float] | None:
        if self.latitude is None or self.longitude is None:
            return None
        return self.latitude, self.longitude


class HotelRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    name: str = ""
    location_id: str | None = None
    nightly_rate: float = Field(default=0.0, ge=0.0)
    currency: str | None = None
    amenities: tuple[str, ...] = ()
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    approval_status: str = "pending"

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        location_id = _pick(data, "location_id", "locationId")
        return {
            "id": _as_id(_pick(data, "id", "_id")),
            "name": str(data.get("name") or "").strip(),
            "location_id": _as_id(location_id) or None,
            "nightly_rate": _as_float(_pick(
                data,
                "nightly_rate",
                "nightlyRate",
                "pricePerNight",
                "priceRange.min",
                "rooms.0.pricePerNight",
            )) or 0.0,
            "currency": _pick(data, "currency", "priceRange.currency"),
            "amenities": _as_tags(_pick(data, "amenities", "amenityTags", "amenity_tags", "facilities")),
            "rating": _as_float(_pick(data, "rating", "averageRating")),
            "approval_status": _approval(data),
        }


class TransportRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    name: str = ""
    type: str | None = None
    from_location_id: str | None = None
    to_location_id: str | None = None
    fare: float = Field(default=0.0, ge=0.0)
    currency: str | None = None
    estimated_duration: float | None = Field(default=None, ge=0.0, description="Hours")
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    approval_status: str = "pending"

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {
            "id": _as_id(_pick(data, "id", "_id")),
            "name": str(data.get("name") or "").strip(),
            "type": data.get("type"),
            "from_location_id": _as_id(_pick(data, "from_location_id", "fromLocationId")) or None,
            "to_location_id": _as_id(_pick(data, "to_location_id", "toLocationId", "locationId")) or None,
            "fare": _as_float(_pick(data, "fare", "price", "pricing.amount")) or 0.0,
            "currency": _pick(data, "currency", "pricing.currency"),
            "estimated_duration": _as_float(_pick(
                data, "estimated_duration", "estimatedDuration", "route.duration.estimated",
            )),
            "rating": _as_float(_pick(data, "rating", "averageRating")),
            "approval_status": _approval(data),
        }


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


class Preferences(BaseModel):
    model_config = ConfigDict(frozen=True)

    budget: float = Field(..., gt=0)
    duration: int = Field(..., ge=1, description="Trip length in days")
    start_date: date | None = None
    end_date: date | None = None
    interests: frozenset[str] = Field(default_factory=frozenset)
    optimization_goal: Strategy = Strategy.budget
    enhancements: frozenset[Enhancement] = Field(default_factory=frozenset)
    min_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    destination: str | None = Field(default=None, description="City name or part of it")
    country: str | None = None

    @field_validator("interests", "enhancements", mode="before")
    @classmethod
    def _lowercase_tags(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = value.split(",")
        return frozenset(str(v).strip().lower() for v in value if str(v).strip())

    @model_validator(mode="after")
    def _check_dates(self) -> Preferences:
        if self.end_date is None:
            return self
        if self.start_date is None:
            raise ValueError("end_date requires start_date")
        if self.end_date != self.trip_end:
            raise ValueError("end_date must equal start_date + duration - 1")
        return self

    @property
    def trip_end(self) -> date | None:
        if self.start_date is None:
            return None
        return self.start_date + timedelta(days=self.duration - 1)


class QuickRequest(BaseModel):
    budget: float | None = Field(default=None, gt=0)
    duration: int | None = Field(default=None, ge=1)
    interests: list[str] | None = None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class PoolCounts(BaseModel):
    locations: int = 0
    hotels: int = 0
    transport: int = 0


class CandidateCounts(BaseModel):
    available: PoolCounts = Field(default_factory=PoolCounts)
    filtered: PoolCounts = Field(default_factory=PoolCounts)


class DestinationOut(BaseModel):
    order: int
    id: str
    name: str
    city: str | None
    country: str | None
    tags: list[str]
    rating: float
    entry_fee: float
    latitude: float | None
    longitude: float | None
    hotel: HotelRecord | None = None
    transport: TransportRecord | None = None
    nights: int
    estimated_cost: float


class DayPlan(BaseModel):
    day: int
    travel_date: date | None = None
    location_id: str
    location_name: str
    hotel_id: str | None = None
    arrival: bool
    cost: float


class ItineraryResult(BaseModel):
    destinations: list[DestinationOut]
    total_cost: float
    budget: float
    strategy_used: Strategy
    features: list[Enhancement] = Field(default_factory=list)
    counts: CandidateCounts
    filters_applied: list[str] = Field(default_factory=list)
    days: list[DayPlan] = Field(default_factory=list)

    @property
    def destination_count(self) -> int:
        return len(self.destinations)

    @property
    def remaining_budget(self) -> float:
        return self.budget - self.total_cost


class ComparisonEntry(BaseModel):
    strategy: Strategy
    ok: bool
    cost: float | None = None
    destination_count: int | None = None
    features: list[Enhancement] = Field(default_factory=list)
    code: str | None = None
    error: str | None = None


# ---------------------------------------------------------------------------
# HTTP envelopes
# ---------------------------------------------------------------------------


class ItineraryOut(BaseModel):
    destinations: list[DestinationOut]
    total_cost: float
    start_date: date | None = None
    end_date: date | None = None
    days: list[DayPlan]


class SummaryOut(BaseModel):
    strategy_used: Strategy
    total_cost: float
    destination_count: int
    remaining_budget: float
    counts: CandidateCounts
    features: list[Enhancement]
    filters_applied: list[str]


class GenerateResponse(BaseModel):
    success: bool = True
    itinerary: ItineraryOut
    summary: SummaryOut


class ErrorResponse(BaseModel):
    success: bool = False
    code: str
    message: str
    counts: CandidateCounts | None = None


class ComparisonOut(BaseModel):
    strategies: list[Strategy]
    recommendations: list[ComparisonEntry]


class CompareResponse(BaseModel):
    success: bool = True
    comparison: ComparisonOut


class SaveItineraryRequest(BaseModel):
    itinerary: ItineraryResult
    preferences: Preferences
    title: str | None = Field(default=None, max_length=200)


class SavedItinerary(BaseModel):
    id: str
    title: str
    description: str
    destination: str
    strategy: Strategy
    start_date: date | None = None
    end_date: date | None = None
    budget: float
    estimated_cost: float
    days: list[DayPlan]
    tags: list[str]
    source: str = "smart-recommendation"
    status: str = "planning"
    created_at: float
