from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, List, TypeVar

import pandas as pd
from pydantic import BaseModel, ValidationError

from ..recommendations.models import HotelRecord, LocationRecord, TransportRecord
from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)

LOCATION_COLUMNS: List[str] = [
    "id",
    "name",
    "description",
    "country",
    "city",
    "tags",
    "rating",
    "rating_count",
    "entry_fee",
    "currency",
    "latitude",
    "longitude",
    "approval_status",
    "quality_score",
]

HOTEL_COLUMNS: List[str] = [
    "id",
    "name",
    "location_id",
    "nightly_rate",
    "currency",
    "amenities",
    "rating",
    "approval_status",
    "quality_score",
]

TRANSPORT_COLUMNS: List[str] = [
    "id",
    "name",
    "type",
    "from_location_id",
    "to_location_id",
    "fare",
    "currency",
    "estimated_duration",
    "rating",
    "approval_status",
    "quality_score",
]

_R = TypeVar("_R", bound=BaseModel)


def location_quality(record: LocationRecord, raw: dict[str, Any]) -> float:
    score = record.rating / 5 * 0.4
    score += min(record.rating_count / 100, 1) * 0.2
    score += min(len(record.description) / 200, 1) * 0.2
    if record.position is not None:
        score += 0.1
    if raw.get("images"):
        score += 0.1
    return score


def _hotel_has_coordinates(raw: dict[str, Any]) -> bool:
    location = raw.get("location")
    if isinstance(location, dict):
        coordinates = location.get("coordinates")
        if isinstance(coordinates, list) and len(coordinates) == 2:
            return True
    return raw.get("latitude") is not None and raw.get("longitude") is not None


def hotel_quality(record: HotelRecord, raw: dict[str, Any]) -> float:
    score = (record.rating or 0.0) / 5 * 0.4
    score += min(len(record.amenities) / 10, 1) * 0.2
    if record.nightly_rate > 0:
        score += 0.2
    if _hotel_has_coordinates(raw):
        score += 0.1
    contact = raw.get("contactInfo") or {}
    if contact.get("phone") or contact.get("email"):
        score += 0.1
    return score


def transport_quality(record: TransportRecord, raw: dict[str, Any]) -> float:
    score = (record.rating or 0.0) / 5 * 0.3
    route = raw.get("route") or {}
    if (route.get("from") and route.get("to")) or (record.from_location_id and record.to_location_id):
        score += 0.3
    if record.fare > 0:
        score += 0.2
    if raw.get("facilities"):
        score += 0.1
    if raw.get("operator"):
        score += 0.1
    return score


def _is_complete_location(record: LocationRecord) -> bool:
    return bool(record.tags) and record.rating > 0


def _is_complete_hotel(record: HotelRecord) -> bool:
    return bool(record.name) and record.nightly_rate > 0 and record.rating is not None


def _is_complete_transport(record: TransportRecord) -> bool:
    return bool(record.name) and bool(record.type) and record.to_location_id is not None


def _read_export(path: Path) -> list[dict[str, Any]]:
    if not path.is_file():
        logger.warning("Raw export %s not found, treating as empty", path)
        return []
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        # Exports wrapped as {"data": [...]}
        data = data.get("data") or []
    return [item for item in data if isinstance(item, dict)]


def _normalize(
    raw_records: list[dict[str, Any]],
    model: type[_R],
    is_complete: Callable[[_R], bool],
    quality: Callable[[_R, dict[str, Any]], float],
    columns: List[str],
    min_quality: float,
) -> pd.DataFrame:
    rows: list[dict[str, Any]] = []
    for raw in raw_records:
        try:
            record = model.model_validate(raw)
        except ValidationError:
            logger.debug("Skipping invalid %s %r", model.__name__, raw.get("_id", raw.get("id")))
            continue
        if not is_complete(record):
            continue
        score = quality(record, raw)
        if score <= min_quality:
            continue
        row = record.model_dump()
        for key, value in row.items():
            if isinstance(value, tuple):
                row[key] = ",".join(value)
        row["quality_score"] = round(score, 3)
        rows.append(row)

    logger.info("%s: kept %d of %d raw records", model.__name__, len(rows), len(raw_records))
    return pd.DataFrame(rows, columns=columns)


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    """
    Execute the catalog ingestion pipeline.

    Steps:
    - Read the raw location, hotel and transport JSON exports.
    - Normalize each record, dropping incomplete and low-quality ones.
    - Persist the canonical catalog as CSVs for the recommendation service.

    Returns the processed directory.
    """
    config.raw_data_dir.mkdir(parents=True, exist_ok=True)
    config.processed_data_dir.mkdir(parents=True, exist_ok=True)

    jobs = [
        (config.locations_filename, LocationRecord, _is_complete_location, location_quality, LOCATION_COLUMNS),
        (config.hotels_filename, HotelRecord, _is_complete_hotel, hotel_quality, HOTEL_COLUMNS),
        (config.transport_filename, TransportRecord, _is_complete_transport, transport_quality, TRANSPORT_COLUMNS),
    ]
    for filename, model, is_complete, quality, columns in jobs:
        raw_records = _read_export(config.raw_path(filename))
        frame = _normalize(raw_records, model, is_complete, quality, columns, config.min_quality_score)
        frame.to_csv(config.processed_path(filename), index=False)

    return config.processed_data_dir


if __name__ == "__main__":
    path = run_ingestion()
    print(f"Ingestion complete. Processed catalog saved to: {path}")
