from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .pool import RawCatalog

_LOCATIONS_CSV = "locations.csv"
_HOTELS_CSV = "hotels.csv"
_TRANSPORT_CSV = "transport.csv"

_frames: dict[str, pd.DataFrame] = {}
_catalog: RawCatalog | None = None


def _read(path: Path) -> pd.DataFrame:
    if not path.is_file():
        return pd.DataFrame()
    return pd.read_csv(path, dtype={"id": str, "location_id": str, "from_location_id": str, "to_location_id": str})


def _records(df: pd.DataFrame) -> list[dict[str, Any]]:
    # NaN -> None so missing values read as absent, not as numbers
    return df.astype(object).where(df.notna(), None).to_dict("records")


def _load(config: EngineConfig) -> None:
    global _catalog
    for name in (_LOCATIONS_CSV, _HOTELS_CSV, _TRANSPORT_CSV):
        _frames[name] = _read(config.catalog_dir / name)
    _catalog = RawCatalog(
        locations=_records(_frames[_LOCATIONS_CSV]),
        hotels=_records(_frames[_HOTELS_CSV]),
        transport=_records(_frames[_TRANSPORT_CSV]),
    )


def get_catalog(config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> RawCatalog:
    """Return the processed catalog as raw records, loading it on first call."""
    if _catalog is None:
        _load(config)
    return _catalog


def get_dataframe(config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> pd.DataFrame:
    """Return the in-memory locations DataFrame, loading it on first call."""
    if _catalog is None:
        _load(config)
    return _frames[_LOCATIONS_CSV]


def reset_catalog() -> None:
    """Drop the cached catalog so the next call reloads it from disk."""
    global _catalog
    _catalog = None
    _frames.clear()
