from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DEFAULT_CATALOG_DIR = Path(__file__).resolve().parent.parent / "data" / "processed"


@dataclass(frozen=True)
class EngineConfig:
    travel_speed_kmh: float = float(os.getenv("ENGINE_TRAVEL_SPEED_KMH", "40"))
    road_factor: float = 1.4  # straight-line km -> road km
    transport_fare_share: float = float(os.getenv("ENGINE_TRANSPORT_FARE_SHARE", "1.0"))
    luxury_quantile: float = 0.75
    compare_max_workers: int = max(1, int(os.getenv("ENGINE_COMPARE_WORKERS", "4")))
    catalog_dir: Path = Path(os.getenv("ENGINE_CATALOG_DIR", str(_DEFAULT_CATALOG_DIR)))


DEFAULT_ENGINE_CONFIG = EngineConfig()
