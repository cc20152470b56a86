"""
Configuration for the catalog ingestion pipeline.
"""

from dataclasses import dataclass
from pathlib import Path

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class IngestionConfig:
    """
    Where the collaborator's raw JSON exports are read from and where the
    processed catalog CSVs are written.
    """

    raw_data_dir: Path = _DATA_DIR / "raw"
    processed_data_dir: Path = _DATA_DIR / "processed"
    locations_filename: str = "locations.json"
    hotels_filename: str = "hotels.json"
    transport_filename: str = "transport.json"
    min_quality_score: float = 0.3

    def raw_path(self, filename: str) -> Path:
        return self.raw_data_dir / filename

    def processed_path(self, filename: str) -> Path:
        return self.processed_data_dir / Path(filename).with_suffix(".csv").name


DEFAULT_INGESTION_CONFIG = IngestionConfig()
