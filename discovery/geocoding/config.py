from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class GeocodingConfig:
    access_token: str = os.getenv("MAPBOX_TOKEN", "")
    base_url: str = "https://api.mapbox.com/geocoding/v5/mapbox.places"
    timeout: float = float(os.getenv("GEOCODE_TIMEOUT", "5.0"))
    limit: int = 1
    enabled: bool = os.getenv("GEOCODING_ENABLED", "true").lower() in {"1", "true", "yes"}


DEFAULT_GEOCODING_CONFIG = GeocodingConfig()
