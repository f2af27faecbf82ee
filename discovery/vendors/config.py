from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DEFAULT_SEED = Path(__file__).resolve().parent.parent / "data" / "vendors.csv"


@dataclass(frozen=True)
class VendorStoreConfig:
    """
    Configuration for the vendor collection backing the discovery view.
    """

    seed_path: Path = Path(os.getenv("VENDOR_SEED_PATH", str(_DEFAULT_SEED)))
    spotlight_vendor_id: str = os.getenv("SPOTLIGHT_VENDOR_ID", "")
    list_separator: str = "|"


DEFAULT_VENDOR_STORE_CONFIG = VendorStoreConfig()
