from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")


@dataclass(frozen=True)
class SessionConfig:
    """Lifetime limits for per-browser discovery sessions."""

    idle_ttl_seconds: float = float(os.getenv("SESSION_IDLE_TTL", "1800"))
    max_sessions: int = int(os.getenv("MAX_SESSIONS", "1000"))


DEFAULT_SESSION_CONFIG = SessionConfig()
