from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field

from .config import DEFAULT_SESSION_CONFIG, SessionConfig
from .geocoding.cache import get_geocode_cache
from .search.models import FilterState
from .shortlist.state import InMemoryCheckout, Shortlist
from .vendors.media import MediaFailures
from .vendors.models import Vendor
from .vendors.store import get_store
from .viewport.synchronizer import ViewportSynchronizer

logger = logging.getLogger(__name__)


@dataclass
class DiscoverySession:
    """All state of one user's discovery view, passed around by reference."""

    id: str
    synchronizer: ViewportSynchronizer
    filters: FilterState = field(default_factory=FilterState)
    shortlist: Shortlist = field(default_factory=Shortlist)
    media_failures: MediaFailures = field(default_factory=MediaFailures)
    refresh_error: str | None = None
    last_seen: float = field(default_factory=time.time)

    @property
    def vendors(self) -> list[Vendor]:
        return self.synchronizer.vendors

    @property
    def loaded(self) -> bool:
        """True once any load or viewport move has committed a vendor set."""
        return self.synchronizer.has_committed

    async def ensure_loaded(self) -> None:
        if self.loaded:
            return
        result = await self.synchronizer.initial_load()
        if not result.stale:
            self.refresh_error = result.error


_sessions: OrderedDict[str, DiscoverySession] = OrderedDict()
_checkout = InMemoryCheckout()


def _evict(config: SessionConfig, now: float) -> None:
    for session_id, session in list(_sessions.items()):
        if now - session.last_seen >= config.idle_ttl_seconds:
            logger.debug("Ending idle discovery session %s", session_id)
            end_session(session_id)
    while len(_sessions) >= config.max_sessions:
        oldest = next(iter(_sessions))
        logger.debug("Ending least recently used discovery session %s", oldest)
        end_session(oldest)


def create_session(config: SessionConfig = DEFAULT_SESSION_CONFIG) -> DiscoverySession:
    now = time.time()
    _evict(config, now)
    session_id = uuid.uuid4().hex
    session = DiscoverySession(
        id=session_id,
        synchronizer=ViewportSynchronizer(get_store(), get_geocode_cache()),
        last_seen=now,
    )
    _sessions[session_id] = session
    logger.debug("Created discovery session %s", session_id)
    return session


def get_session(
    session_id: str | None,
    config: SessionConfig = DEFAULT_SESSION_CONFIG,
) -> DiscoverySession | None:
    """Return a live session and mark it as used, ending it if it sat idle too long."""
    if not session_id:
        return None
    session = _sessions.get(session_id)
    if session is None:
        return None
    now = time.time()
    if now - session.last_seen >= config.idle_ttl_seconds:
        end_session(session_id)
        return None
    session.last_seen = now
    _sessions.move_to_end(session_id)
    return session


def end_session(session_id: str) -> None:
    session = _sessions.pop(session_id, None)
    if session is not None:
        session.synchronizer.unmount_map()


def session_count() -> int:
    return len(_sessions)


def get_checkout() -> InMemoryCheckout:
    return _checkout


def clear_sessions() -> None:
    for session_id in list(_sessions):
        end_session(session_id)
