from __future__ import annotations

from fastapi import Request

from .session import DiscoverySession, create_session, get_session

SESSION_KEY = "discovery_id"


async def require_discovery_session(request: Request) -> DiscoverySession:
    """Return this browser's discovery session, creating and loading it if needed."""
    session = get_session(request.session.get(SESSION_KEY))
    if session is None:
        session = create_session()
        request.session[SESSION_KEY] = session.id
    await session.ensure_loaded()
    return session
