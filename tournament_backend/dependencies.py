"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
import threading

from fastapi import Depends

from tournament_backend.config import get_settings
from tournament_backend.service import TournamentService
from tournament_backend.store import (
    InMemoryTournamentStore,
    RedisTournamentStore,
    SqlTournamentStore,
    TournamentStore,
)

logger = logging.getLogger(__name__)

_tournament_store: TournamentStore | None = None
# Sync dependencies run in the threadpool; first requests may race to build the store.
_store_lock = threading.Lock()


def _build_tournament_store() -> TournamentStore:
    settings = get_settings()
    if settings.use_in_memory_backends or not (
        settings.redis_url or settings.database_url
    ):
        return InMemoryTournamentStore()
    if settings.redis_url:
        return RedisTournamentStore(
            url=settings.redis_url,
            key_prefix=settings.tournament_key_prefix,
            timeout_seconds=settings.store_timeout_seconds,
        )
    return SqlTournamentStore(settings.database_url)


def get_tournament_store() -> TournamentStore:
    """
    Return a singleton store so the connection pool is shared across requests.
    """
    global _tournament_store
    if _tournament_store is not None:
        return _tournament_store

    with _store_lock:
        if _tournament_store is None:
            _tournament_store = _build_tournament_store()
            logger.info("Tournament store: %s", _tournament_store.__class__.__name__)
        return _tournament_store


def close_tournament_store() -> None:
    """Release the store's connections; the next request creates a fresh one."""
    global _tournament_store
    with _store_lock:
        if _tournament_store is None:
            return
        _tournament_store.close()
        _tournament_store = None


def get_tournament_service(
    store: TournamentStore = Depends(get_tournament_store),
) -> TournamentService:
    settings = get_settings()
    return TournamentService(
        store,
        ttl_seconds=settings.tournament_ttl_seconds,
        max_payload_bytes=settings.max_payload_bytes,
    )
