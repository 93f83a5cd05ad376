"""
Record access service: validate, fetch, authorize and mutate tournament records.

Every operation round-trips to the store; nothing is cached between calls.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from tournament_backend.errors import (
    Internal,
    InvalidArgument,
    NotFound,
    StoreError,
    Unauthenticated,
    Unauthorized,
)
from tournament_backend.identifiers import is_valid_uuid
from tournament_backend.store import TournamentRecord, TournamentStore
from tournament_backend.tokens import hash_token, tokens_match

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 864000
DEFAULT_MAX_PAYLOAD_BYTES = 1024 * 1024


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def is_valid_tournament_structure(data: Any) -> bool:
    """Shallow check of the top-level tournament shape; nested data is not inspected."""
    if not isinstance(data, dict):
        return False
    return (
        isinstance(data.get("nome"), str)
        and isinstance(data.get("categorias"), list)
        and isinstance(data.get("gameConfig"), dict)
        and isinstance(data.get("grupos"), list)
        and isinstance(data.get("waitingList"), list)
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TournamentService:
    def __init__(
        self,
        store: TournamentStore,
        *,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.max_payload_bytes = max_payload_bytes
        self.now = now

    def _require_id(self, tournament_id: Optional[str]) -> str:
        if not tournament_id:
            raise InvalidArgument("Tournament ID is required.")
        if not is_valid_uuid(tournament_id):
            raise InvalidArgument()
        return tournament_id

    def _store_call(self, operation: str, fn: Callable, *args):
        try:
            return fn(*args)
        except StoreError as exc:
            logger.error("Store %s failed for %s: %s", operation, args[0], exc)
            raise Internal() from exc

    def _fetch(self, tournament_id: str) -> Optional[TournamentRecord]:
        return self._store_call("get", self.store.get, tournament_id)

    def load(self, tournament_id: Optional[str]) -> dict:
        """Return ``{tournament, updatedAt}`` for a stored record."""
        tournament_id = self._require_id(tournament_id)
        record = self._fetch(tournament_id)
        if record is None:
            raise NotFound()
        return record.public_view()

    def exists(self, tournament_id: Optional[str]) -> bool:
        tournament_id = self._require_id(tournament_id)
        return self._store_call("exists", self.store.exists, tournament_id)

    def delete(self, tournament_id: Optional[str], admin_token: Optional[str]) -> None:
        tournament_id = self._require_id(tournament_id)
        if not admin_token:
            raise Unauthenticated()

        record = self._fetch(tournament_id)
        if record is None:
            raise NotFound()
        if not tokens_match(record.admin_token_hash, admin_token):
            logger.warning("Rejected delete for tournament %s: token mismatch", tournament_id)
            raise Unauthorized()

        removed = self._store_call("delete", self.store.delete, tournament_id)
        if not removed:
            # A concurrent delete got there first.
            if not self._store_call("exists", self.store.exists, tournament_id):
                raise NotFound()
            logger.error("Store refused to delete tournament %s", tournament_id)
            raise Internal("Failed to delete tournament.")
        logger.info("Deleted tournament %s", tournament_id)

    def save(
        self,
        tournament_id: Optional[str],
        admin_token: Optional[str],
        data: Any,
    ) -> str:
        """
        Create or update a record and return its new ``updatedAt``.

        Updates require the token the record was created with.
        """
        tournament_id = self._require_id(tournament_id)
        if not admin_token:
            raise Unauthenticated()
        if data is None:
            raise InvalidArgument("Tournament data is required.")
        size = len(json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8"))
        if size > self.max_payload_bytes:
            raise InvalidArgument(
                f"Payload too large. Maximum is {self.max_payload_bytes} bytes."
            )
        if not is_valid_tournament_structure(data):
            raise InvalidArgument("Invalid tournament structure.")

        existing = self._fetch(tournament_id)
        if existing is not None and not tokens_match(
            existing.admin_token_hash, admin_token
        ):
            logger.warning("Rejected save for tournament %s: token mismatch", tournament_id)
            raise Unauthorized()

        updated_at = format_timestamp(self.now())
        if existing is not None:
            updated_at = self._not_before(updated_at, existing.updated_at)

        record = TournamentRecord(
            tournament=data,
            admin_token_hash=hash_token(admin_token),
            updated_at=updated_at,
        )
        self._store_call("save", self.store.save, tournament_id, record, self.ttl_seconds)
        logger.info(
            "Saved tournament %s (%s)",
            tournament_id,
            "updated" if existing is not None else "created",
        )
        return updated_at

    @staticmethod
    def _not_before(candidate: str, previous: str) -> str:
        try:
            if parse_timestamp(previous) > parse_timestamp(candidate):
                return previous
        except ValueError:
            logger.warning("Ignoring unparsable updatedAt %r", previous)
        return candidate
