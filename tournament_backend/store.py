"""
Key-value store abstraction for tournament records.

Supports an in-memory implementation for tests/local runs, a Redis-backed
implementation for production and a SQLAlchemy table for deployments that
only have a SQL database.
"""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol

import redis
from redis import exceptions as redis_exceptions
from sqlalchemy import JSON, Column, Float, String, create_engine, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from tournament_backend.errors import StoreError


@dataclass
class TournamentRecord:
    tournament: Any
    admin_token_hash: str
    updated_at: str

    def as_dict(self) -> dict:
        return {
            "tournament": self.tournament,
            "adminTokenHash": self.admin_token_hash,
            "updatedAt": self.updated_at,
        }

    def public_view(self) -> dict:
        """The record as readers see it: never includes the token hash."""
        return {"tournament": self.tournament, "updatedAt": self.updated_at}

    @classmethod
    def from_dict(cls, data: dict) -> "TournamentRecord":
        return cls(
            tournament=data.get("tournament"),
            admin_token_hash=data["adminTokenHash"],
            updated_at=data["updatedAt"],
        )


class TournamentStore(Protocol):
    """Operations the service needs from the key-value store."""

    def get(self, tournament_id: str) -> Optional[TournamentRecord]:
        ...

    def save(
        self, tournament_id: str, record: TournamentRecord, ttl_seconds: int
    ) -> None:
        ...

    def delete(self, tournament_id: str) -> bool:
        """True iff a record existed and was removed."""
        ...

    def exists(self, tournament_id: str) -> bool:
        ...

    def close(self) -> None:
        ...


@dataclass
class InMemoryTournamentStore:
    """Thread-safe dict store for testing/dev, with TTL expiry."""

    clock: Callable[[], float] = time.time
    records: Dict[str, tuple[dict, float]] = field(default_factory=dict)

    def __post_init__(self):
        self._lock = threading.Lock()

    def _live(self, tournament_id: str) -> Optional[dict]:
        entry = self.records.get(tournament_id)
        if entry is None:
            return None
        data, expires_at = entry
        if expires_at <= self.clock():
            del self.records[tournament_id]
            return None
        return data

    def get(self, tournament_id: str) -> Optional[TournamentRecord]:
        with self._lock:
            data = self._live(tournament_id)
        if data is None:
            return None
        # Copy so callers cannot mutate the stored record.
        return TournamentRecord.from_dict(json.loads(json.dumps(data)))

    def save(
        self, tournament_id: str, record: TournamentRecord, ttl_seconds: int
    ) -> None:
        data = json.loads(json.dumps(record.as_dict()))
        with self._lock:
            self.records[tournament_id] = (data, self.clock() + ttl_seconds)

    def delete(self, tournament_id: str) -> bool:
        with self._lock:
            if self._live(tournament_id) is None:
                return False
            del self.records[tournament_id]
            return True

    def exists(self, tournament_id: str) -> bool:
        with self._lock:
            return self._live(tournament_id) is not None

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        with self._lock:
            self.records.clear()

    def close(self) -> None:
        return None


@dataclass
class RedisTournamentStore:
    """Redis-backed store keeping each record as a JSON string with a TTL."""

    url: str
    key_prefix: str = "tournament:"
    timeout_seconds: float = 5.0
    client: Optional[redis.Redis] = None

    def __post_init__(self):
        if self.client is None:
            self.client = redis.Redis.from_url(
                self.url,
                socket_timeout=self.timeout_seconds,
                socket_connect_timeout=self.timeout_seconds,
            )

    def _key(self, tournament_id: str) -> str:
        return f"{self.key_prefix}{tournament_id}"

    def get(self, tournament_id: str) -> Optional[TournamentRecord]:
        try:
            raw = self.client.get(self._key(tournament_id))
        except redis_exceptions.RedisError as exc:
            raise StoreError(f"Redis GET failed: {exc}") from exc
        if raw is None:
            return None
        try:
            return TournamentRecord.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            raise StoreError(f"Corrupt record under {self._key(tournament_id)}") from exc

    def save(
        self, tournament_id: str, record: TournamentRecord, ttl_seconds: int
    ) -> None:
        value = json.dumps(record.as_dict())
        try:
            self.client.setex(self._key(tournament_id), ttl_seconds, value)
        except redis_exceptions.RedisError as exc:
            raise StoreError(f"Redis SETEX failed: {exc}") from exc

    def delete(self, tournament_id: str) -> bool:
        try:
            return self.client.delete(self._key(tournament_id)) == 1
        except redis_exceptions.RedisError as exc:
            raise StoreError(f"Redis DEL failed: {exc}") from exc

    def exists(self, tournament_id: str) -> bool:
        try:
            return self.client.exists(self._key(tournament_id)) == 1
        except redis_exceptions.RedisError as exc:
            raise StoreError(f"Redis EXISTS failed: {exc}") from exc

    def close(self) -> None:
        self.client.close()


class SqlTournamentStore:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str, clock: Callable[[], float] = time.time):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlTournamentStore")
        self.clock = clock
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _live_row(self, session: Session, tournament_id: str) -> Optional["TournamentRow"]:
        row = session.get(TournamentRow, tournament_id)
        if row is None or row.expires_at <= self.clock():
            return None
        return row

    def get(self, tournament_id: str) -> Optional[TournamentRecord]:
        try:
            with self.Session() as session:
                row = self._live_row(session, tournament_id)
                if not row:
                    return None
                return TournamentRecord(
                    tournament=row.tournament,
                    admin_token_hash=row.admin_token_hash,
                    updated_at=row.updated_at,
                )
        except SQLAlchemyError as exc:
            raise StoreError(f"SQL read failed: {exc}") from exc

    def save(
        self, tournament_id: str, record: TournamentRecord, ttl_seconds: int
    ) -> None:
        expires_at = self.clock() + ttl_seconds
        try:
            with self.Session() as session:
                row = session.get(TournamentRow, tournament_id)
                if row:
                    row.tournament = record.tournament
                    row.admin_token_hash = record.admin_token_hash
                    row.updated_at = record.updated_at
                    row.expires_at = expires_at
                else:
                    session.add(
                        TournamentRow(
                            tournament_id=tournament_id,
                            tournament=record.tournament,
                            admin_token_hash=record.admin_token_hash,
                            updated_at=record.updated_at,
                            expires_at=expires_at,
                        )
                    )
                session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"SQL write failed: {exc}") from exc

    def delete(self, tournament_id: str) -> bool:
        try:
            with self.Session() as session:
                result = session.execute(
                    delete(TournamentRow).where(
                        TournamentRow.tournament_id == tournament_id,
                        TournamentRow.expires_at > self.clock(),
                    )
                )
                session.commit()
                return result.rowcount == 1
        except SQLAlchemyError as exc:
            raise StoreError(f"SQL delete failed: {exc}") from exc

    def exists(self, tournament_id: str) -> bool:
        try:
            with self.Session() as session:
                return self._live_row(session, tournament_id) is not None
        except SQLAlchemyError as exc:
            raise StoreError(f"SQL read failed: {exc}") from exc

    def close(self) -> None:
        self.engine.dispose()


Base = declarative_base()


class TournamentRow(Base):
    __tablename__ = "tournaments"

    tournament_id = Column(String, primary_key=True)
    tournament = Column(JSON, nullable=False)
    admin_token_hash = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
    expires_at = Column(Float, nullable=False, index=True)
