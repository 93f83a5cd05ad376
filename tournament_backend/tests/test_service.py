import json
import threading
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from tournament_backend.errors import (
    Internal,
    InvalidArgument,
    NotFound,
    Unauthenticated,
    Unauthorized,
)
from tournament_backend.samples import build_sample_tournament
from tournament_backend.service import (
    TournamentService,
    format_timestamp,
    is_valid_tournament_structure,
)
from tournament_backend.store import InMemoryTournamentStore, TournamentRecord
from tournament_backend.tokens import hash_token

TOURNAMENT_ID = "550e8400-e29b-41d4-a716-446655440000"


class FakeClock:
    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current


class TournamentServiceTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryTournamentStore()
        self.clock = FakeClock(datetime(2026, 10, 19, 12, 0, 0, 123456, tzinfo=timezone.utc))
        self.service = TournamentService(self.store, now=self.clock)
        self.tournament = build_sample_tournament(4, seed=7)

    def test_save_creates_record_with_hashed_token(self):
        updated_at = self.service.save(TOURNAMENT_ID, "t", self.tournament)
        self.assertEqual(updated_at, "2026-10-19T12:00:00.123Z")
        record = self.store.get(TOURNAMENT_ID)
        self.assertEqual(record.admin_token_hash, hash_token("t"))
        self.assertEqual(record.tournament, self.tournament)

    def test_load_returns_public_view(self):
        self.service.save(TOURNAMENT_ID, "t", self.tournament)
        result = self.service.load(TOURNAMENT_ID)
        self.assertEqual(set(result), {"tournament", "updatedAt"})

    def test_load_does_not_change_updated_at(self):
        self.service.save(TOURNAMENT_ID, "t", self.tournament)
        before = self.store.get(TOURNAMENT_ID).updated_at
        self.clock.current += timedelta(hours=1)
        self.service.load(TOURNAMENT_ID)
        self.assertEqual(self.store.get(TOURNAMENT_ID).updated_at, before)

    def test_updated_at_never_goes_backwards(self):
        first = self.service.save(TOURNAMENT_ID, "t", self.tournament)
        self.clock.current -= timedelta(minutes=5)
        second = self.service.save(TOURNAMENT_ID, "t", self.tournament)
        self.assertEqual(second, first)
        self.clock.current += timedelta(minutes=10)
        third = self.service.save(TOURNAMENT_ID, "t", self.tournament)
        self.assertGreater(third, first)

    def test_invalid_ids(self):
        for bad in [None, "", "123", "550e8400-e29b-41d4-a716-4466554400000"]:
            with self.assertRaises(InvalidArgument):
                self.service.load(bad)
            with self.assertRaises(InvalidArgument):
                self.service.delete(bad, "t")
            with self.assertRaises(InvalidArgument):
                self.service.exists(bad)

    def test_uppercase_uuid_is_accepted(self):
        upper = TOURNAMENT_ID.upper()
        self.service.save(upper, "t", self.tournament)
        self.assertTrue(self.service.exists(upper))

    def test_delete_requires_token(self):
        self.service.save(TOURNAMENT_ID, "t", self.tournament)
        for missing in [None, ""]:
            with self.assertRaises(Unauthenticated):
                self.service.delete(TOURNAMENT_ID, missing)
        self.assertTrue(self.store.exists(TOURNAMENT_ID))

    def test_delete_wrong_token(self):
        self.service.save(TOURNAMENT_ID, "t", self.tournament)
        with self.assertRaises(Unauthorized):
            self.service.delete(TOURNAMENT_ID, "wrong")
        self.assertTrue(self.store.exists(TOURNAMENT_ID))

    def test_delete_then_not_found(self):
        self.service.save(TOURNAMENT_ID, "t", self.tournament)
        self.service.delete(TOURNAMENT_ID, "t")
        with self.assertRaises(NotFound):
            self.service.load(TOURNAMENT_ID)
        with self.assertRaises(NotFound):
            self.service.delete(TOURNAMENT_ID, "t")

    def test_delete_lost_race_reports_not_found(self):
        store = MagicMock()
        store.get.return_value = TournamentRecord({}, hash_token("t"), "2026-01-01T00:00:00.000Z")
        store.delete.return_value = False
        store.exists.return_value = False
        with self.assertRaises(NotFound):
            TournamentService(store).delete(TOURNAMENT_ID, "t")

    def test_delete_refused_by_store_is_internal(self):
        store = MagicMock()
        store.get.return_value = TournamentRecord({}, hash_token("t"), "2026-01-01T00:00:00.000Z")
        store.delete.return_value = False
        store.exists.return_value = True
        with self.assertRaises(Internal):
            TournamentService(store).delete(TOURNAMENT_ID, "t")

    def test_concurrent_deletes_succeed_once(self):
        self.service.save(TOURNAMENT_ID, "t", self.tournament)
        outcomes = []
        lock = threading.Lock()
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            try:
                self.service.delete(TOURNAMENT_ID, "t")
                result = "ok"
            except NotFound:
                result = "not_found"
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(outcomes.count("ok"), 1)
        self.assertEqual(outcomes.count("not_found"), 7)

    def test_save_rejects_other_token(self):
        self.service.save(TOURNAMENT_ID, "t", self.tournament)
        with self.assertRaises(Unauthorized):
            self.service.save(TOURNAMENT_ID, "other", self.tournament)

    def test_save_validates_payload(self):
        with self.assertRaises(InvalidArgument):
            self.service.save(TOURNAMENT_ID, "t", None)
        with self.assertRaises(InvalidArgument):
            self.service.save(TOURNAMENT_ID, "t", {"nome": "x", "categorias": []})
        small = TournamentService(self.store, max_payload_bytes=50)
        with self.assertRaises(InvalidArgument):
            small.save(TOURNAMENT_ID, "t", self.tournament)
        self.assertFalse(self.store.exists(TOURNAMENT_ID))

    def test_payload_size_counts_utf8_bytes(self):
        tournament = build_sample_tournament(4, name="ç" * 400, seed=7)
        size = len(
            json.dumps(tournament, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        )

        exact = TournamentService(self.store, max_payload_bytes=size, now=self.clock)
        exact.save(TOURNAMENT_ID, "t", tournament)
        self.assertEqual(self.store.get(TOURNAMENT_ID).tournament["nome"], "ç" * 400)

        tight = TournamentService(self.store, max_payload_bytes=size - 1, now=self.clock)
        with self.assertRaises(InvalidArgument):
            tight.save(TOURNAMENT_ID, "t", tournament)

    def test_save_uses_configured_ttl(self):
        store = MagicMock()
        store.get.return_value = None
        TournamentService(store, ttl_seconds=60, now=self.clock).save(
            TOURNAMENT_ID, "t", self.tournament
        )
        _, record, ttl = store.save.call_args.args
        self.assertEqual(ttl, 60)
        self.assertEqual(record.updated_at, "2026-10-19T12:00:00.123Z")


class HelperTests(unittest.TestCase):
    def test_format_timestamp_converts_to_utc(self):
        moment = datetime(2026, 1, 2, 3, 4, 5, 6000, tzinfo=timezone(timedelta(hours=-3)))
        self.assertEqual(format_timestamp(moment), "2026-01-02T06:04:05.006Z")

    def test_structure_check(self):
        self.assertTrue(
            is_valid_tournament_structure(
                {"nome": "x", "categorias": [], "gameConfig": {}, "grupos": [], "waitingList": []}
            )
        )
        self.assertFalse(is_valid_tournament_structure([]))
        self.assertFalse(
            is_valid_tournament_structure(
                {"nome": "x", "categorias": [], "gameConfig": [], "grupos": [], "waitingList": []}
            )
        )


if __name__ == "__main__":
    unittest.main()
