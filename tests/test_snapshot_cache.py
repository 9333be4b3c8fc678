"""Tests for the single-slot snapshot cache and its miss coalescing."""

from __future__ import annotations

import threading
import time

import pytest

from conftest import MINT, OTHER_MINT, FakeAccountSource, FakeClock, token_record, wallet_bytes
from rentfree.caching.snapshot_cache import SnapshotCache
from rentfree.errors import RateLimited
from rentfree.services.directory import DirectoryService


def _counting_loader(results=None):
    calls = []

    def loader(mint_id):
        calls.append(mint_id)
        return (results or {}).get(mint_id, ())

    return loader, calls


class TestSnapshotCache:
    def test_cold_start_is_a_miss_then_hit(self, clock: FakeClock):
        loader, calls = _counting_loader()
        cache = SnapshotCache(loader, ttl=30.0, clock=clock)

        first = cache.get_snapshot(MINT)
        clock.advance(29.9)
        second = cache.get_snapshot(MINT)

        assert first.cached is False
        assert second.cached is True
        assert second.snapshot is first.snapshot
        assert calls == [MINT]

    def test_expiry_forces_recompute(self, clock: FakeClock):
        loader, calls = _counting_loader()
        cache = SnapshotCache(loader, ttl=30.0, clock=clock)

        cache.get_snapshot(MINT)
        clock.advance(30.0)
        again = cache.get_snapshot(MINT)

        assert again.cached is False
        assert again.snapshot.captured_at == clock.now
        assert calls == [MINT, MINT]

    def test_mint_change_evicts_previous_entry(self, clock: FakeClock):
        loader, calls = _counting_loader()
        cache = SnapshotCache(loader, ttl=30.0, clock=clock)

        cache.get_snapshot(MINT)
        other = cache.get_snapshot(OTHER_MINT)
        back = cache.get_snapshot(MINT)

        assert other.cached is False and other.snapshot.mint_id == OTHER_MINT
        assert back.cached is False
        assert calls == [MINT, OTHER_MINT, MINT]
        assert cache.peek().mint_id == MINT

    def test_zero_ttl_never_hits(self, clock: FakeClock):
        loader, calls = _counting_loader()
        cache = SnapshotCache(loader, ttl=0, clock=clock)
        cache.get_snapshot(MINT)
        assert cache.get_snapshot(MINT).cached is False
        assert len(calls) == 2

    def test_failure_leaves_slot_untouched(self, clock: FakeClock):
        state = {"fail": False}

        def loader(mint_id):
            if state["fail"]:
                raise RateLimited()
            return ()

        cache = SnapshotCache(loader, ttl=30.0, clock=clock)
        good = cache.get_snapshot(MINT).snapshot
        clock.advance(31)
        state["fail"] = True
        with pytest.raises(RateLimited):
            cache.get_snapshot(MINT)
        assert cache.peek() is good
        assert cache.stats()["inflight"] == []

    def test_concurrent_misses_share_one_load(self):
        release = threading.Event()
        started = threading.Event()
        calls = []

        def loader(mint_id):
            calls.append(mint_id)
            started.set()
            release.wait(timeout=5)
            return ()

        cache = SnapshotCache(loader, ttl=30.0)
        results = []

        def worker():
            results.append(cache.get_snapshot(MINT))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        threads[0].start()
        assert started.wait(timeout=5)
        for t in threads[1:]:
            t.start()
        release.set()
        for t in threads:
            t.join(timeout=5)

        assert calls == [MINT]
        assert len(results) == 8
        assert len({id(r.snapshot) for r in results}) == 1

    def test_concurrent_waiters_receive_same_failure(self):
        release = threading.Event()
        started = threading.Event()
        calls = []

        def loader(mint_id):
            calls.append(mint_id)
            started.set()
            release.wait(timeout=5)
            raise RateLimited(retry_after=7)

        cache = SnapshotCache(loader, ttl=30.0)
        errors = []

        def worker():
            try:
                cache.get_snapshot(MINT)
            except RateLimited as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        threads[0].start()
        assert started.wait(timeout=5)
        for t in threads[1:]:
            t.start()
        time.sleep(0.2)
        assert cache.stats()["inflight"] == [MINT]
        release.set()
        for t in threads:
            t.join(timeout=5)

        assert calls == [MINT]
        assert len(errors) == 4
        assert len({id(e) for e in errors}) == 1
        assert errors[0].retry_after == 7
        assert cache.peek() is None


class TestDirectoryCaching:
    def test_concurrent_directory_misses_fetch_once(self, registry):
        source = FakeAccountSource([token_record(wallet_bytes(1), 10)])
        source.gate = threading.Event()
        service = DirectoryService(source, registry, default_mint=MINT)

        lookups = []
        threads = [threading.Thread(target=lambda: lookups.append(service.get_directory())) for _ in range(6)]
        threads[0].start()
        assert source.started.wait(timeout=5)
        for t in threads[1:]:
            t.start()
        source.gate.set()
        for t in threads:
            t.join(timeout=5)

        assert source.calls == [MINT]
        assert len(lookups) == 6
        assert len({r.snapshot.assignments for r in lookups}) == 1
