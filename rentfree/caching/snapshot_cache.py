"""Single-slot TTL cache for the holder directory snapshot.

Only one mint's snapshot is kept at a time. Concurrent misses for the same
mint share one loader call: the first caller registers a future, runs the
loader without holding the lock and publishes the result; later callers wait
on that future and receive the same snapshot or the same exception.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from ..ledger.ranking import RoomAssignment

logger = logging.getLogger("rentfree.cache")


@dataclass(frozen=True, slots=True)
class Snapshot:
    mint_id: str
    assignments: Tuple[RoomAssignment, ...]
    captured_at: float


@dataclass(frozen=True, slots=True)
class CacheLookup:
    snapshot: Snapshot
    cached: bool


Loader = Callable[[str], Sequence["RoomAssignment"]]


class SnapshotCache:
    """Memoizes ``loader(mint_id)`` for ``ttl`` seconds.

    Parameters
    ----------
    loader:
        Callable running the full fetch/aggregate/rank pipeline for a mint.
    ttl:
        Maximum snapshot age in seconds. ``0`` means every request recomputes.
    clock:
        Time source returning seconds; ``time.time`` unless a test overrides it.
    """

    def __init__(self, loader: Loader, ttl: float = 30.0, *, clock: Callable[[], float] = time.time) -> None:
        self._loader = loader
        self.ttl = max(0.0, float(ttl))
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Optional[Snapshot] = None
        self._inflight: Dict[str, Future] = {}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _fresh(self, mint_id: str, now: float) -> Optional[Snapshot]:
        """Return the slot if it is a hit for ``mint_id`` (caller must hold lock)."""
        snap = self._snapshot
        if snap is None or snap.mint_id != mint_id:
            return None
        if now - snap.captured_at >= self.ttl:
            return None
        return snap

    def _load(self, mint_id: str, future: Future) -> Snapshot:
        try:
            assignments = tuple(self._loader(mint_id))
            snapshot = Snapshot(mint_id=mint_id, assignments=assignments, captured_at=self._clock())
        except BaseException as exc:
            with self._lock:
                self._inflight.pop(mint_id, None)
            future.set_exception(exc)
            raise
        with self._lock:
            self._snapshot = snapshot
            self._inflight.pop(mint_id, None)
        future.set_result(snapshot)
        logger.info("Snapshot for %s refreshed with %s entries", mint_id, len(assignments))
        return snapshot

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_snapshot(self, mint_id: str) -> CacheLookup:
        """Return the current snapshot for ``mint_id``, recomputing on a miss."""
        with self._lock:
            hit = self._fresh(mint_id, self._clock())
            if hit is not None:
                return CacheLookup(hit, cached=True)
            pending = self._inflight.get(mint_id)
            if pending is None:
                future: Future = Future()
                self._inflight[mint_id] = future
                leader = True
            else:
                future = pending
                leader = False

        if leader:
            logger.debug("Cache miss for %s, loading", mint_id)
            return CacheLookup(self._load(mint_id, future), cached=False)
        logger.debug("Cache miss for %s joined in-flight load", mint_id)
        return CacheLookup(future.result(), cached=False)

    def peek(self) -> Optional[Snapshot]:
        """Return the slot content regardless of age."""
        with self._lock:
            return self._snapshot

    def stats(self) -> dict:
        with self._lock:
            snap = self._snapshot
            return {
                "mint": snap.mint_id if snap else None,
                "entries": len(snap.assignments) if snap else 0,
                "captured_at": snap.captured_at if snap else None,
                "ttl_seconds": self.ttl,
                "inflight": sorted(self._inflight),
            }
