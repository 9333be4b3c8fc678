"""Caching primitives for RENTFREE."""

from .snapshot_cache import CacheLookup, Snapshot, SnapshotCache

__all__ = ["CacheLookup", "Snapshot", "SnapshotCache"]
