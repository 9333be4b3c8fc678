"""Room directory: fetch, aggregate, rank and cache holder snapshots."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Callable, List, Optional

import base58

from ..caching.snapshot_cache import CacheLookup, SnapshotCache
from ..errors import ValidationError
from ..ledger.balances import aggregate_balances
from ..ledger.ranking import RoomAssignment, rank_holders
from ..registry.repository import NameRegistry

if TYPE_CHECKING:
    from ..ledger.accounts import AccountSource

logger = logging.getLogger("rentfree.directory")

MINT_KEY_SIZE = 32


def normalize_mint(mint_id: str) -> str:
    """Return ``mint_id`` if it is a base58 encoded 32-byte key."""
    candidate = (mint_id or "").strip()
    try:
        raw = base58.b58decode(candidate)
    except ValueError as exc:
        raise ValidationError("Invalid mint address") from exc
    if not candidate or len(raw) != MINT_KEY_SIZE:
        raise ValidationError("Invalid mint address")
    return base58.b58encode(raw).decode("ascii")


class DirectoryService:
    """Serves the ranked holder directory for a mint.

    The account source is only consulted on a cache miss; display names are
    looked up while the snapshot is built, so a renamed wallet shows its new
    name once the cached snapshot expires.
    """

    def __init__(
        self,
        source: AccountSource,
        registry: NameRegistry,
        *,
        default_mint: str,
        max_rooms: int = 80,
        landlord_top_n: int = 10,
        ttl_seconds: float = 30.0,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.source = source
        self.registry = registry
        self.default_mint = default_mint
        self.max_rooms = max_rooms
        self.landlord_top_n = landlord_top_n
        cache_kwargs = {"clock": clock} if clock is not None else {}
        self.cache = SnapshotCache(self.build_assignments, ttl_seconds, **cache_kwargs)

    def build_assignments(self, mint_id: str) -> List[RoomAssignment]:
        records = self.source.fetch(mint_id)
        balances = aggregate_balances(records)
        logger.info("Mint %s: %s accounts, %s holders", mint_id, len(records), len(balances))
        ranked = rank_holders(balances, self.max_rooms, self.landlord_top_n)
        names = self.registry.lookup_many(a.wallet for a in ranked)
        return [replace(a, display_name=names.get(a.wallet)) for a in ranked]

    def get_directory(self, mint_id: Optional[str] = None) -> CacheLookup:
        mint = normalize_mint(mint_id) if mint_id else self.default_mint
        return self.cache.get_snapshot(mint)
