"""Decode raw token accounts into per-owner balances."""

from __future__ import annotations

import struct
from collections import defaultdict
from typing import Dict, Iterable, Tuple

import base58

from ..errors import InternalError

OWNER_OFFSET = 32
AMOUNT_OFFSET = 64
_AMOUNT = struct.Struct("<Q")
_MIN_RECORD_SIZE = AMOUNT_OFFSET + _AMOUNT.size


def decode_account(data: bytes) -> Tuple[str, int]:
    """Return ``(owner, amount)`` for one token account record."""
    if len(data) < _MIN_RECORD_SIZE:
        raise InternalError(f"token account record too short: {len(data)} bytes")
    owner = base58.b58encode(bytes(data[OWNER_OFFSET:AMOUNT_OFFSET])).decode("ascii")
    (amount,) = _AMOUNT.unpack_from(data, AMOUNT_OFFSET)
    return owner, amount


def aggregate_balances(records: Iterable[bytes]) -> Dict[str, int]:
    """Sum the balances of every owner, leaving out empty accounts.

    A wallet holding several accounts of the same mint ends up with a single
    entry; amounts are unsigned so a holder only disappears when all of its
    accounts are empty.
    """
    balances: Dict[str, int] = defaultdict(int)
    for data in records:
        owner, amount = decode_account(data)
        if amount == 0:
            continue
        balances[owner] += amount
    return dict(balances)
