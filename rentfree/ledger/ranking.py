"""Ranking of holders into landlord/tenant rooms."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional


class Role(str, enum.Enum):
    LANDLORD = "Landlord"
    TENANT = "Tenant"


@dataclass(frozen=True, slots=True)
class HolderBalance:
    wallet: str
    balance: int


@dataclass(frozen=True, slots=True)
class RoomAssignment:
    wallet: str
    room_number: int
    role: Role
    balance: int
    display_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        # balances can exceed 2**53, keep them as decimal strings on the wire
        return {
            "wallet": self.wallet,
            "roomNumber": self.room_number,
            "role": self.role.value,
            "balance": str(self.balance),
            "displayName": self.display_name,
        }


def room_hash(wallet: str) -> int:
    value = 0
    for char in wallet:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    return value


def room_number(wallet: str, max_rooms: int) -> int:
    """Map a wallet to a room in ``[1, max_rooms]``; depends on the address only."""
    if max_rooms <= 0:
        raise ValueError("max_rooms must be positive")
    return room_hash(wallet) % max_rooms + 1


def sort_holders(balances: Mapping[str, int]) -> List[HolderBalance]:
    """Order holders by balance descending, then wallet ascending."""
    holders = [HolderBalance(wallet, int(amount)) for wallet, amount in balances.items() if amount > 0]
    holders.sort(key=lambda h: (-h.balance, h.wallet))
    return holders


def rank_holders(
    balances: Mapping[str, int],
    max_rooms: int,
    landlord_top_n: int,
    *,
    names: Optional[Mapping[str, str]] = None,
) -> List[RoomAssignment]:
    """Build the ordered room directory from aggregated balances.

    Only the first ``max_rooms`` holders are kept. The first
    ``landlord_top_n`` of those are landlords, the rest tenants.
    ``names`` maps wallets to display names; wallets without one get ``None``.
    """
    if max_rooms <= 0:
        raise ValueError("max_rooms must be positive")
    if landlord_top_n < 0:
        raise ValueError("landlord_top_n must not be negative")
    names = names or {}

    assignments: List[RoomAssignment] = []
    for index, holder in enumerate(sort_holders(balances)[:max_rooms]):
        assignments.append(
            RoomAssignment(
                wallet=holder.wallet,
                room_number=room_number(holder.wallet, max_rooms),
                role=Role.LANDLORD if index < landlord_top_n else Role.TENANT,
                balance=holder.balance,
                display_name=names.get(holder.wallet),
            )
        )
    return assignments
