"""On-chain holder data: fetching, aggregation and ranking."""

from .accounts import TOKEN_ACCOUNT_SIZE, AccountSource, RpcAccountSource
from .balances import aggregate_balances, decode_account
from .ranking import HolderBalance, Role, RoomAssignment, rank_holders, room_number

__all__ = [
    "TOKEN_ACCOUNT_SIZE",
    "AccountSource",
    "RpcAccountSource",
    "aggregate_balances",
    "decode_account",
    "HolderBalance",
    "Role",
    "RoomAssignment",
    "rank_holders",
    "room_number",
]
