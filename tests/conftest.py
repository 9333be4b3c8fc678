"""Shared pytest fixtures for RENTFREE tests.

Provides token-account record builders, a scripted account source standing in
for the Solana RPC endpoint, an in-memory name registry, signing keys and a
Flask test client so that test modules can focus on behaviour.
"""

from __future__ import annotations

import struct
import threading
import time
from pathlib import Path
from typing import Iterable, List, Optional

import base58
import pytest
from nacl.signing import SigningKey

from rentfree.app import create_app
from rentfree.bootstrap import build_context
from rentfree.config import AppConfig
from rentfree.registry.database import Database
from rentfree.registry.repository import SqlNameRegistry
from rentfree.services.signatures import NAME_UPDATE_PREFIX

MINT_BYTES = bytes([7]) * 32
MINT = base58.b58encode(MINT_BYTES).decode("ascii")
OTHER_MINT = base58.b58encode(bytes([9]) * 32).decode("ascii")


def wallet_bytes(seed: int) -> bytes:
    return bytes([seed]) * 32


def wallet(seed: int) -> str:
    return base58.b58encode(wallet_bytes(seed)).decode("ascii")


def token_record(owner: bytes, amount: int, mint: bytes = MINT_BYTES) -> bytes:
    """Build a 165-byte SPL token account with the given owner and amount."""
    body = mint + owner + struct.pack("<Q", amount)
    return body + bytes(165 - len(body))


def sign(key: SigningKey, message: str) -> List[int]:
    return list(key.sign(message.encode("utf-8")).signature)


def address_of(key: SigningKey) -> str:
    return base58.b58encode(bytes(key.verify_key)).decode("ascii")


class FakeClock:
    """Manually advanced time source (seconds)."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAccountSource:
    """Deterministic replacement for ``RpcAccountSource``.

    ``gate`` can hold every fetch until the test releases it, which is how
    concurrent cache misses are lined up.
    """

    def __init__(self, records: Optional[Iterable[bytes]] = None) -> None:
        self.records: List[bytes] = list(records or [])
        self.error: Optional[BaseException] = None
        self.calls: List[str] = []
        self.started = threading.Event()
        self.gate: Optional[threading.Event] = None
        self._lock = threading.Lock()

    def fetch(self, mint_id: str) -> List[bytes]:
        with self._lock:
            self.calls.append(mint_id)
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def source() -> FakeAccountSource:
    return FakeAccountSource(
        [
            token_record(wallet_bytes(1), 500),
            token_record(wallet_bytes(2), 0),
            token_record(wallet_bytes(1), 300),
            token_record(wallet_bytes(3), 1_000),
        ]
    )


@pytest.fixture()
def database() -> Database:
    db = Database("sqlite:///:memory:")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture()
def registry(database: Database) -> SqlNameRegistry:
    return SqlNameRegistry(database)


@pytest.fixture()
def signing_key() -> SigningKey:
    return SigningKey.generate()


@pytest.fixture()
def name_message() -> str:
    return f"{NAME_UPDATE_PREFIX}set-name:{int(time.time())}"


@pytest.fixture()
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        base_dir=tmp_path,
        token_mint=MINT,
        database_url="sqlite:///:memory:",
        log_dir=tmp_path / "logs",
        max_rooms=80,
        landlord_top_n=10,
        cache_ttl_ms=30_000,
    )


@pytest.fixture()
def context(config: AppConfig, source: FakeAccountSource, registry: SqlNameRegistry):
    return build_context(config, source=source, registry=registry)


@pytest.fixture()
def app(context):
    flask_app = create_app(context=context)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture()
def client(app):
    """Flask test client for issuing HTTP requests."""
    return app.test_client()
