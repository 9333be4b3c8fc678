"""Application configuration helpers.

Settings come from the environment (optionally seeded from a ``.env`` file)
and are loaded into a frozen ``AppConfig`` that the bootstrap code injects
everywhere else. ``TOKEN_MINT`` has no default: the process refuses to start
without it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


def _getenv_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _getenv_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _getenv_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _getenv_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    items = tuple(part.strip() for part in raw.split(",") if part.strip())
    return items or default


def _load_dotenv(base_dir: Path) -> None:
    env_path = base_dir / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)


@dataclass(frozen=True)
class AppConfig:
    """Strongly typed application configuration container."""

    base_dir: Path
    token_mint: str
    rpc_url: str = DEFAULT_RPC_URL
    token_program_id: str = TOKEN_PROGRAM_ID
    rpc_commitment: str = "confirmed"
    rpc_timeout: float = 60.0
    rpc_connect_timeout: float = 10.0
    host: str = "0.0.0.0"
    port: int = 4000
    max_rooms: int = 80
    landlord_top_n: int = 10
    cache_ttl_ms: int = 30_000
    database_url: str = ""
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    cors_origins: Tuple[str, ...] = ("*",)
    log_file_path: Path = field(init=False)

    def __post_init__(self) -> None:
        if not self.token_mint:
            raise ConfigError("TOKEN_MINT environment variable is required")
        if self.max_rooms <= 0:
            raise ConfigError("MAX_ROOMS must be positive")
        if self.landlord_top_n < 0:
            raise ConfigError("LANDLORD_TOP_N must not be negative")
        if self.cache_ttl_ms < 0:
            raise ConfigError("CACHE_TTL_MS must not be negative")
        if not self.database_url:
            object.__setattr__(self, "database_url", f"sqlite:///{self.base_dir / 'rentfree.db'}")
        logs_dir = self.log_dir or self.base_dir / "logs"
        object.__setattr__(self, "log_dir", logs_dir)
        object.__setattr__(self, "log_file_path", logs_dir / "rentfree.log")

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_ms / 1000.0

    @classmethod
    def load(cls, base_dir: Optional[Path] = None) -> "AppConfig":
        base_dir = base_dir or Path(os.getenv("RENTFREE_HOME", Path.cwd()))
        _load_dotenv(base_dir)

        log_dir_raw = os.getenv("LOG_DIR")
        return cls(
            base_dir=base_dir,
            token_mint=_getenv_str("TOKEN_MINT", ""),
            rpc_url=_getenv_str("SOLANA_RPC_URL", DEFAULT_RPC_URL),
            token_program_id=_getenv_str("TOKEN_PROGRAM_ID", TOKEN_PROGRAM_ID),
            rpc_commitment=_getenv_str("RPC_COMMITMENT", "confirmed"),
            rpc_timeout=_getenv_float("RPC_TIMEOUT", 60.0),
            rpc_connect_timeout=_getenv_float("RPC_CONNECT_TIMEOUT", 10.0),
            host=_getenv_str("HOST", "0.0.0.0"),
            port=_getenv_int("PORT", 4000),
            max_rooms=_getenv_int("MAX_ROOMS", 80),
            landlord_top_n=_getenv_int("LANDLORD_TOP_N", 10),
            cache_ttl_ms=_getenv_int("CACHE_TTL_MS", 30_000),
            database_url=_getenv_str("DATABASE_URL", ""),
            log_level=_getenv_str("LOG_LEVEL", "INFO"),
            log_dir=Path(log_dir_raw) if log_dir_raw else None,
            cors_origins=_getenv_list("CORS_ORIGINS", ("*",)),
        )

    def to_flask_config(self) -> Dict[str, Any]:
        return {
            "RENTFREE_TOKEN_MINT": self.token_mint,
            "RENTFREE_RPC_URL": self.rpc_url,
            "RENTFREE_MAX_ROOMS": self.max_rooms,
            "RENTFREE_LANDLORD_TOP_N": self.landlord_top_n,
            "RENTFREE_CACHE_TTL_MS": self.cache_ttl_ms,
            "RENTFREE_CORS_ORIGINS": list(self.cors_origins),
        }


def load_app_config(base_dir: Optional[Path] = None) -> AppConfig:
    """Load configuration from the environment, raising ``ConfigError`` on problems."""
    return AppConfig.load(base_dir)
