"""Bootstrap context that assembles all runtime components."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .config import AppConfig
from .errors import ConfigError, ValidationError
from .ledger.accounts import AccountSource, RpcAccountSource
from .registry.database import Database
from .registry.repository import NameRegistry, SqlNameRegistry
from .services.directory import DirectoryService, normalize_mint
from .services.http import HttpSettings
from .services.names import NameUpdateService

logger = logging.getLogger("rentfree.bootstrap")


@dataclass
class RentfreeContext:
    config: AppConfig
    database: Optional[Database]
    registry: NameRegistry
    source: AccountSource
    directory: DirectoryService
    names: NameUpdateService

    def shutdown(self) -> None:
        if self.database is not None:
            self.database.dispose()


def build_context(
    config: AppConfig,
    *,
    source: Optional[AccountSource] = None,
    registry: Optional[NameRegistry] = None,
) -> RentfreeContext:
    """Wire the ledger source, registry and services for ``config``.

    ``source`` and ``registry`` replace the RPC client and the SQL store,
    which is how tests inject deterministic doubles.
    """
    try:
        mint = normalize_mint(config.token_mint)
    except ValidationError as exc:
        raise ConfigError(f"TOKEN_MINT is not a valid mint address: {config.token_mint!r}") from exc

    database: Optional[Database] = None
    if registry is None:
        database = Database(config.database_url)
        database.create_all()
        registry = SqlNameRegistry(database)

    if source is None:
        source = RpcAccountSource(
            config.rpc_url,
            program_id=config.token_program_id,
            commitment=config.rpc_commitment,
            settings=HttpSettings(timeout=config.rpc_timeout, connect_timeout=config.rpc_connect_timeout),
        )

    directory = DirectoryService(
        source,
        registry,
        default_mint=mint,
        max_rooms=config.max_rooms,
        landlord_top_n=config.landlord_top_n,
        ttl_seconds=config.cache_ttl_seconds,
    )
    names = NameUpdateService(registry)
    logger.info(
        "RENTFREE configured: mint=%s rpc=%s max_rooms=%s landlords=%s ttl=%sms",
        mint,
        config.rpc_url,
        config.max_rooms,
        config.landlord_top_n,
        config.cache_ttl_ms,
    )
    return RentfreeContext(
        config=config,
        database=database,
        registry=registry,
        source=source,
        directory=directory,
        names=names,
    )
