"""Repository layer for wallet display names."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import InternalError
from . import models
from .database import Database

logger = logging.getLogger("rentfree.registry")


@dataclass(frozen=True, slots=True)
class DisplayNameRecord:
    wallet: str
    name: str
    updated_at: int


class NameRegistry(Protocol):
    def upsert(self, wallet: str, name: str, updated_at: int) -> DisplayNameRecord:
        ...

    def lookup(self, wallet: str) -> Optional[str]:
        ...

    def lookup_many(self, wallets: Iterable[str]) -> Dict[str, str]:
        ...


class SqlNameRegistry:
    """``display_names`` table accessed through SQLAlchemy.

    Writes are last-write-wins: an upsert always replaces both the name and
    the timestamp of an existing row.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    def _upsert_statement(self, wallet: str, name: str, updated_at: int):
        dialect = self.database.dialect
        if dialect == "sqlite":
            insert = sqlite.insert
        elif dialect == "postgresql":
            insert = postgresql.insert
        else:
            return None
        stmt = insert(models.DisplayName).values(wallet=wallet, name=name, updated_at=updated_at)
        return stmt.on_conflict_do_update(
            index_elements=[models.DisplayName.wallet],
            set_={"name": stmt.excluded.name, "updated_at": stmt.excluded.updated_at},
        )

    @staticmethod
    def _select_update(session: Session, wallet: str, name: str, updated_at: int) -> None:
        row = session.get(models.DisplayName, wallet)
        if row:
            row.name = name
            row.updated_at = updated_at
        else:
            session.add(models.DisplayName(wallet=wallet, name=name, updated_at=updated_at))

    def upsert(self, wallet: str, name: str, updated_at: int) -> DisplayNameRecord:
        try:
            with self.database.session() as session:
                stmt = self._upsert_statement(wallet, name, updated_at)
                if stmt is None:
                    self._select_update(session, wallet, name, updated_at)
                else:
                    session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception("Failed to upsert display name for %s", wallet)
            raise InternalError("display name store unavailable") from exc
        logger.info("Display name for %s set to %r", wallet, name)
        return DisplayNameRecord(wallet=wallet, name=name, updated_at=updated_at)

    def get(self, wallet: str) -> Optional[DisplayNameRecord]:
        try:
            with self.database.session() as session:
                row = session.get(models.DisplayName, wallet)
                if row is None:
                    return None
                return DisplayNameRecord(wallet=row.wallet, name=row.name, updated_at=row.updated_at)
        except SQLAlchemyError as exc:
            logger.exception("Failed to read display name for %s", wallet)
            raise InternalError("display name store unavailable") from exc

    def lookup(self, wallet: str) -> Optional[str]:
        record = self.get(wallet)
        return record.name if record else None

    def lookup_many(self, wallets: Iterable[str]) -> Dict[str, str]:
        keys = list(dict.fromkeys(wallets))
        if not keys:
            return {}
        stmt = select(models.DisplayName.wallet, models.DisplayName.name).where(
            models.DisplayName.wallet.in_(keys)
        )
        try:
            with self.database.session() as session:
                return {wallet: name for wallet, name in session.execute(stmt)}
        except SQLAlchemyError as exc:
            logger.exception("Failed to read display names for %s wallets", len(keys))
            raise InternalError("display name store unavailable") from exc
