"""Wallet display-name registry."""

from .database import Base, Database
from .repository import DisplayNameRecord, NameRegistry, SqlNameRegistry

__all__ = ["Base", "Database", "DisplayNameRecord", "NameRegistry", "SqlNameRegistry"]
