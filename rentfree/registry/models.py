"""ORM models for the name registry."""

from __future__ import annotations

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


class DisplayName(Base):
    __tablename__ = "display_names"

    wallet: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)  # epoch milliseconds
