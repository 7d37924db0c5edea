"""
SQLAlchemy models for the RAG Pricing Calculator.
Persist calculator settings between sessions and scraped market prices.
"""

# pylint: disable=unsubscriptable-object,too-few-public-methods

from typing import Any
from datetime import datetime
from sqlalchemy import String, Integer, JSON, Text, DateTime, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from ragcalc.db.connection import Base


class SavedSetting(Base):
    """A saved calculator setting, keyed like the frontend's storage keys."""

    __tablename__ = "saved_settings"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[Any] = mapped_column(JSON)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class PriceSnapshot(Base):
    """One scraped or analyzed pricing record."""

    __tablename__ = "price_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    model_info: Mapped[str] = mapped_column(String)
    pricing: Mapped[str] = mapped_column(Text)
    source: Mapped[str] = mapped_column(String)
    # ISO timestamp reported by the scraper
    timestamp: Mapped[str] = mapped_column(String)
    analyzed: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
