"""
Async SQLite engine and session factory for the calculator's persistence.
Holds the saved_settings key/value table and the price_snapshots history
written by the price tracker.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from ragcalc.config import DATABASE_URL


# pylint: disable=too-few-public-methods
class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


engine = create_async_engine(DATABASE_URL, echo=False)

AsyncSessionLocal = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False
)
