"""
Repository pattern for separating data access from business logic.
Handles conversion between Domain Models (Pydantic) and Persistence Models (SQLAlchemy).
"""

from typing import Any, List, Optional
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ragcalc.db.models import PriceSnapshot, SavedSetting
from ragcalc.market.models import PriceData
from ragcalc.tokens.constants import (
    DEFAULT_CHAT_MODEL_ID,
    DEFAULT_EMBEDDING_MODEL_ID,
    DEFAULT_MODELS,
    STORAGE_KEYS,
)
from ragcalc.tokens.models import EstimatorSettings, ModelPrice, TokenMultipliers


class SettingsRepository:
    """Key/value store for calculator settings."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, key: str) -> Optional[Any]:
        """Returns the stored JSON value or None."""
        db_obj = await self.session.get(SavedSetting, key)
        return db_obj.value if db_obj else None

    async def set(self, key: str, value: Any):
        """Creates or replaces a setting."""
        db_obj = await self.session.get(SavedSetting, key)
        if db_obj:
            db_obj.value = value
        else:
            self.session.add(SavedSetting(key=key, value=value))
        await self.session.commit()

    async def delete(self, key: str) -> bool:
        """Removes a setting. Returns False when it did not exist."""
        result = await self.session.execute(
            delete(SavedSetting).where(SavedSetting.key == key)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def load_estimator_settings(self) -> EstimatorSettings:
        """Loads saved estimator choices, falling back to defaults per key."""
        models = await self.get(STORAGE_KEYS["models"])
        chat_id = await self.get(STORAGE_KEYS["selected_chat"])
        embedding_id = await self.get(STORAGE_KEYS["selected_embedding"])
        multipliers = await self.get(STORAGE_KEYS["token_multipliers"])

        return EstimatorSettings(
            models=[ModelPrice(**m) for m in models] if models else DEFAULT_MODELS,
            selected_chat_model_id=chat_id or DEFAULT_CHAT_MODEL_ID,
            selected_embedding_model_id=embedding_id or DEFAULT_EMBEDDING_MODEL_ID,
            token_multipliers=TokenMultipliers(**(multipliers or {})),
        )

    async def save_estimator_settings(self, settings: EstimatorSettings):
        await self.set(
            STORAGE_KEYS["models"],
            [m.model_dump(mode="json") for m in settings.models],
        )
        await self.set(STORAGE_KEYS["selected_chat"], settings.selected_chat_model_id)
        await self.set(
            STORAGE_KEYS["selected_embedding"], settings.selected_embedding_model_id
        )
        await self.set(
            STORAGE_KEYS["token_multipliers"],
            settings.token_multipliers.model_dump(mode="json"),
        )


class SnapshotRepository:
    """Stores scraped and analyzed market prices."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save_many(self, records: List[PriceData], analyzed: bool = False):
        for record in records:
            self.session.add(
                PriceSnapshot(
                    model_info=record.model_info,
                    pricing=record.pricing,
                    source=record.source,
                    timestamp=record.timestamp,
                    analyzed=analyzed,
                )
            )
        await self.session.commit()

    async def list_latest(
        self, limit: int = 50, analyzed: Optional[bool] = None
    ) -> List[PriceData]:
        """Most recent snapshots first."""
        stmt = select(PriceSnapshot).order_by(PriceSnapshot.id.desc()).limit(limit)
        if analyzed is not None:
            stmt = stmt.where(PriceSnapshot.analyzed == analyzed)
        result = await self.session.execute(stmt)
        return [
            PriceData(
                model_info=row.model_info,
                pricing=row.pricing,
                timestamp=row.timestamp,
                source=row.source,
            )
            for row in result.scalars().all()
        ]
