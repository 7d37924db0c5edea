"""
Data models for scraped and analyzed LLM market prices.
"""

from datetime import datetime, timezone
from typing import List
from pydantic import AliasChoices, BaseModel, Field


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string, e.g. 2026-01-31T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class ScrapingConfig(BaseModel):
    """A provider pricing page to scrape."""

    name: str
    url: str
    wait_for_selector: str = "body"
    # Extra settle time after load, in milliseconds
    wait_time: int = 3000


class PriceData(BaseModel):
    """
    Pricing text for one provider or model. Raw scrape results carry the whole
    page text in `pricing`; analyzed results carry one model per item.
    """

    model_info: str = Field(validation_alias=AliasChoices("model_info", "modelInfo"))
    pricing: str
    timestamp: str = Field(default_factory=utc_timestamp)
    source: str


class AnalysisResult(BaseModel):
    analyzed_data: List[PriceData] = Field(default_factory=list)
    used_prompt: str = ""
