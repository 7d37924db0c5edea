"""
Data models for the token and cost estimator.
"""

import time
from typing import Dict, Literal, Optional
from pydantic import BaseModel, Field, field_validator

ModelType = Literal["chat", "embedding"]
SizeCategory = Literal["small", "medium", "large"]


class ModelPrice(BaseModel):
    """User-editable model entry. Prices are USD per million tokens."""

    id: str
    name: str
    type: ModelType
    input_price: Optional[float] = Field(default=None, ge=0)
    # Chat models only; falls back to input_price when missing
    output_price: Optional[float] = Field(default=None, ge=0)


class TokenMultipliers(BaseModel):
    """
    Tokens per character for text formats, per megapixel for images and per
    minute for audio/video.
    """

    text: float = Field(default=1.5, ge=0)
    excel: float = Field(default=1.67, ge=0)
    ppt: float = Field(default=2.0, ge=0)
    pdf: float = Field(default=1.87, ge=0)
    word: float = Field(default=1.8, ge=0)
    email: float = Field(default=1.3, ge=0)
    image: float = Field(default=300, ge=0)
    audio: float = Field(default=400, ge=0)
    video: float = Field(default=800, ge=0)

    @field_validator("*", mode="before")
    @classmethod
    def blank_as_zero(cls, v):
        """Blank form values count as zero."""
        if v is None or v == "":
            return 0
        return v

    def get(self, doc_type: str) -> float:
        return float(getattr(self, doc_type, 0) or 0)


class MonthlyPattern(BaseModel):
    """Monthly usage assumptions."""

    monthly_growth_rate: float = Field(default=0.10, ge=0)
    # Queries per active user per day
    queries_per_active_user: float = Field(default=5, ge=0)
    turns_per_query: float = Field(default=5, ge=0)


class TeamSize(BaseModel):
    total: int = Field(default=0, ge=0)
    active_users: int = Field(default=0, ge=0)


class TeamSizeRatio(BaseModel):
    total: int
    active_ratio: float


class SizePattern(MonthlyPattern):
    team_size: TeamSizeRatio
    documents_per_user: Dict[str, float]


class IndustryPattern(BaseModel):
    """Industry preset with a default monthly pattern and per-size details."""

    label: str
    description: str
    monthly_growth_rate: float
    queries_per_active_user: float
    turns_per_query: float
    size_patterns: Dict[SizeCategory, SizePattern]

    def monthly_pattern(self) -> MonthlyPattern:
        return MonthlyPattern(
            monthly_growth_rate=self.monthly_growth_rate,
            queries_per_active_user=self.queries_per_active_user,
            turns_per_query=self.turns_per_query,
        )


def _number(v) -> float:
    """Coerces form input to a number; blank or invalid values become 0."""
    try:
        return float(v or 0)
    except (TypeError, ValueError):
        return 0.0


class UsageDimensions(BaseModel):
    """Corpus and team inputs for an estimate."""

    documents: Dict[str, float] = Field(default_factory=dict)
    avg_document_length: Dict[str, float] = Field(default_factory=dict)
    avg_image_count: float = 0
    avg_image_size: float = 0
    avg_audio_length: float = 0
    avg_video_length: float = 0
    team_size: TeamSize = Field(default_factory=TeamSize)
    selected_template: str = "university"

    @field_validator("documents", "avg_document_length", mode="before")
    @classmethod
    def coerce_counts(cls, v):
        if v is None:
            return {}
        return {key: max(0.0, _number(value)) for key, value in dict(v).items()}

    @field_validator(
        "avg_image_count",
        "avg_image_size",
        "avg_audio_length",
        "avg_video_length",
        mode="before",
    )
    @classmethod
    def coerce_number(cls, v):
        return max(0.0, _number(v))


class DocumentTokenRequest(BaseModel):
    """Inputs for a single-document token count."""

    doc_type: str
    length: float = Field(default=0, ge=0)
    image_count: float = Field(default=0, ge=0)
    image_size: float = Field(default=1, ge=0)
    duration: float = Field(default=0, ge=0)
    complexity: float = Field(default=1, ge=0)
    multipliers: TokenMultipliers = Field(default_factory=TokenMultipliers)


class InitialUsage(BaseModel):
    embedding: float
    documents: Dict[str, float]
    avg_document_length: Dict[str, float]
    multipliers: Dict[str, float]


class MonthlyUsage(BaseModel):
    embedding: float
    chat_input: float
    chat_output: float
    # Industry default pattern, for reference next to the user's pattern
    pattern: MonthlyPattern


class InitialCost(BaseModel):
    embedding: float
    total: float


class MonthlyCost(BaseModel):
    embedding: float
    chat_input: float
    chat_output: float
    total: float


class CostResult(BaseModel):
    initial: InitialCost
    monthly: MonthlyCost


class ModelPrices(BaseModel):
    """Per-million-token prices that were applied."""

    embedding: float
    chat_input: float
    chat_output: float


class EstimationRequest(BaseModel):
    """Everything needed for a full estimate."""

    dimensions: UsageDimensions = Field(default_factory=UsageDimensions)
    pattern: MonthlyPattern = Field(default_factory=MonthlyPattern)
    multipliers: TokenMultipliers = Field(default_factory=TokenMultipliers)
    models: list[ModelPrice] = Field(default_factory=list)
    selected_chat_model_id: str = "gpt-4"
    selected_embedding_model_id: str = "embedding-3"


class EstimationResult(BaseModel):
    initial_usage: InitialUsage
    monthly_usage: MonthlyUsage
    costs: CostResult
    model_prices: ModelPrices


class TemplateRequest(BaseModel):
    dimensions: UsageDimensions = Field(default_factory=UsageDimensions)
    industry: str
    size: SizeCategory = "small"


class TemplateResult(BaseModel):
    dimensions: UsageDimensions
    pattern: MonthlyPattern


class EstimatorSettings(BaseModel):
    """User choices remembered between estimator sessions."""

    models: list[ModelPrice]
    selected_chat_model_id: str
    selected_embedding_model_id: str
    token_multipliers: TokenMultipliers


def new_model(model_type: ModelType) -> ModelPrice:
    """A blank model entry for the price editor."""
    return ModelPrice(
        id=f"model-{int(time.time() * 1000)}",
        name="",
        type=model_type,
        input_price=None,
        output_price=None,
    )
