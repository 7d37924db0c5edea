"""
Data models for the Enterprise RAG price quote.
Shared by the calculator, the HTTP API and the Streamlit frontend.
"""

import uuid
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

StorageUnit = Literal["MB", "GB"]
BillingCycle = Literal["monthly", "yearly"]
FeatureCategory = Literal["rag", "security", "support", "integration"]
BillingType = Literal["monthly", "onetime"]


class PricingTier(BaseModel):
    """Quotas included in a plan's base price."""

    name: str
    base_price: float
    message_credits: int
    team_members: int
    build_apps: int
    vector_storage: int  # MB
    documents_quota: int
    annotation_quota: int
    custom_tools: int


class AdditionalFeature(BaseModel):
    """A catalog add-on with localized name and description."""

    id: str
    name: Dict[str, str]
    description: Dict[str, str] = Field(default_factory=dict)
    price_increment: float
    category: FeatureCategory = "rag"
    billing_type: BillingType = "monthly"


class LocalizedFeature(BaseModel):
    """An add-on resolved to a single display language."""

    id: str
    name: str
    description: str
    price_increment: float
    category: FeatureCategory
    billing_type: BillingType


class CustomCharge(BaseModel):
    """A free-form "other charge" entered by the sales user."""

    id: str = Field(default_factory=lambda: f"custom-{uuid.uuid4().hex[:8]}")
    name: str = ""
    price_increment: float = 0
    description: str = ""


class QuoteRequest(BaseModel):
    """User-configured usage dimensions for a quote."""

    users: int = Field(default=3, ge=0)
    message_credits: int = Field(default=5000, ge=0)
    vector_storage: float = Field(default=200, ge=0)
    storage_unit: StorageUnit = "MB"
    selected_features: List[str] = Field(default_factory=list)
    custom_charges: List[CustomCharge] = Field(default_factory=list)
    # Fraction in [0, 1]
    global_discount: float = 0.0
    billing_cycle: BillingCycle = "monthly"
    yearly_discount: float = 0.2
    yearly_discount_enabled: bool = True
    currency: Optional[str] = None
    language: str = "en"

    @field_validator("global_discount", "yearly_discount", mode="before")
    @classmethod
    def clamp_fraction(cls, v):
        """Clamps discount fractions into [0, 1]."""
        if v is None:
            return 0.0
        return min(1.0, max(0.0, float(v)))


class FinalPrice(BaseModel):
    """Billing-cycle view of a monthly price."""

    monthly: float
    total: float


class PriceBreakdown(BaseModel):
    """Itemized quote. All amounts are USD per month unless stated otherwise."""

    base_price: float
    team_members_cost: float = 0
    message_credits_cost: float = 0
    vector_storage_cost: float = 0
    additional_features_cost: Dict[str, float] = Field(default_factory=dict)
    custom_charges_cost: Dict[str, float] = Field(default_factory=dict)
    subtotal: float = 0
    discount: float = 0
    total: float = 0
    # Billing view
    billing_cycle: BillingCycle = "monthly"
    yearly_discount_amount: float = 0
    billed_total: float = 0
    monthly_equivalent: float = 0
