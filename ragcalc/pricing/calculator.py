"""
Quote calculation for the Enterprise RAG plan.

A quote is the base tier price plus overage for team members, message credits
and vector storage, plus selected add-on features and custom charges. Overage
is charged per started block above the tier quota, never on the raw value.
"""

import logging
import math
from typing import Dict

from ragcalc.pricing.constants import (
    ADDITIONAL_FEATURES,
    BASE_TIER,
    MB_PER_GB,
    MESSAGE_CREDIT_BLOCK,
    MINIMUMS,
    PRICE_INCREMENTS,
    SUPPORTED_LANGUAGES,
    VECTOR_STORAGE_BLOCK_MB,
    get_feature,
)
from ragcalc.pricing.models import (
    AdditionalFeature,
    CustomCharge,
    FinalPrice,
    LocalizedFeature,
    PriceBreakdown,
    QuoteRequest,
    StorageUnit,
)

logger = logging.getLogger(__name__)


def _money(amount: float) -> float:
    return round(amount, 2)


def convert_to_mb(value: float, unit: StorageUnit) -> float:
    """Converts a storage amount to MB."""
    return value * MB_PER_GB if unit == "GB" else value


def convert_from_mb(mb: float, unit: StorageUnit) -> float:
    """Converts MB to the display unit."""
    return mb / MB_PER_GB if unit == "GB" else mb


def team_members_cost(users: int) -> float:
    """Cost of users above the tier's included team members."""
    extra = users - BASE_TIER.team_members
    if extra <= 0:
        return 0
    return extra * PRICE_INCREMENTS["team_member"]


def message_credits_cost(credits: int) -> float:
    """Cost of message credits above the tier, per started block of 1,000."""
    extra = credits - BASE_TIER.message_credits
    if extra <= 0:
        return 0
    return math.ceil(extra / MESSAGE_CREDIT_BLOCK) * PRICE_INCREMENTS["message_credits"]


def vector_storage_cost(value: float, unit: StorageUnit = "MB") -> float:
    """Cost of vector storage above the tier, per started block of 100 MB."""
    extra = convert_to_mb(value, unit) - BASE_TIER.vector_storage
    if extra <= 0:
        return 0
    return (
        math.ceil(extra / VECTOR_STORAGE_BLOCK_MB) * PRICE_INCREMENTS["vector_storage"]
    )


def feature_monthly_cost(feature: AdditionalFeature) -> float:
    """Monthly cost of a feature. One-time fees are amortized over 12 months."""
    if feature.billing_type == "onetime":
        return feature.price_increment / 12
    return feature.price_increment


def localize_feature(feature: AdditionalFeature, language: str = "en") -> LocalizedFeature:
    """Resolves a catalog feature to one language, falling back to English."""
    return LocalizedFeature(
        id=feature.id,
        name=feature.name.get(language) or feature.name.get("en", feature.id),
        description=feature.description.get(language)
        or feature.description.get("en", ""),
        price_increment=feature.price_increment,
        category=feature.category,
        billing_type=feature.billing_type,
    )


def list_features(language: str = "en") -> list[LocalizedFeature]:
    """The add-on catalog in the requested language."""
    if language not in SUPPORTED_LANGUAGES:
        language = "en"
    return [localize_feature(f, language) for f in ADDITIONAL_FEATURES]


def calculate_price(request: QuoteRequest) -> float:
    """
    Undiscounted monthly price: base, overage and selected catalog features.
    Unknown feature ids contribute nothing.
    """
    total = BASE_TIER.base_price
    total += team_members_cost(request.users)
    total += message_credits_cost(request.message_credits)
    total += vector_storage_cost(request.vector_storage, request.storage_unit)

    for feature_id in request.selected_features:
        feature = get_feature(feature_id)
        if feature:
            total += feature_monthly_cost(feature)

    return total


def validate_custom_charge(charge: CustomCharge) -> Dict[str, str]:
    """Returns a field -> error message map, empty when the charge is valid."""
    errors = {}
    if not charge.name.strip():
        errors["name"] = "Please enter a charge name"
    if charge.price_increment <= 0:
        errors["amount"] = "Amount must be greater than 0"
    return errors


def calculate_final_price(
    monthly_price: float,
    billing_cycle: str = "monthly",
    yearly_discount: float = 0.0,
    yearly_discount_enabled: bool = True,
) -> FinalPrice:
    """
    Billing-cycle view of a monthly price. For yearly billing, `total` is the
    annual amount and `monthly` its per-month equivalent.
    """
    if billing_cycle != "yearly":
        return FinalPrice(monthly=_money(monthly_price), total=_money(monthly_price))

    rate = yearly_discount if yearly_discount_enabled else 0.0
    total = monthly_price * 12 * (1 - rate)
    return FinalPrice(monthly=_money(total / 12), total=_money(total))


def calculate_price_breakdown(request: QuoteRequest) -> PriceBreakdown:
    """Itemized quote including custom charges, global discount and billing view."""
    features_cost: Dict[str, float] = {}
    for feature_id in request.selected_features:
        feature = get_feature(feature_id)
        if not feature:
            logger.warning("Ignoring unknown feature id '%s'", feature_id)
            continue
        name = localize_feature(feature, request.language).name
        features_cost[name] = features_cost.get(name, 0) + feature_monthly_cost(feature)

    charges_cost: Dict[str, float] = {}
    for charge in request.custom_charges:
        if validate_custom_charge(charge):
            logger.warning("Skipping invalid custom charge '%s'", charge.id)
            continue
        name = charge.name.strip()
        charges_cost[name] = charges_cost.get(name, 0) + charge.price_increment

    breakdown = PriceBreakdown(
        base_price=BASE_TIER.base_price,
        team_members_cost=team_members_cost(request.users),
        message_credits_cost=message_credits_cost(request.message_credits),
        vector_storage_cost=vector_storage_cost(
            request.vector_storage, request.storage_unit
        ),
        additional_features_cost=features_cost,
        custom_charges_cost=charges_cost,
        billing_cycle=request.billing_cycle,
    )

    subtotal = (
        breakdown.base_price
        + breakdown.team_members_cost
        + breakdown.message_credits_cost
        + breakdown.vector_storage_cost
        + sum(features_cost.values())
        + sum(charges_cost.values())
    )
    discount = subtotal * request.global_discount
    total = subtotal - discount

    final = calculate_final_price(
        total,
        request.billing_cycle,
        request.yearly_discount,
        request.yearly_discount_enabled,
    )

    breakdown.subtotal = _money(subtotal)
    breakdown.discount = _money(discount)
    breakdown.total = _money(total)
    breakdown.billed_total = final.total
    breakdown.monthly_equivalent = final.monthly
    if request.billing_cycle == "yearly":
        breakdown.yearly_discount_amount = _money(total * 12 - final.total)

    return breakdown


def minimum_warnings(request: QuoteRequest) -> Dict[str, str]:
    """Hints for inputs below the recommended minimums."""
    warnings = {}
    if request.users < MINIMUMS["users"]:
        warnings["users"] = f"Minimum {MINIMUMS['users']:,.0f} users"
    if request.message_credits < MINIMUMS["message_credits"]:
        warnings["message_credits"] = (
            f"Minimum {MINIMUMS['message_credits']:,.0f} messages"
        )
    storage_mb = convert_to_mb(request.vector_storage, request.storage_unit)
    if storage_mb < MINIMUMS["vector_storage_mb"]:
        minimum = convert_from_mb(MINIMUMS["vector_storage_mb"], request.storage_unit)
        warnings["vector_storage"] = f"Minimum {minimum:g} {request.storage_unit}"
    return warnings


def reset_request(request: QuoteRequest | None = None) -> QuoteRequest:
    """
    A request matching the base tier with nothing selected. Billing cycle,
    currency and language are carried over from `request` when given.
    """
    carried = {}
    if request is not None:
        carried = {
            "billing_cycle": request.billing_cycle,
            "currency": request.currency,
            "language": request.language,
        }
    return QuoteRequest(
        users=BASE_TIER.team_members,
        message_credits=BASE_TIER.message_credits,
        vector_storage=BASE_TIER.vector_storage,
        storage_unit="MB",
        **carried,
    )
