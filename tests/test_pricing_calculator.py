import pytest

from ragcalc.pricing.calculator import (
    calculate_final_price,
    calculate_price,
    calculate_price_breakdown,
    convert_from_mb,
    convert_to_mb,
    list_features,
    message_credits_cost,
    minimum_warnings,
    reset_request,
    team_members_cost,
    validate_custom_charge,
    vector_storage_cost,
)
from ragcalc.pricing.models import CustomCharge, QuoteRequest


def test_base_tier_price_when_within_quotas():
    request = QuoteRequest(users=3, message_credits=5000, vector_storage=200)
    assert calculate_price(request) == 139


def test_overage_costs():
    assert team_members_cost(10) == 0
    assert team_members_cost(15) == 100
    # Credits are billed per started block of 1,000
    assert message_credits_cost(10000) == 0
    assert message_credits_cost(10001) == 10
    assert message_credits_cost(12500) == 30
    # Storage is billed per started block of 100 MB
    assert vector_storage_cost(1024) == 0
    assert vector_storage_cost(1025) == 8
    assert vector_storage_cost(2, "GB") == 88


def test_storage_unit_conversion():
    assert convert_to_mb(2, "GB") == 2048
    assert convert_to_mb(300, "MB") == 300
    assert convert_from_mb(1024, "GB") == 1


def test_price_with_overage_and_features():
    request = QuoteRequest(
        users=15,
        message_credits=12500,
        vector_storage=2,
        storage_unit="GB",
        selected_features=["sso", "agent"],
    )
    assert calculate_price(request) == 587


def test_unknown_feature_is_ignored():
    request = QuoteRequest(selected_features=["sso", "does-not-exist"])
    assert calculate_price(request) == 139 + 80


def test_discounts_are_clamped():
    assert QuoteRequest(global_discount=1.5).global_discount == 1.0
    assert QuoteRequest(global_discount=-0.3).global_discount == 0.0
    assert QuoteRequest(yearly_discount=None).yearly_discount == 0.0


def test_validate_custom_charge():
    assert validate_custom_charge(CustomCharge(name="Onboarding", price_increment=50)) == {}

    errors = validate_custom_charge(CustomCharge(name="   ", price_increment=0))
    assert errors == {
        "name": "Please enter a charge name",
        "amount": "Amount must be greater than 0",
    }


def test_custom_charge_gets_generated_id():
    charge = CustomCharge(name="Setup", price_increment=10)
    assert charge.id.startswith("custom-")
    assert charge.id != CustomCharge().id


def test_final_price_by_billing_cycle():
    monthly = calculate_final_price(100, "monthly", 0.2, True)
    assert monthly.monthly == 100
    assert monthly.total == 100

    yearly = calculate_final_price(100, "yearly", 0.2, True)
    assert yearly.total == 960
    assert yearly.monthly == 80

    no_discount = calculate_final_price(100, "yearly", 0.2, False)
    assert no_discount.total == 1200
    assert no_discount.monthly == 100


def test_breakdown_includes_valid_custom_charges_and_discount():
    request = QuoteRequest(
        users=15,
        message_credits=12500,
        vector_storage=2,
        storage_unit="GB",
        selected_features=["sso", "agent"],
        custom_charges=[
            CustomCharge(name="Onboarding", price_increment=50),
            CustomCharge(name="", price_increment=10),
        ],
        global_discount=0.1,
    )
    breakdown = calculate_price_breakdown(request)

    assert breakdown.base_price == 139
    assert breakdown.team_members_cost == 100
    assert breakdown.message_credits_cost == 30
    assert breakdown.vector_storage_cost == 88
    assert breakdown.additional_features_cost == {"SSO Integration": 80, "Agent Mode": 150}
    assert breakdown.custom_charges_cost == {"Onboarding": 50}
    assert breakdown.subtotal == 637
    assert breakdown.discount == pytest.approx(63.7)
    assert breakdown.total == pytest.approx(573.3)
    assert breakdown.billed_total == pytest.approx(573.3)
    assert breakdown.yearly_discount_amount == 0


def test_breakdown_yearly_billing():
    request = QuoteRequest(billing_cycle="yearly")
    breakdown = calculate_price_breakdown(request)

    assert breakdown.total == 139
    assert breakdown.billed_total == pytest.approx(1334.4)
    assert breakdown.monthly_equivalent == pytest.approx(111.2)
    assert breakdown.yearly_discount_amount == pytest.approx(333.6)


def test_breakdown_accumulates_duplicate_features():
    breakdown = calculate_price_breakdown(QuoteRequest(selected_features=["sso", "sso"]))
    assert breakdown.additional_features_cost == {"SSO Integration": 160}


def test_breakdown_uses_localized_feature_names():
    breakdown = calculate_price_breakdown(
        QuoteRequest(selected_features=["priority"], language="zh")
    )
    assert breakdown.additional_features_cost == {"优先支持服务": 60}


def test_list_features_falls_back_to_english():
    assert list_features("ja")[0].name == "シングルサインオン統合"
    assert list_features("fr")[0].name == "SSO Integration"
    assert [f.id for f in list_features()] == [
        "sso",
        "multimodal",
        "agent",
        "workflow",
        "priority",
    ]


def test_minimum_warnings():
    warnings = minimum_warnings(QuoteRequest(users=3, message_credits=4000, vector_storage=200))
    assert warnings == {
        "users": "Minimum 10 users",
        "message_credits": "Minimum 5,000 messages",
        "vector_storage": "Minimum 1024 MB",
    }

    gb = minimum_warnings(QuoteRequest(users=10, vector_storage=0.5, storage_unit="GB"))
    assert gb == {"vector_storage": "Minimum 1 GB"}


def test_reset_request_keeps_display_settings():
    request = QuoteRequest(
        users=50,
        selected_features=["sso"],
        billing_cycle="yearly",
        currency="EUR",
        language="ja",
    )
    reset = reset_request(request)

    assert reset.users == 10
    assert reset.message_credits == 10000
    assert reset.vector_storage == 1024
    assert reset.selected_features == []
    assert reset.billing_cycle == "yearly"
    assert reset.currency == "EUR"
    assert reset.language == "ja"
    assert calculate_price(reset) == 139


def test_full_global_discount_gives_zero_total():
    request = QuoteRequest(users=15, selected_features=["sso"], global_discount=1.0)
    breakdown = calculate_price_breakdown(request)

    assert breakdown.subtotal == 139 + 100 + 80
    assert breakdown.discount == breakdown.subtotal
    assert breakdown.total == 0
    assert breakdown.billed_total == 0


def test_breakdown_accumulates_duplicate_custom_charges():
    request = QuoteRequest(
        custom_charges=[
            CustomCharge(name="Onboarding", price_increment=50),
            CustomCharge(name=" Onboarding ", price_increment=25),
        ]
    )
    breakdown = calculate_price_breakdown(request)

    assert breakdown.custom_charges_cost == {"Onboarding": 75}
    assert breakdown.subtotal == 139 + 75
