from unittest.mock import patch

import httpx
import pytest

from ragcalc.pricing.currency import (
    DEFAULT_EXCHANGE_RATES,
    currency_for_language,
    fetch_exchange_rates,
    format_amount,
    get_currency,
    rebase_rates,
)


def test_format_usd():
    usd = get_currency("USD")
    assert format_amount(1234.5, usd) == "$1,234.50"
    assert format_amount(-5, usd) == "-$5.00"


def test_format_eur_uses_european_separators():
    eur = get_currency("eur")
    assert eur.code == "EUR"
    assert format_amount(1000, eur) == "€920,00"
    assert format_amount(1234.5, eur, convert_amount=False) == "€1.234,50"


def test_format_jpy_converts_amount():
    assert format_amount(1000, get_currency("JPY")) == "¥150.250,00"


def test_unsupported_currency():
    with pytest.raises(ValueError):
        get_currency("XYZ")


def test_currency_for_language():
    assert currency_for_language("zh") == "CNY"
    assert currency_for_language("ja") == "JPY"
    assert currency_for_language("fr") == "USD"


def test_rebase_rates():
    rates = rebase_rates(DEFAULT_EXCHANGE_RATES, "EUR")
    assert rates["EUR"] == 1
    assert rates["USD"] == pytest.approx(1 / 0.92)

    with pytest.raises(ValueError):
        rebase_rates(DEFAULT_EXCHANGE_RATES, "XYZ")


@pytest.mark.asyncio
async def test_fetch_exchange_rates_defaults_without_url():
    with patch("ragcalc.pricing.currency.EXCHANGE_RATES_URL", None):
        rates = await fetch_exchange_rates()
    assert rates == DEFAULT_EXCHANGE_RATES


@pytest.mark.asyncio
async def test_fetch_exchange_rates_uses_live_rates():
    def handler(request):
        return httpx.Response(200, json={"rates": {"EUR": 0.9, "XYZ": 3.0}})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with patch("ragcalc.pricing.currency.EXCHANGE_RATES_URL", "https://rates.test/latest"):
            rates = await fetch_exchange_rates(client=client)

    assert rates["EUR"] == 0.9
    assert rates["GBP"] == DEFAULT_EXCHANGE_RATES["GBP"]
    assert "XYZ" not in rates


@pytest.mark.asyncio
async def test_fetch_exchange_rates_falls_back_on_error():
    def handler(request):
        return httpx.Response(503)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with patch("ragcalc.pricing.currency.EXCHANGE_RATES_URL", "https://rates.test/latest"):
            rates = await fetch_exchange_rates(client=client)

    assert rates == DEFAULT_EXCHANGE_RATES


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"rates": {"EUR": None}},
        {"rates": {"USD": 0}},
        {"rates": {"EUR": 0.5, "GBP": "bad"}},
        {"rates": {"JPY": -150}},
        {"rates": None},
        ["not", "a", "mapping"],
    ],
)
async def test_fetch_exchange_rates_ignores_malformed_live_rates(payload):
    def handler(request):
        return httpx.Response(200, json=payload)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with patch("ragcalc.pricing.currency.EXCHANGE_RATES_URL", "https://rates.test/latest"):
            rates = await fetch_exchange_rates(client=client)

    assert rates == DEFAULT_EXCHANGE_RATES
