"""
Currency support for quote display.
Amounts are computed in USD and converted at display time.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from ragcalc.config import EXCHANGE_RATES_URL

logger = logging.getLogger(__name__)


class CurrencyInfo(BaseModel):
    symbol: str
    name: str


class Currency(BaseModel):
    """A display currency with its rate against USD and number separators."""

    code: str
    symbol: str
    rate: float = 1.0
    decimal_separator: str = "."
    thousands_separator: str = ","


SUPPORTED_CURRENCIES: Dict[str, CurrencyInfo] = {
    "USD": CurrencyInfo(symbol="$", name="US Dollar"),
    "EUR": CurrencyInfo(symbol="€", name="Euro"),
    "GBP": CurrencyInfo(symbol="£", name="British Pound"),
    "JPY": CurrencyInfo(symbol="¥", name="Japanese Yen"),
    "CNY": CurrencyInfo(symbol="¥", name="Chinese Yuan"),
}

# Units of each currency per 1 USD
DEFAULT_EXCHANGE_RATES: Dict[str, float] = {
    "USD": 1,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 150.25,
    "CNY": 7.23,
}

LANGUAGE_CURRENCY_MAP: Dict[str, str] = {
    "en": "USD",
    "zh": "CNY",
    "ja": "JPY",
}


def rebase_rates(rates: Dict[str, float], base: str) -> Dict[str, float]:
    """Expresses USD-based rates relative to another base currency."""
    if base not in rates:
        raise ValueError(f"Unsupported base currency: {base}")
    base_rate = rates[base]
    return {code: rate / base_rate for code, rate in rates.items()}


def _parse_live_rates(payload: Any) -> Dict[str, float]:
    """
    Supported rates from an upstream payload. Raises ValueError or TypeError
    unless every supplied rate is a positive number.
    """
    live_rates = payload.get("rates", {})
    parsed = {}
    for code in SUPPORTED_CURRENCIES:
        if code in live_rates:
            rate = float(live_rates[code])
            if not rate > 0:
                raise ValueError(f"Invalid exchange rate for {code}: {rate}")
            parsed[code] = rate
    return parsed


async def fetch_exchange_rates(
    base: str = "USD", client: Optional[httpx.AsyncClient] = None
) -> Dict[str, float]:
    """
    Returns exchange rates relative to `base` for the supported currencies.
    Uses EXCHANGE_RATES_URL when configured and falls back to the static table.
    """
    rates = dict(DEFAULT_EXCHANGE_RATES)

    if EXCHANGE_RATES_URL:
        try:
            if client is None:
                async with httpx.AsyncClient(follow_redirects=True) as owned_client:
                    response = await owned_client.get(EXCHANGE_RATES_URL, timeout=10.0)
            else:
                response = await client.get(EXCHANGE_RATES_URL, timeout=10.0)
            response.raise_for_status()
            rates.update(_parse_live_rates(response.json()))
        except (httpx.HTTPError, ValueError, TypeError, AttributeError) as e:
            logger.error("Failed to fetch exchange rates, using defaults: %s", e)

    return rebase_rates(rates, base)


def get_currency(code: str, rates: Optional[Dict[str, float]] = None) -> Currency:
    """Builds a display currency. Missing rates default to 1."""
    code = code.upper()
    info = SUPPORTED_CURRENCIES.get(code)
    if info is None:
        raise ValueError(f"Unsupported currency: {code}")

    rate = (rates if rates is not None else DEFAULT_EXCHANGE_RATES).get(code) or 1
    is_usd = code == "USD"
    return Currency(
        code=code,
        symbol=info.symbol,
        rate=rate,
        decimal_separator="." if is_usd else ",",
        thousands_separator="," if is_usd else ".",
    )


def currency_for_language(language: str) -> str:
    return LANGUAGE_CURRENCY_MAP.get(language, "USD")


def convert(amount: float, currency: Currency) -> float:
    return amount * currency.rate


def format_amount(amount: float, currency: Currency, convert_amount: bool = True) -> str:
    """
    Formats a USD amount in the display currency, e.g. "$1,234.50" or "€1.234,50".
    """
    value = convert(amount, currency) if convert_amount else amount
    sign = "-" if value < 0 else ""
    # Format with placeholders, then swap in the currency's separators
    text = f"{abs(value):,.2f}".replace(",", "\0").replace(".", "\1")
    text = text.replace("\0", currency.thousands_separator).replace(
        "\1", currency.decimal_separator
    )
    return f"{sign}{currency.symbol}{text}"
