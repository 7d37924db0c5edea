import logging
from typing import Any, Dict, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ragcalc.config import FRONTEND_URL
from ragcalc.db.connection import AsyncSessionLocal
from ragcalc.db.init_db import init_db
from ragcalc.db.repository import SettingsRepository, SnapshotRepository
from ragcalc.market.analyzer import PriceAnalyzer
from ragcalc.market.models import AnalysisResult, PriceData
from ragcalc.market.scraper import LLMPriceScraper
from ragcalc.pricing.calculator import (
    calculate_price,
    calculate_price_breakdown,
    list_features,
    minimum_warnings,
    validate_custom_charge,
)
from ragcalc.pricing.constants import BASE_TIER, PRICE_INCREMENTS
from ragcalc.pricing.currency import (
    SUPPORTED_CURRENCIES,
    currency_for_language,
    fetch_exchange_rates,
    format_amount,
    get_currency,
)
from ragcalc.pricing.models import (
    CustomCharge,
    LocalizedFeature,
    PriceBreakdown,
    PricingTier,
    QuoteRequest,
)
from ragcalc.tokens.calculator import apply_template, calculate_tokens_for_document, estimate
from ragcalc.tokens.constants import (
    DEFAULT_DOC_LENGTHS,
    DEFAULT_MODELS,
    DEFAULT_TOKEN_MULTIPLIERS,
    INDUSTRY_PATTERNS,
    TOKENS_PER_QUERY,
)
from ragcalc.tokens.models import (
    DocumentTokenRequest,
    EstimationRequest,
    EstimationResult,
    EstimatorSettings,
    IndustryPattern,
    TemplateRequest,
    TemplateResult,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="RAG Pricing Calculator API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["*"],
)

scraper = LLMPriceScraper()
analyzer = PriceAnalyzer()


@app.on_event("startup")
async def on_startup():
    await init_db()


class TierResponse(BaseModel):
    tier: PricingTier
    increments: Dict[str, float]


class CurrencyResponse(BaseModel):
    code: str
    symbol: str
    name: str
    rate: float


class QuoteResponse(BaseModel):
    """Breakdown in USD plus display strings in the requested currency."""

    price: float
    breakdown: PriceBreakdown
    currency: str
    formatted: Dict[str, str]
    warnings: Dict[str, str]


class ChargeValidationResponse(BaseModel):
    valid: bool
    errors: Dict[str, str]


class DocumentTokenResponse(BaseModel):
    doc_type: str
    tokens: float


class TokenDefaultsResponse(BaseModel):
    models: List[Any]
    multipliers: Dict[str, float]
    avg_document_length: Dict[str, float]
    tokens_per_query: Dict[str, float]


class SettingValue(BaseModel):
    value: Any


@app.get("/pricing/tier", response_model=TierResponse)
async def get_tier():
    """
    Returns the base tier quotas and overage increments.
    """
    return TierResponse(tier=BASE_TIER, increments=PRICE_INCREMENTS)


@app.get("/pricing/features", response_model=List[LocalizedFeature])
async def get_features(lang: str = "en"):
    """
    Returns the add-on catalog in the requested language.
    """
    return list_features(lang)


@app.get("/pricing/currencies", response_model=List[CurrencyResponse])
async def get_currencies():
    """
    Lists supported currencies with their current rate against USD.
    """
    rates = await fetch_exchange_rates()
    return [
        CurrencyResponse(code=code, symbol=info.symbol, name=info.name, rate=rates[code])
        for code, info in SUPPORTED_CURRENCIES.items()
    ]


@app.post("/pricing/quote", response_model=QuoteResponse)
async def create_quote(request: QuoteRequest):
    """
    Computes an itemized quote. Amounts in `breakdown` are USD; `formatted`
    holds display strings in the requested (or language default) currency.
    """
    code = request.currency or currency_for_language(request.language)
    try:
        rates = await fetch_exchange_rates()
        currency = get_currency(code, rates)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    breakdown = calculate_price_breakdown(request)
    formatted = {
        "subtotal": format_amount(breakdown.subtotal, currency),
        "discount": format_amount(breakdown.discount, currency),
        "total": format_amount(breakdown.total, currency),
        "billed_total": format_amount(breakdown.billed_total, currency),
        "monthly_equivalent": format_amount(breakdown.monthly_equivalent, currency),
    }

    return QuoteResponse(
        price=calculate_price(request),
        breakdown=breakdown,
        currency=currency.code,
        formatted=formatted,
        warnings=minimum_warnings(request),
    )


@app.post("/pricing/custom-charges/validate", response_model=ChargeValidationResponse)
async def validate_charge(charge: CustomCharge):
    errors = validate_custom_charge(charge)
    return ChargeValidationResponse(valid=not errors, errors=errors)


@app.get("/tokens/defaults", response_model=TokenDefaultsResponse)
async def get_token_defaults():
    """
    Returns the default models, multipliers, document lengths and per-query constants.
    """
    return TokenDefaultsResponse(
        models=[m.model_dump() for m in DEFAULT_MODELS],
        multipliers=DEFAULT_TOKEN_MULTIPLIERS.model_dump(),
        avg_document_length=DEFAULT_DOC_LENGTHS,
        tokens_per_query=TOKENS_PER_QUERY,
    )


@app.get("/tokens/industries", response_model=Dict[str, IndustryPattern])
async def get_industries():
    return INDUSTRY_PATTERNS


@app.post("/tokens/template", response_model=TemplateResult)
async def post_template(request: TemplateRequest):
    """
    Applies an industry preset to the given usage dimensions.
    """
    try:
        return apply_template(request.dimensions, request.industry, request.size)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/tokens/document", response_model=DocumentTokenResponse)
async def post_document_tokens(request: DocumentTokenRequest):
    tokens = calculate_tokens_for_document(
        request.doc_type,
        request.multipliers,
        length=request.length,
        image_count=request.image_count,
        image_size=request.image_size,
        duration=request.duration,
        complexity=request.complexity,
    )
    return DocumentTokenResponse(doc_type=request.doc_type, tokens=tokens)


@app.post("/tokens/estimate", response_model=EstimationResult)
async def post_estimate(request: EstimationRequest):
    """
    Estimates initial and monthly token usage and cost.
    """
    try:
        return estimate(request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/estimator/settings", response_model=EstimatorSettings)
async def get_estimator_settings():
    async with AsyncSessionLocal() as session:
        repo = SettingsRepository(session)
        return await repo.load_estimator_settings()


@app.put("/estimator/settings", response_model=EstimatorSettings)
async def put_estimator_settings(settings: EstimatorSettings):
    async with AsyncSessionLocal() as session:
        repo = SettingsRepository(session)
        await repo.save_estimator_settings(settings)
    return settings


@app.get("/settings/{key}", response_model=SettingValue)
async def get_setting(key: str):
    async with AsyncSessionLocal() as session:
        repo = SettingsRepository(session)
        value = await repo.get(key)
    if value is None:
        raise HTTPException(status_code=404, detail="Setting not found")
    return SettingValue(value=value)


@app.put("/settings/{key}", response_model=SettingValue)
async def put_setting(key: str, setting: SettingValue):
    async with AsyncSessionLocal() as session:
        repo = SettingsRepository(session)
        await repo.set(key, setting.value)
    return setting


@app.get("/api/prices", response_model=List[PriceData])
async def get_prices():
    """
    Scrapes the configured provider pricing pages and returns raw page text.
    """
    try:
        logger.info("Fetching prices...")
        prices = await scraper.scrape_all()
        logger.info("Prices fetched: %d records", len(prices))
        return prices
    # pylint: disable=broad-exception-caught
    except Exception as e:
        logger.error("Error fetching prices: %s", e)
        return JSONResponse(
            status_code=500, content={"error": "Failed to fetch pricing data"}
        )


@app.post("/api/prices/analyze", response_model=AnalysisResult)
async def analyze_prices():
    """
    Scrapes provider pages, asks Gemini to structure them and stores the result.
    """
    try:
        scraped = await scraper.scrape_all()
    # pylint: disable=broad-exception-caught
    except Exception as e:
        logger.error("Error fetching prices: %s", e)
        return JSONResponse(
            status_code=500, content={"error": "Failed to fetch pricing data"}
        )

    result = await analyzer.analyze(
        scraped,
        on_progress=lambda provider, percent: logger.info(
            "Analyzing %s pricing data... %.0f%%", provider or "all", percent
        ),
    )

    async with AsyncSessionLocal() as session:
        repo = SnapshotRepository(session)
        await repo.save_many(result.analyzed_data, analyzed=True)

    return result


@app.get("/api/prices/history", response_model=List[PriceData])
async def get_price_history(limit: int = 50):
    async with AsyncSessionLocal() as session:
        repo = SnapshotRepository(session)
        return await repo.list_latest(limit=limit, analyzed=True)
