from fastapi.testclient import TestClient

from ragcalc.api import app

from ragcalc.market.models import AnalysisResult, PriceData
from ragcalc.pricing.currency import DEFAULT_EXCHANGE_RATES
from unittest.mock import AsyncMock, patch
import pytest

RAW = PriceData(
    model_info="OpenAI Raw Content",
    pricing="GPT-4o $2.50",
    timestamp="2026-01-01T00:00:00.000Z",
    source="https://openai.com/pricing",
)


@pytest.fixture
def mock_settings_repo():
    with patch("ragcalc.api.SettingsRepository") as MockRepo:
        mock_instance = AsyncMock()
        mock_instance.get.return_value = None
        MockRepo.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def mock_snapshot_repo():
    with patch("ragcalc.api.SnapshotRepository") as MockRepo:
        mock_instance = AsyncMock()
        mock_instance.list_latest.return_value = []
        MockRepo.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def client(mock_settings_repo, mock_snapshot_repo):
    # 'async with AsyncSessionLocal() as session' enters the context, so hand back a mock session
    with patch("ragcalc.api.AsyncSessionLocal") as MockSession:
        MockSession.return_value.__aenter__.return_value = AsyncMock()
        with patch(
            "ragcalc.api.fetch_exchange_rates",
            new=AsyncMock(return_value=dict(DEFAULT_EXCHANGE_RATES)),
        ):
            # Mock init_db to prevent real database initialization
            with patch("ragcalc.api.init_db", new_callable=AsyncMock):
                with TestClient(app) as test_client:
                    yield test_client


def test_get_tier(client):
    response = client.get("/pricing/tier")
    assert response.status_code == 200
    data = response.json()
    assert data["tier"]["base_price"] == 139
    assert data["increments"]["team_member"] == 20


def test_get_features_localized(client):
    response = client.get("/pricing/features", params={"lang": "zh"})
    assert response.status_code == 200
    assert response.json()[0]["name"] == "单点登录集成"


def test_get_currencies(client):
    response = client.get("/pricing/currencies")
    assert response.status_code == 200
    codes = {c["code"]: c["rate"] for c in response.json()}
    assert codes["JPY"] == 150.25
    assert set(codes) == {"USD", "EUR", "GBP", "JPY", "CNY"}


def test_quote(client):
    response = client.post(
        "/pricing/quote",
        json={
            "users": 15,
            "message_credits": 12500,
            "vector_storage": 2,
            "storage_unit": "GB",
            "selected_features": ["sso", "agent"],
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["price"] == 587
    assert data["breakdown"]["total"] == 587
    assert data["currency"] == "USD"
    assert data["formatted"]["total"] == "$587.00"
    assert data["warnings"] == {}


def test_quote_in_language_currency(client):
    response = client.post("/pricing/quote", json={"language": "ja"})
    assert response.status_code == 200
    data = response.json()
    assert data["currency"] == "JPY"
    assert "users" in data["warnings"]


def test_quote_in_euros(client):
    response = client.post("/pricing/quote", json={"currency": "EUR", "users": 10})
    assert response.json()["formatted"]["total"] == "€127,88"


def test_quote_unsupported_currency(client):
    response = client.post("/pricing/quote", json={"currency": "XYZ"})
    assert response.status_code == 400


def test_quote_validation_error(client):
    response = client.post("/pricing/quote", json={"users": -1})
    assert response.status_code == 422


def test_validate_custom_charge(client):
    response = client.post(
        "/pricing/custom-charges/validate", json={"name": "", "price_increment": 0}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["valid"] is False
    assert set(data["errors"]) == {"name", "amount"}


def test_token_defaults(client):
    data = client.get("/tokens/defaults").json()
    assert data["multipliers"]["video"] == 800
    assert data["tokens_per_query"]["context"] == 2000
    assert [m["id"] for m in data["models"]] == ["embedding-3", "gpt-4", "gpt-3.5"]


def test_industries(client):
    data = client.get("/tokens/industries").json()
    assert set(data) == {"bank", "tech", "university", "k12"}


def test_template(client):
    response = client.post(
        "/tokens/template",
        json={
            "industry": "tech",
            "size": "medium",
            "dimensions": {"team_size": {"total": 10, "active_users": 8}},
        },
    )
    assert response.status_code == 200
    assert response.json()["dimensions"]["selected_template"] == "tech"


def test_template_unknown_industry(client):
    response = client.post("/tokens/template", json={"industry": "shipping"})
    assert response.status_code == 400


def test_document_tokens(client):
    response = client.post("/tokens/document", json={"doc_type": "image", "image_size": 2})
    assert response.status_code == 200
    assert response.json()["tokens"] == 600


def test_estimate(client):
    response = client.post(
        "/tokens/estimate",
        json={
            "dimensions": {
                "documents": {"text": 10},
                "avg_document_length": {"text": 1000},
                "team_size": {"total": 20, "active_users": 10},
            }
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["initial_usage"]["embedding"] == 15000
    assert data["monthly_usage"]["chat_input"] == 18_750_000


def test_estimate_unknown_model(client):
    response = client.post("/tokens/estimate", json={"selected_chat_model_id": "missing"})
    assert response.status_code == 400


def test_get_missing_setting(client):
    response = client.get("/settings/missing")
    assert response.status_code == 404


def test_put_and_get_setting(client, mock_settings_repo):
    response = client.put("/settings/language", json={"value": "ja"})
    assert response.status_code == 200
    mock_settings_repo.set.assert_awaited_once_with("language", "ja")

    mock_settings_repo.get.return_value = "ja"
    assert client.get("/settings/language").json() == {"value": "ja"}


def test_get_prices(client):
    with patch("ragcalc.api.scraper") as mock_scraper:
        mock_scraper.scrape_all = AsyncMock(return_value=[RAW])
        response = client.get("/api/prices")
    assert response.status_code == 200
    assert response.json()[0]["model_info"] == "OpenAI Raw Content"


def test_get_prices_failure(client):
    with patch("ragcalc.api.scraper") as mock_scraper:
        mock_scraper.scrape_all = AsyncMock(side_effect=RuntimeError("no browser"))
        response = client.get("/api/prices")
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch pricing data"}


def test_analyze_prices_stores_results(client, mock_snapshot_repo):
    analyzed = PriceData(
        model_info="GPT-4o",
        pricing="Input: $2.50 / 1M tokens",
        timestamp=RAW.timestamp,
        source=RAW.source,
    )
    with patch("ragcalc.api.scraper") as mock_scraper, patch(
        "ragcalc.api.analyzer"
    ) as mock_analyzer:
        mock_scraper.scrape_all = AsyncMock(return_value=[RAW])
        mock_analyzer.analyze = AsyncMock(
            return_value=AnalysisResult(analyzed_data=[analyzed], used_prompt="prompt")
        )
        response = client.post("/api/prices/analyze")

    assert response.status_code == 200
    assert response.json()["analyzed_data"][0]["model_info"] == "GPT-4o"
    mock_snapshot_repo.save_many.assert_awaited_once_with([analyzed], analyzed=True)


def test_price_history(client, mock_snapshot_repo):
    mock_snapshot_repo.list_latest.return_value = [RAW]
    response = client.get("/api/prices/history", params={"limit": 5})
    assert response.status_code == 200
    assert len(response.json()) == 1
    mock_snapshot_repo.list_latest.assert_awaited_once_with(limit=5, analyzed=True)
