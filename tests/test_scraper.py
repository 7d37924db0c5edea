from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ragcalc.market.models import ScrapingConfig
from ragcalc.market.scraper import LLMPriceScraper, extract_page_text

PAGE_HTML = """
<html>
  <head><style>.x { color: red; }</style></head>
  <body>
    <nav>Products Pricing Docs</nav>
    <div class="cookie-banner">We use cookies</div>
    <main><h1>API Pricing</h1><p>GPT-4o: $2.50 / 1M input tokens</p></main>
    <script>window.track()</script>
    <footer>Copyright</footer>
  </body>
</html>
"""

OPENAI = ScrapingConfig(
    name="OpenAI",
    url="https://openai.com/pricing",
    wait_for_selector=".pricing-module",
    wait_time=5000,
)


def crawl_result(success=True, html=PAGE_HTML, error_message=None):
    result = MagicMock()
    result.success = success
    result.html = html
    result.status_code = 200 if success else None
    result.error_message = error_message
    result.screenshot = None
    return result


def test_extract_page_text_strips_boilerplate():
    text = extract_page_text(PAGE_HTML)
    assert "API Pricing" in text
    assert "GPT-4o: $2.50 / 1M input tokens" in text
    assert "Products" not in text
    assert "cookies" not in text
    assert "Copyright" not in text
    assert "track" not in text


def test_extract_page_text_handles_empty_html():
    assert extract_page_text("") == ""


@pytest.mark.asyncio
async def test_scrape_one_returns_raw_content():
    crawler = MagicMock()
    crawler.arun = AsyncMock(return_value=crawl_result())

    record = await LLMPriceScraper(configs=[OPENAI]).scrape_one(crawler, OPENAI)

    assert record.model_info == "OpenAI Raw Content"
    assert record.source == "https://openai.com/pricing"
    assert "GPT-4o" in record.pricing
    assert record.timestamp.endswith("Z")


@pytest.mark.asyncio
async def test_scrape_one_retries_without_selector_wait():
    crawler = MagicMock()
    crawler.arun = AsyncMock(
        side_effect=[
            crawl_result(success=False, html="", error_message="Wait condition failed"),
            crawl_result(),
        ]
    )

    record = await LLMPriceScraper(configs=[OPENAI]).scrape_one(crawler, OPENAI)

    assert record.model_info == "OpenAI Raw Content"
    assert crawler.arun.call_count == 2
    retry_config = crawler.arun.call_args_list[1].kwargs["config"]
    assert not retry_config.wait_for


@pytest.mark.asyncio
async def test_scrape_one_returns_error_record():
    crawler = MagicMock()
    crawler.arun = AsyncMock(side_effect=RuntimeError("browser crashed"))

    record = await LLMPriceScraper(configs=[OPENAI]).scrape_one(crawler, OPENAI)

    assert record.model_info == "OpenAI Error"
    assert record.pricing == "Error fetching content: browser crashed"


@pytest.mark.asyncio
async def test_scrape_all_visits_every_provider_in_order():
    configs = [
        OPENAI,
        ScrapingConfig(name="Anthropic", url="https://www.anthropic.com/pricing"),
    ]
    crawler = MagicMock()
    crawler.arun = AsyncMock(return_value=crawl_result())

    with patch("ragcalc.market.scraper.AsyncWebCrawler") as MockCrawler:
        MockCrawler.return_value.__aenter__.return_value = crawler
        records = await LLMPriceScraper(configs=configs).scrape_all()

    assert [r.model_info for r in records] == [
        "OpenAI Raw Content",
        "Anthropic Raw Content",
    ]
    assert MockCrawler.call_count == 1
