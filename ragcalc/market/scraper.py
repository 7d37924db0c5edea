"""
Headless-browser scraping of public LLM pricing pages using Crawl4AI.
Providers are visited one after another in a single browser session.
"""

import asyncio
import base64
import logging
import os
from typing import List, Optional

from bs4 import BeautifulSoup
from crawl4ai import (
    AsyncWebCrawler,
    BrowserConfig,
    CacheMode,
    CrawlerRunConfig,
)

from ragcalc.config import LOG_DIR, SCRAPER_HEADLESS
from ragcalc.logging_utils import log_api_call
from ragcalc.market.models import PriceData, ScrapingConfig, utc_timestamp

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)

DEFAULT_SCRAPING_CONFIGS: List[ScrapingConfig] = [
    ScrapingConfig(
        name="OpenAI",
        url="https://openai.com/pricing",
        wait_for_selector=".pricing-module",
        wait_time=5000,
    ),
    ScrapingConfig(
        name="Anthropic",
        url="https://www.anthropic.com/pricing#anthropic-api",
        wait_for_selector="body",
        wait_time=3000,
    ),
]

# Page chrome stripped before reading the visible text
BOILERPLATE_SELECTORS = [
    "script",
    "style",
    "footer",
    "header",
    "nav",
    '[role="navigation"]',
    ".cookie-banner",
    "#cookie-banner",
    ".newsletter-signup",
    ".social-links",
]

NAVIGATION_TIMEOUT_MS = 30000
SELECTOR_TIMEOUT_MS = 10000


def extract_page_text(html: str) -> str:
    """Removes boilerplate elements and returns the page's visible text."""
    soup = BeautifulSoup(html or "", "html.parser")
    for selector in BOILERPLATE_SELECTORS:
        for element in soup.select(selector):
            element.decompose()
    root = soup.body or soup
    return root.get_text("\n", strip=True)


class LLMPriceScraper:
    """Scrapes raw pricing text from each configured provider page."""

    def __init__(
        self,
        configs: Optional[List[ScrapingConfig]] = None,
        headless: bool = SCRAPER_HEADLESS,
        debug_screenshots: bool = False,
        session_logger: Optional[logging.Logger] = None,
    ):
        self.configs = configs if configs is not None else DEFAULT_SCRAPING_CONFIGS
        self.debug_screenshots = debug_screenshots
        self.logger = session_logger or logger
        self.browser_config = BrowserConfig(
            headless=headless,
            verbose=False,
            user_agent=USER_AGENT,
            viewport_width=1920,
            viewport_height=1080,
            headers={
                "Accept-Language": "en-US,en;q=0.9",
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            },
            extra_args=[
                "--no-sandbox",
                "--disable-setuid-sandbox",
                "--disable-web-security",
                "--disable-features=IsolateOrigins,site-per-process",
            ],
            text_mode=True,  # skip images and media
        )

    def _run_config(self, config: ScrapingConfig, wait_for: bool = True) -> CrawlerRunConfig:
        kwargs = {}
        if wait_for and config.wait_for_selector:
            kwargs["wait_for"] = f"css:{config.wait_for_selector}"
            kwargs["wait_for_timeout"] = SELECTOR_TIMEOUT_MS
        return CrawlerRunConfig(
            cache_mode=CacheMode.BYPASS,
            wait_until="networkidle",
            page_timeout=NAVIGATION_TIMEOUT_MS,
            delay_before_return_html=config.wait_time / 1000,
            screenshot=self.debug_screenshots,
            **kwargs,
        )

    def _save_screenshot(self, config: ScrapingConfig, screenshot: str):
        os.makedirs(LOG_DIR, exist_ok=True)
        path = os.path.join(LOG_DIR, f"debug-{config.name.lower()}.png")
        with open(path, "wb") as f:
            f.write(base64.b64decode(screenshot))
        self.logger.info("Saved debug screenshot to %s", path)

    async def scrape_one(self, crawler: AsyncWebCrawler, config: ScrapingConfig) -> PriceData:
        """Scrapes one provider. Failures become an error record, never an exception."""
        try:
            self.logger.info("Starting to scrape %s from %s...", config.name, config.url)
            result = await crawler.arun(url=config.url, config=self._run_config(config))

            if not result.success and config.wait_for_selector not in ("", "body"):
                # A missing selector is not fatal; read the page as loaded
                self.logger.warning(
                    "Selector wait failed for %s: %s", config.name, result.error_message
                )
                result = await crawler.arun(
                    url=config.url, config=self._run_config(config, wait_for=False)
                )

            log_api_call(
                self.logger,
                "crawl4ai",
                "scrape",
                {"url": config.url},
                {"success": result.success, "status_code": result.status_code},
            )

            if not result.success:
                raise RuntimeError(result.error_message or "crawl failed")

            page_text = extract_page_text(result.html)
            self.logger.info(
                "Content extracted for %s, length: %d", config.name, len(page_text)
            )

            if self.debug_screenshots and result.screenshot:
                self._save_screenshot(config, result.screenshot)

            return PriceData(
                model_info=f"{config.name} Raw Content",
                pricing=page_text,
                timestamp=utc_timestamp(),
                source=config.url,
            )
        # pylint: disable=broad-exception-caught
        except Exception as e:
            self.logger.error("Error scraping %s: %s", config.name, e)
            return PriceData(
                model_info=f"{config.name} Error",
                pricing=f"Error fetching content: {e}",
                timestamp=utc_timestamp(),
                source=config.url,
            )

    async def scrape_all(self) -> List[PriceData]:
        """Scrapes every configured provider sequentially in one browser."""
        self.logger.info("Starting price scraping...")
        results: List[PriceData] = []

        async with AsyncWebCrawler(config=self.browser_config) as crawler:
            for config in self.configs:
                results.append(await self.scrape_one(crawler, config))

        self.logger.info("Scraping completed with %d results", len(results))
        return results


def scrape_prices_sync(configs: Optional[List[ScrapingConfig]] = None) -> List[PriceData]:
    """Blocking helper for callers without an event loop (e.g. Streamlit)."""
    return asyncio.run(LLMPriceScraper(configs=configs).scrape_all())
