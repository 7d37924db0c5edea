"""
Gemini-based structuring of scraped LLM pricing pages.
Turns raw page text into one PriceData record per model.
"""

import json
import logging
import re
from typing import Callable, List, Optional

from pydantic import ValidationError

from ragcalc.logging_utils import log_api_call
from ragcalc.market.llm import LLMHandler, get_llm
from ragcalc.market.models import AnalysisResult, PriceData
from ragcalc.market.prompts import build_analysis_prompt

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]

ITEM_ERROR_TEXT = "Error processing pricing information"
ANALYSIS_ERROR_TEXT = "Error analyzing pricing information"
PROMPT_ERROR_TEXT = "Error: Failed to process prompt"

_FENCE_OPEN = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"```\s*$")


def strip_json_fences(text: str) -> str:
    """Removes markdown code fences and trims to the outermost JSON array."""
    json_text = _FENCE_OPEN.sub("", text.strip())
    json_text = _FENCE_CLOSE.sub("", json_text).strip()

    if not json_text.startswith("["):
        start = json_text.find("[")
        if start != -1:
            json_text = json_text[start:]

    if not json_text.endswith("]"):
        end = json_text.rfind("]")
        if end != -1:
            json_text = json_text[: end + 1]

    return json_text


def parse_price_list(text: str) -> List[PriceData]:
    """
    Parses an LLM response into price records.
    Raises ValueError when the response is not JSON. A JSON value that is not
    an array yields no records, and malformed items are skipped.
    """
    data = json.loads(strip_json_fences(text))
    if not isinstance(data, list):
        logger.warning("Expected a JSON array of price records, got %s", type(data).__name__)
        return []

    records = []
    for item in data:
        try:
            records.append(PriceData.model_validate(item))
        except ValidationError as e:
            logger.warning("Skipping invalid price record %r: %s", item, e)
    return records


class PriceAnalyzer:
    """Asks a Gemini model to restructure each scraped page."""

    def __init__(
        self,
        llm: Optional[LLMHandler] = None,
        session_logger: Optional[logging.Logger] = None,
    ):
        self._llm = llm
        self.logger = session_logger or logger

    @property
    def llm(self) -> LLMHandler:
        if self._llm is None:
            self._llm = get_llm(temperature=0.0)
        return self._llm

    async def analyze_item(self, data: PriceData) -> tuple[List[PriceData], str]:
        """Analyzes one scraped page. Returns (records, prompt)."""
        prompt = build_analysis_prompt(data.source, data.pricing, data.timestamp)
        try:
            response = await self.llm.acomplete(prompt)
            log_api_call(
                self.logger,
                "gemini",
                "acomplete",
                {"source": data.source, "prompt_chars": len(prompt)},
                {"text": response.text[:2000]},
            )
            return parse_price_list(response.text), prompt
        # pylint: disable=broad-exception-caught
        except Exception as e:
            self.logger.error("Error processing response for %s: %s", data.source, e)
            return [
                PriceData(
                    model_info=data.model_info,
                    pricing=ITEM_ERROR_TEXT,
                    timestamp=data.timestamp,
                    source=data.source,
                )
            ], prompt

    async def analyze(
        self,
        scraped_data: List[PriceData],
        on_progress: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        """
        Analyzes every scraped page in order, reporting (provider, percent)
        progress. Returns the combined records and the last prompt used.
        """
        try:
            results: List[PriceData] = []
            last_prompt = ""
            total = len(scraped_data)

            for i, data in enumerate(scraped_data):
                if on_progress:
                    on_progress(data.model_info, i / total * 100)
                records, last_prompt = await self.analyze_item(data)
                results.extend(records)

            if on_progress:
                on_progress("", 100)
            return AnalysisResult(analyzed_data=results, used_prompt=last_prompt)
        # pylint: disable=broad-exception-caught
        except Exception as e:
            self.logger.error("Gemini analysis failed: %s", e)
            return AnalysisResult(
                analyzed_data=[
                    PriceData(
                        model_info=data.model_info,
                        pricing=ANALYSIS_ERROR_TEXT,
                        timestamp=data.timestamp,
                        source=data.source,
                    )
                    for data in scraped_data
                ],
                used_prompt=PROMPT_ERROR_TEXT,
            )
