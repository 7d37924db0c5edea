"""
LLM access for the price analyzer.
Provides a configured LlamaIndex Google GenAI instance with retries.
"""

import logging

from llama_index.llms.google_genai import GoogleGenAI
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
from google.api_core.exceptions import ResourceExhausted, ServerError

from ragcalc.config import DEFAULT_LLM_MODEL, GEMINI_API_KEY

logger = logging.getLogger(__name__)


class LLMHandler:
    """Wrapper for GoogleGenAI to add retries on rate limits and server overloads."""

    def __init__(self, llm: GoogleGenAI):
        self.llm = llm

    @property
    def model(self):
        return self.llm.model

    @retry(
        retry=retry_if_exception_type((ResourceExhausted, ServerError)),
        wait=wait_exponential(multiplier=1, min=4, max=20),
        stop=stop_after_attempt(5),
        before_sleep=lambda retry_state: logger.warning(
            "LLM error during acomplete: %s. Retrying in %ss... (Attempt %d)",
            retry_state.outcome.exception(),
            retry_state.next_action.sleep,
            retry_state.attempt_number,
        ),
    )
    async def acomplete(self, *args, **kwargs):
        return await self.llm.acomplete(*args, **kwargs)

    def __getattr__(self, name):
        """Proxy all other attributes to the underlying LLM."""
        return getattr(self.llm, name)


def get_llm(
    model_name: str | None = None,
    api_key: str | None = None,
    temperature: float | None = None,
) -> LLMHandler:
    """
    Returns a configured LLMHandler instance (wrapped GoogleGenAI).
    The API key defaults to GEMINI_API_KEY or GOOGLE_API_KEY.
    """
    model_name = model_name or DEFAULT_LLM_MODEL
    api_key = api_key or GEMINI_API_KEY
    if not api_key:
        raise ValueError(
            "GEMINI_API_KEY or GOOGLE_API_KEY is not set in the environment"
        )

    if not (model_name.startswith("models/") or model_name.startswith("tunedModels/")):
        model_name = f"models/{model_name}"

    kwargs = {}
    if temperature is not None:
        kwargs["temperature"] = temperature

    llm = GoogleGenAI(model=model_name, api_key=api_key, **kwargs)
    return LLMHandler(llm)
