import logging
import unittest
from unittest.mock import MagicMock, AsyncMock, patch
import tenacity
from google.api_core.exceptions import ServerError, ResourceExhausted

from ragcalc.market.llm import LLMHandler, get_llm

# Configure logging
logging.basicConfig(level=logging.INFO)

class TestLLMHandlerRetry(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Shorten waits so the retry tests run quickly
        self.original_wait = LLMHandler.acomplete.retry.wait
        LLMHandler.acomplete.retry.wait = tenacity.wait_fixed(0.01)

    def tearDown(self):
        LLMHandler.acomplete.retry.wait = self.original_wait

    async def test_retry_on_503(self):
        mock_llm = MagicMock()
        mock_llm.acomplete = AsyncMock()
        mock_llm.model = "test-model"

        # Fail with 503 twice then succeed
        mock_llm.acomplete.side_effect = [
            ServerError("Model overloaded"),
            ServerError("Model overloaded"),
            MagicMock(text="Success response")
        ]

        llm_handler = LLMHandler(mock_llm)
        response = await llm_handler.acomplete("test prompt")

        self.assertEqual(response.text, "Success response")
        self.assertEqual(mock_llm.acomplete.call_count, 3)

    async def test_retry_on_rate_limit(self):
        mock_llm = MagicMock()
        mock_llm.acomplete = AsyncMock(
            side_effect=[ResourceExhausted("Quota exceeded"), MagicMock(text="[]")]
        )

        response = await LLMHandler(mock_llm).acomplete("test prompt")

        self.assertEqual(response.text, "[]")
        self.assertEqual(mock_llm.acomplete.call_count, 2)

    async def test_exhaustion_on_too_many_failures(self):
        mock_llm = MagicMock()
        mock_llm.acomplete = AsyncMock()
        mock_llm.model = "test-model"

        # Fail indefinitely
        mock_llm.acomplete.side_effect = ServerError("Persistent overload")

        llm_handler = LLMHandler(mock_llm)

        with self.assertRaises(tenacity.RetryError):
            await llm_handler.acomplete("test prompt")

        self.assertEqual(mock_llm.acomplete.call_count, 5) # Default is 5 attempts

    async def test_no_retry_on_other_errors(self):
        mock_llm = MagicMock()
        mock_llm.acomplete = AsyncMock(side_effect=ValueError("bad prompt"))

        with self.assertRaises(ValueError):
            await LLMHandler(mock_llm).acomplete("test prompt")

        self.assertEqual(mock_llm.acomplete.call_count, 1)

    def test_proxies_attributes(self):
        mock_llm = MagicMock()
        mock_llm.model = "models/gemini-2.0-flash"
        mock_llm.temperature = 0.0

        handler = LLMHandler(mock_llm)

        self.assertEqual(handler.model, "models/gemini-2.0-flash")
        self.assertEqual(handler.temperature, 0.0)


class TestGetLLM(unittest.TestCase):
    def test_requires_api_key(self):
        with patch("ragcalc.market.llm.GEMINI_API_KEY", None):
            with self.assertRaises(ValueError):
                get_llm()

    def test_prefixes_model_name(self):
        with patch("ragcalc.market.llm.GoogleGenAI") as MockGenAI:
            handler = get_llm("gemini-2.0-flash", api_key="test-key", temperature=0.0)

        MockGenAI.assert_called_once_with(
            model="models/gemini-2.0-flash", api_key="test-key", temperature=0.0
        )
        self.assertIsInstance(handler, LLMHandler)

    def test_keeps_qualified_model_name(self):
        with patch("ragcalc.market.llm.GoogleGenAI") as MockGenAI:
            get_llm("models/gemini-1.5-pro", api_key="test-key")

        MockGenAI.assert_called_once_with(model="models/gemini-1.5-pro", api_key="test-key")


if __name__ == "__main__":
    unittest.main()
