"""
Prompts for the LLM market price analyzer.
"""

PRICE_ANALYSIS_PROMPT = """
You are a pricing data analyzer for Language Models (LLMs).
Your task is to extract and structure pricing information from the provided content.

Source: {source}

Raw Content:
{content}

Instructions:
1. Identify all LLM models mentioned in the content
2. Extract their pricing details
3. Format the information consistently

Required format for each model:
- Model name and version
- Input cost (per 1K tokens)
- Output cost (per 1K tokens)
- Context window size (if mentioned)
- Any usage limits or special conditions

Return a JSON array where each item has:
{{
  "model_info": "Model name and version",
  "pricing": "Formatted pricing details",
  "timestamp": "{timestamp}",
  "source": "{source}"
}}

Important:
- Use consistent price formatting (e.g., "$0.01/1K tokens")
- Include both input and output costs when available
- Return ONLY valid JSON, no markdown or other formatting
- Focus on current pricing, ignore historical prices
- Include any relevant usage tiers or volume discounts

Example format:
[{{
  "model_info": "GPT-4 Turbo",
  "pricing": "Input: $0.01/1K tokens, Output: $0.03/1K tokens, Context: 128K tokens",
  "timestamp": "{timestamp}",
  "source": "{source}"
}}]
"""


def build_analysis_prompt(source: str, content: str, timestamp: str) -> str:
    """Fills the analysis prompt for one scraped page."""
    return PRICE_ANALYSIS_PROMPT.format(
        source=source, content=content, timestamp=timestamp
    )
