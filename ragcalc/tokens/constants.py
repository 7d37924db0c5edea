"""
Default model prices, token multipliers and industry usage presets.
"""

from typing import Any

from ragcalc.tokens.models import IndustryPattern, ModelPrice, TokenMultipliers

# Prices are USD per million tokens
DEFAULT_MODELS: list[ModelPrice] = [
    ModelPrice(
        id="embedding-3",
        name="text-embedding-3-large",
        type="embedding",
        input_price=0.00013,
    ),
    ModelPrice(
        id="gpt-4", name="GPT-4", type="chat", input_price=0.03, output_price=0.06
    ),
    ModelPrice(
        id="gpt-3.5",
        name="GPT-3.5 Turbo",
        type="chat",
        input_price=0.0015,
        output_price=0.002,
    ),
]

DEFAULT_CHAT_MODEL_ID = "gpt-4"
DEFAULT_EMBEDDING_MODEL_ID = "embedding-3"

DEFAULT_TOKEN_MULTIPLIERS = TokenMultipliers()

# Corpus document types; audio and video only carry multipliers
DOCUMENT_TYPES = ("text", "excel", "ppt", "pdf", "word", "email", "image")
MEDIA_TYPES = ("image", "audio", "video")
# Formats that embed images alongside their text
IMAGE_BEARING_TYPES = ("excel", "ppt", "pdf")

# Average characters per document
DEFAULT_DOC_LENGTHS: dict[str, float] = {
    "text": 2000,
    "excel": 5000,
    "ppt": 3000,
    "pdf": 4000,
    "word": 3500,
    "email": 800,
}

TOKENS_PER_QUERY: dict[str, float] = {
    "input": 200,
    "context": 2000,
    "system_prompt": 300,
    "output_multiplier": 0.7,
}

DAYS_PER_MONTH = 30
TOKENS_PER_MILLION = 1_000_000

# Keys for persisted estimator settings
STORAGE_KEYS = {
    "models": "token_calculator_models",
    "selected_chat": "token_calculator_selected_chat",
    "selected_embedding": "token_calculator_selected_embedding",
    "token_multipliers": "token_calculator_multipliers",
}

_INDUSTRY_TABLE: dict[str, dict[str, Any]] = {
    "bank": {
        "label": "Bank",
        "description": (
            "Knowledge bases centre on financial product documents, compliance "
            "files and reports. Excel and PDF dominate and per-user volume is high."
        ),
        "monthly_growth_rate": 0.15,
        "queries_per_active_user": 5,
        "turns_per_query": 6,
        "size_patterns": {
            "small": {
                "monthly_growth_rate": 0.12,
                "queries_per_active_user": 4,
                "turns_per_query": 5,
                "team_size": {"total": 800, "active_ratio": 0.7},
                "documents_per_user": {
                    "excel": 15, "pdf": 12, "word": 8, "text": 5,
                    "ppt": 3, "email": 20, "image": 2,
                },
            },
            "medium": {
                "monthly_growth_rate": 0.15,
                "queries_per_active_user": 5,
                "turns_per_query": 6,
                "team_size": {"total": 2000, "active_ratio": 0.7},
                "documents_per_user": {
                    "excel": 18, "pdf": 15, "word": 10, "text": 6,
                    "ppt": 4, "email": 25, "image": 3,
                },
            },
            "large": {
                "monthly_growth_rate": 0.18,
                "queries_per_active_user": 6,
                "turns_per_query": 7,
                "team_size": {"total": 5000, "active_ratio": 0.7},
                "documents_per_user": {
                    "excel": 20, "pdf": 18, "word": 12, "text": 8,
                    "ppt": 5, "email": 30, "image": 4,
                },
            },
        },
    },
    "tech": {
        "label": "Technology company",
        "description": (
            "Knowledge bases centre on technical, code and product design "
            "documents. Plain text and slides dominate."
        ),
        "monthly_growth_rate": 0.20,
        "queries_per_active_user": 8,
        "turns_per_query": 6,
        "size_patterns": {
            "small": {
                "monthly_growth_rate": 0.15,
                "queries_per_active_user": 6,
                "turns_per_query": 5,
                "team_size": {"total": 500, "active_ratio": 0.9},
                "documents_per_user": {
                    "text": 20, "ppt": 10, "pdf": 5, "word": 5,
                    "excel": 3, "email": 25, "image": 8,
                },
            },
            "medium": {
                "monthly_growth_rate": 0.18,
                "queries_per_active_user": 7,
                "turns_per_query": 6,
                "team_size": {"total": 1000, "active_ratio": 0.9},
                "documents_per_user": {
                    "text": 25, "ppt": 12, "pdf": 6, "word": 6,
                    "excel": 4, "email": 30, "image": 10,
                },
            },
            "large": {
                "monthly_growth_rate": 0.20,
                "queries_per_active_user": 8,
                "turns_per_query": 7,
                "team_size": {"total": 3000, "active_ratio": 0.9},
                "documents_per_user": {
                    "text": 30, "ppt": 15, "pdf": 8, "word": 8,
                    "excel": 5, "email": 35, "image": 12,
                },
            },
        },
    },
    "university": {
        "label": "University",
        "description": (
            "Knowledge bases centre on teaching material, research papers and "
            "administrative documents. Word and PDF dominate."
        ),
        "monthly_growth_rate": 0.10,
        "queries_per_active_user": 5,
        "turns_per_query": 5,
        "size_patterns": {
            "small": {
                "monthly_growth_rate": 0.08,
                "queries_per_active_user": 4,
                "turns_per_query": 4,
                "team_size": {"total": 500, "active_ratio": 0.6},
                "documents_per_user": {
                    "word": 15, "pdf": 12, "ppt": 8, "excel": 4,
                    "text": 6, "email": 15, "image": 5,
                },
            },
            "medium": {
                "monthly_growth_rate": 0.10,
                "queries_per_active_user": 5,
                "turns_per_query": 5,
                "team_size": {"total": 2000, "active_ratio": 0.6},
                "documents_per_user": {
                    "word": 18, "pdf": 15, "ppt": 10, "excel": 5,
                    "text": 8, "email": 20, "image": 6,
                },
            },
            "large": {
                "monthly_growth_rate": 0.12,
                "queries_per_active_user": 6,
                "turns_per_query": 6,
                "team_size": {"total": 5000, "active_ratio": 0.6},
                "documents_per_user": {
                    "word": 20, "pdf": 18, "ppt": 12, "excel": 6,
                    "text": 10, "email": 25, "image": 8,
                },
            },
        },
    },
    "k12": {
        "label": "K-12 school",
        "description": (
            "Knowledge bases centre on lesson plans, exams and homework. Word "
            "and slides dominate with moderate per-user volume."
        ),
        "monthly_growth_rate": 0.05,
        "queries_per_active_user": 3,
        "turns_per_query": 4,
        "size_patterns": {
            "small": {
                "monthly_growth_rate": 0.04,
                "queries_per_active_user": 2,
                "turns_per_query": 3,
                "team_size": {"total": 200, "active_ratio": 0.8},
                "documents_per_user": {
                    "word": 12, "ppt": 10, "pdf": 5, "excel": 3,
                    "text": 4, "email": 8, "image": 6,
                },
            },
            "medium": {
                "monthly_growth_rate": 0.05,
                "queries_per_active_user": 3,
                "turns_per_query": 4,
                "team_size": {"total": 500, "active_ratio": 0.8},
                "documents_per_user": {
                    "word": 15, "ppt": 12, "pdf": 6, "excel": 4,
                    "text": 5, "email": 10, "image": 8,
                },
            },
            "large": {
                "monthly_growth_rate": 0.06,
                "queries_per_active_user": 4,
                "turns_per_query": 5,
                "team_size": {"total": 1000, "active_ratio": 0.8},
                "documents_per_user": {
                    "word": 18, "ppt": 15, "pdf": 8, "excel": 5,
                    "text": 6, "email": 12, "image": 10,
                },
            },
        },
    },
}

INDUSTRY_PATTERNS: dict[str, IndustryPattern] = {
    key: IndustryPattern(**value) for key, value in _INDUSTRY_TABLE.items()
}

DEFAULT_INDUSTRY = "university"


def get_industry(industry: str) -> IndustryPattern:
    """Looks up an industry preset, raising ValueError for unknown keys."""
    pattern = INDUSTRY_PATTERNS.get(industry)
    if pattern is None:
        raise ValueError(
            f"Unknown industry '{industry}'. Expected one of: "
            f"{', '.join(INDUSTRY_PATTERNS)}"
        )
    return pattern
