"""
Token and cost estimation for a RAG deployment.

Initial usage is the embedding cost of the existing corpus. Monthly usage is
the embedding cost of corpus growth plus chat tokens from active users.
Model prices are USD per million tokens.
"""

import logging
import math
from typing import Dict, Iterable, Optional, Tuple

from ragcalc.tokens.constants import (
    DAYS_PER_MONTH,
    DEFAULT_DOC_LENGTHS,
    DEFAULT_MODELS,
    DOCUMENT_TYPES,
    IMAGE_BEARING_TYPES,
    TOKENS_PER_MILLION,
    TOKENS_PER_QUERY,
    get_industry,
)
from ragcalc.tokens.models import (
    CostResult,
    EstimationRequest,
    EstimationResult,
    InitialCost,
    InitialUsage,
    ModelPrice,
    ModelPrices,
    MonthlyCost,
    MonthlyPattern,
    MonthlyUsage,
    SizeCategory,
    TeamSize,
    TemplateResult,
    TokenMultipliers,
    UsageDimensions,
)

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for non-negative values, unlike round()."""
    return int(math.floor(value + 0.5))


def calculate_tokens_for_document(
    doc_type: str,
    multipliers: TokenMultipliers,
    length: float = 0,
    image_count: float = 0,
    image_size: float = 1,
    duration: float = 0,
    complexity: float = 1,
) -> float:
    """
    Tokens for a single document.

    - image: megapixels * image multiplier
    - audio / video: minutes * media multiplier
    - excel / ppt / pdf: text tokens plus tokens for embedded images
    - anything else: characters * multiplier * complexity
    """
    if doc_type == "image":
        return image_size * multipliers.image
    if doc_type in ("audio", "video"):
        return duration * multipliers.get(doc_type)
    text_tokens = length * multipliers.get(doc_type) * complexity
    if doc_type in IMAGE_BEARING_TYPES:
        return text_tokens + image_count * image_size * multipliers.image
    return text_tokens


def calculate_document_counts(
    team_size: float, documents_per_user: Dict[str, float]
) -> Dict[str, float]:
    """Corpus size per document type for a team."""
    return {
        doc_type: round_half_up(per_user * team_size)
        for doc_type, per_user in documents_per_user.items()
    }


def _tokens_per_document(
    doc_type: str, dimensions: UsageDimensions, multipliers: TokenMultipliers
) -> float:
    return calculate_tokens_for_document(
        doc_type,
        multipliers,
        length=dimensions.avg_document_length.get(doc_type, 0),
        image_count=dimensions.avg_image_count,
        image_size=dimensions.avg_image_size,
    )


def calculate_initial_usage(
    dimensions: UsageDimensions, multipliers: TokenMultipliers
) -> InitialUsage:
    """Embedding tokens for the existing corpus."""
    total = 0.0
    for doc_type, count in dimensions.documents.items():
        total += count * _tokens_per_document(doc_type, dimensions, multipliers)

    return InitialUsage(
        embedding=total,
        documents=dict(dimensions.documents),
        avg_document_length=dict(dimensions.avg_document_length),
        multipliers=multipliers.model_dump(),
    )


def calculate_monthly_usage(
    dimensions: UsageDimensions,
    pattern: MonthlyPattern,
    multipliers: TokenMultipliers,
) -> MonthlyUsage:
    """
    Monthly embedding tokens for new documents plus chat tokens.

    New documents per type are round(count * growth rate). Each active user
    runs `queries_per_active_user` queries a day for 30 days; every turn of a
    query sends input, retrieved context and the system prompt, and the reply
    is 0.7x the input tokens.
    """
    embedding = 0.0
    for doc_type, count in dimensions.documents.items():
        if not count:
            continue
        new_count = round_half_up(count * pattern.monthly_growth_rate)
        embedding += new_count * _tokens_per_document(doc_type, dimensions, multipliers)

    monthly_queries = (
        dimensions.team_size.active_users
        * pattern.queries_per_active_user
        * DAYS_PER_MONTH
    )
    tokens_per_conversation = (
        TOKENS_PER_QUERY["input"]
        + TOKENS_PER_QUERY["context"]
        + TOKENS_PER_QUERY["system_prompt"]
    ) * pattern.turns_per_query

    chat_input = monthly_queries * tokens_per_conversation
    chat_output = chat_input * TOKENS_PER_QUERY["output_multiplier"]

    try:
        reference = get_industry(dimensions.selected_template).monthly_pattern()
    except ValueError:
        reference = pattern

    return MonthlyUsage(
        embedding=embedding,
        chat_input=chat_input,
        chat_output=chat_output,
        pattern=reference,
    )


def resolve_model_prices(
    embedding_model: ModelPrice, chat_model: ModelPrice
) -> ModelPrices:
    """Per-million prices; chat output falls back to the chat input price."""
    chat_input = chat_model.input_price or 0
    return ModelPrices(
        embedding=embedding_model.input_price or 0,
        chat_input=chat_input,
        chat_output=chat_model.output_price or chat_input,
    )


def _cost(tokens: float, price_per_million: float) -> float:
    return tokens / TOKENS_PER_MILLION * price_per_million


def calculate_cost(
    initial: InitialUsage,
    monthly: MonthlyUsage,
    embedding_model: ModelPrice,
    chat_model: ModelPrice,
) -> CostResult:
    """Dollar cost of initial and monthly token usage."""
    prices = resolve_model_prices(embedding_model, chat_model)

    initial_embedding = _cost(initial.embedding, prices.embedding)
    monthly_embedding = _cost(monthly.embedding, prices.embedding)
    chat_input = _cost(monthly.chat_input, prices.chat_input)
    chat_output = _cost(monthly.chat_output, prices.chat_output)

    return CostResult(
        initial=InitialCost(embedding=initial_embedding, total=initial_embedding),
        monthly=MonthlyCost(
            embedding=monthly_embedding,
            chat_input=chat_input,
            chat_output=chat_output,
            total=monthly_embedding + chat_input + chat_output,
        ),
    )


def find_model(models: Iterable[ModelPrice], model_id: str) -> Optional[ModelPrice]:
    return next((m for m in models if m.id == model_id), None)


def estimate(request: EstimationRequest) -> EstimationResult:
    """Runs the full estimate for the selected embedding and chat models."""
    models = request.models or DEFAULT_MODELS
    embedding_model = find_model(models, request.selected_embedding_model_id)
    chat_model = find_model(models, request.selected_chat_model_id)

    if not embedding_model or not chat_model:
        logger.error(
            "Selected models not found (embedding=%s, chat=%s)",
            request.selected_embedding_model_id,
            request.selected_chat_model_id,
        )
        raise ValueError("Selected models not found")

    initial = calculate_initial_usage(request.dimensions, request.multipliers)
    monthly = calculate_monthly_usage(
        request.dimensions, request.pattern, request.multipliers
    )
    costs = calculate_cost(initial, monthly, embedding_model, chat_model)

    return EstimationResult(
        initial_usage=initial,
        monthly_usage=monthly,
        costs=costs,
        model_prices=resolve_model_prices(embedding_model, chat_model),
    )


def apply_template(
    dimensions: UsageDimensions, industry: str, size: SizeCategory = "small"
) -> TemplateResult:
    """
    Switches the estimate to an industry preset. Document counts are derived
    from the current team size, average lengths reset to defaults and image
    settings are kept.
    """
    pattern = get_industry(industry)
    size_pattern = pattern.size_patterns[size]

    updated = dimensions.model_copy(
        update={
            "selected_template": industry,
            "documents": calculate_document_counts(
                dimensions.team_size.total, size_pattern.documents_per_user
            ),
            "avg_document_length": dict(DEFAULT_DOC_LENGTHS),
        }
    )
    return TemplateResult(dimensions=updated, pattern=pattern.monthly_pattern())


def apply_team_size(
    dimensions: UsageDimensions, team_size: TeamSize, size: SizeCategory = "small"
) -> UsageDimensions:
    """Updates the team size and re-derives document counts from the preset."""
    pattern = get_industry(dimensions.selected_template)
    size_pattern = pattern.size_patterns[size]
    return dimensions.model_copy(
        update={
            "team_size": team_size,
            "documents": calculate_document_counts(
                team_size.total, size_pattern.documents_per_user
            ),
        }
    )


def reconcile_model_selection(
    models: list[ModelPrice], chat_model_id: str, embedding_model_id: str
) -> Tuple[str, str]:
    """
    Keeps the selected model ids valid after the model list changed. A removed
    selection falls back to the first model of the same type.
    """
    chat_models = [m for m in models if m.type == "chat"]
    embedding_models = [m for m in models if m.type == "embedding"]

    if not find_model(models, chat_model_id) and chat_models:
        chat_model_id = chat_models[0].id
    if not find_model(models, embedding_model_id) and embedding_models:
        embedding_model_id = embedding_models[0].id

    return chat_model_id, embedding_model_id


def empty_dimensions(template: str = "university") -> UsageDimensions:
    """Blank corpus inputs for every document type."""
    return UsageDimensions(
        documents={doc_type: 0 for doc_type in DOCUMENT_TYPES},
        avg_document_length={doc_type: 0 for doc_type in DEFAULT_DOC_LENGTHS},
        selected_template=template,
    )
