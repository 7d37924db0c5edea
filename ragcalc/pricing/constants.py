"""
Pricing configuration for the Enterprise RAG plan.
Base tier quotas, overage increments and the additional feature catalog.
"""

from typing import Any

from ragcalc.pricing.models import AdditionalFeature, PricingTier

# Prices in USD per month
BASE_TIER = PricingTier(
    name="Enterprise",
    base_price=139,
    message_credits=10000,
    team_members=10,
    build_apps=100,
    vector_storage=1024,  # MB
    documents_quota=1000,
    annotation_quota=5000,
    custom_tools=20,
)

PRICE_INCREMENTS: dict[str, float] = {
    "team_member": 20,  # per user above the tier
    "message_credits": 10,  # per started 1,000 credits above the tier
    "vector_storage": 8,  # per started 100 MB above the tier
    "documents_quota": 15,
    "annotation_quota": 20,
    "custom_tools": 40,
}

MESSAGE_CREDIT_BLOCK = 1000
VECTOR_STORAGE_BLOCK_MB = 100
MB_PER_GB = 1024

# Recommended minimums surfaced as input hints
MINIMUMS: dict[str, float] = {
    "users": BASE_TIER.team_members,
    "message_credits": 5000,
    "vector_storage_mb": BASE_TIER.vector_storage,
}

DEFAULT_YEARLY_DISCOUNT = 0.2

SUPPORTED_LANGUAGES = ("en", "zh", "ja")

_FEATURE_CATALOG: list[dict[str, Any]] = [
    {
        "id": "sso",
        "name": {
            "en": "SSO Integration",
            "zh": "单点登录集成",
            "ja": "シングルサインオン統合",
        },
        "price_increment": 80,
        "category": "security",
        "description": {
            "en": "Single Sign-On with SAML and OIDC support",
            "zh": "支持 SAML 和 OIDC 的单点登录",
            "ja": "SAML と OIDC に対応したシングルサインオン",
        },
    },
    {
        "id": "multimodal",
        "name": {
            "en": "Multimodal RAG",
            "zh": "多模态 RAG",
            "ja": "マルチモーダル RAG",
        },
        "price_increment": 120,
        "category": "rag",
        "description": {
            "en": "Support for image, audio and video processing",
            "zh": "支持图像、音频和视频处理",
            "ja": "画像、音声、動画処理に対応",
        },
    },
    {
        "id": "agent",
        "name": {
            "en": "Agent Mode",
            "zh": "智能代理模式",
            "ja": "エージェントモード",
        },
        "price_increment": 150,
        "category": "rag",
        "description": {
            "en": "Advanced autonomous agent capabilities",
            "zh": "高级自主代理功能",
            "ja": "高度な自律エージェント機能",
        },
    },
    {
        "id": "workflow",
        "name": {
            "en": "Workflow Automation",
            "zh": "工作流自动化",
            "ja": "ワークフロー自動化",
        },
        "price_increment": 100,
        "category": "integration",
        "description": {
            "en": "Custom workflow automation tools",
            "zh": "自定义工作流自动化工具",
            "ja": "カスタムワークフロー自動化ツール",
        },
    },
    {
        "id": "priority",
        "name": {
            "en": "Priority Support",
            "zh": "优先支持服务",
            "ja": "プライオリティサポート",
        },
        "price_increment": 60,
        "category": "support",
        "description": {
            "en": "24/7 priority support with dedicated account manager",
            "zh": "24/7 优先支持服务，配备专属客户经理",
            "ja": "24時間365日の優先サポートと専任アカウントマネージャー",
        },
    },
]

ADDITIONAL_FEATURES: list[AdditionalFeature] = [
    AdditionalFeature(**feature) for feature in _FEATURE_CATALOG
]


def get_feature(feature_id: str) -> AdditionalFeature | None:
    """Looks up a catalog feature by id."""
    return next((f for f in ADDITIONAL_FEATURES if f.id == feature_id), None)
