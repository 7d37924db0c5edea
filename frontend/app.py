"""
Frontend application for the RAG Pricing Calculator using Streamlit.
Quotes the Enterprise plan, estimates token costs and fetches live LLM prices.
"""

import asyncio

import streamlit as st
from dotenv import load_dotenv

from frontend.ui_utils import (
    load_saved_settings,
    render_breakdown_table,
    render_dimensions_editor,
    render_estimate,
    render_export_tools,
    render_model_editor,
    render_multiplier_editor,
    render_price_records,
    save_settings,
)
from ragcalc.market.analyzer import PriceAnalyzer
from ragcalc.market.scraper import scrape_prices_sync
from ragcalc.pricing.calculator import (
    calculate_price_breakdown,
    list_features,
    minimum_warnings,
    validate_custom_charge,
)
from ragcalc.pricing.currency import (
    SUPPORTED_CURRENCIES,
    currency_for_language,
    format_amount,
    get_currency,
)
from ragcalc.pricing.models import CustomCharge, QuoteRequest
from ragcalc.tokens.calculator import (
    apply_template,
    empty_dimensions,
    estimate,
    reconcile_model_selection,
)
from ragcalc.tokens.constants import (
    DEFAULT_CHAT_MODEL_ID,
    DEFAULT_EMBEDDING_MODEL_ID,
    DEFAULT_MODELS,
    INDUSTRY_PATTERNS,
)
from ragcalc.tokens.models import (
    EstimationRequest,
    EstimatorSettings,
    MonthlyPattern,
    TeamSize,
    TokenMultipliers,
)

load_dotenv()


def pricing_page():
    """Enterprise plan quote with add-ons, custom charges and billing options."""
    st.header("Pricing Calculator")

    c1, c2 = st.columns(2)
    with c1:
        language = st.selectbox("Language", ["en", "zh", "ja"])
    with c2:
        codes = list(SUPPORTED_CURRENCIES)
        code = st.selectbox(
            "Currency", codes, index=codes.index(currency_for_language(language))
        )
    currency = get_currency(code)

    users = st.number_input("Team members", min_value=0, value=3, step=1)
    credits = st.number_input("Message credits", min_value=0, value=5000, step=1000)
    s1, s2 = st.columns([3, 1])
    with s2:
        unit = st.selectbox("Unit", ["MB", "GB"])
    with s1:
        storage = st.number_input("Vector storage", min_value=0.0, value=200.0)

    features = list_features(language)
    selected = st.multiselect(
        "Additional features",
        options=[f.id for f in features],
        format_func=lambda fid: next(f.name for f in features if f.id == fid),
    )

    if "custom_charges" not in st.session_state:
        st.session_state.custom_charges = []

    with st.expander("Custom charges"):
        name = st.text_input("Charge name")
        amount = st.number_input("Monthly amount (USD)", min_value=0.0, value=0.0)
        if st.button("Add charge"):
            charge = CustomCharge(name=name, price_increment=amount)
            errors = validate_custom_charge(charge)
            if errors:
                for message in errors.values():
                    st.error(message)
            else:
                st.session_state.custom_charges.append(charge)
        for charge in st.session_state.custom_charges:
            st.write(f"- {charge.name}: {format_amount(charge.price_increment, currency)}")
        if st.session_state.custom_charges and st.button("Clear charges"):
            st.session_state.custom_charges = []

    b1, b2, b3 = st.columns(3)
    with b1:
        discount = st.slider("Global discount", 0.0, 1.0, 0.0, 0.05)
    with b2:
        billing_cycle = st.radio("Billing", ["monthly", "yearly"], horizontal=True)
    with b3:
        yearly_enabled = st.checkbox("Yearly discount (20%)", value=True)

    request = QuoteRequest(
        users=users,
        message_credits=credits,
        vector_storage=storage,
        storage_unit=unit,
        selected_features=selected,
        custom_charges=st.session_state.custom_charges,
        global_discount=discount,
        billing_cycle=billing_cycle,
        yearly_discount_enabled=yearly_enabled,
        currency=code,
        language=language,
    )

    for message in minimum_warnings(request).values():
        st.warning(message)

    breakdown = calculate_price_breakdown(request)
    render_breakdown_table(breakdown, currency)

    m1, m2 = st.columns(2)
    with m1:
        st.metric("Monthly", format_amount(breakdown.monthly_equivalent, currency))
    with m2:
        label = "Billed yearly" if billing_cycle == "yearly" else "Billed monthly"
        st.metric(label, format_amount(breakdown.billed_total, currency))

    render_export_tools(breakdown=breakdown)


def estimator_page():
    """Token and cost estimate from corpus size, team and industry presets."""
    st.header("Token Estimator")

    if "models" not in st.session_state:
        try:
            saved = load_saved_settings()
        # pylint: disable=broad-exception-caught
        except Exception as e:
            st.warning(f"Could not load saved settings: {e}")
            saved = EstimatorSettings(
                models=list(DEFAULT_MODELS),
                selected_chat_model_id=DEFAULT_CHAT_MODEL_ID,
                selected_embedding_model_id=DEFAULT_EMBEDDING_MODEL_ID,
                token_multipliers=TokenMultipliers(),
            )
        st.session_state.models = saved.models
        st.session_state.chat_model_id = saved.selected_chat_model_id
        st.session_state.embedding_model_id = saved.selected_embedding_model_id
        st.session_state.multipliers = saved.token_multipliers

    models = render_model_editor(st.session_state.models)
    st.session_state.models = models
    multipliers = render_multiplier_editor(st.session_state.multipliers)
    st.session_state.multipliers = multipliers

    chat_models = [m for m in models if m.type == "chat"]
    embedding_models = [m for m in models if m.type == "embedding"]
    chat_id, embedding_id = reconcile_model_selection(
        models,
        st.session_state.get("chat_model_id", DEFAULT_CHAT_MODEL_ID),
        st.session_state.get("embedding_model_id", DEFAULT_EMBEDDING_MODEL_ID),
    )

    c1, c2 = st.columns(2)
    with c1:
        chat_ids = [m.id for m in chat_models]
        chat_id = st.selectbox(
            "Chat model",
            chat_ids,
            index=chat_ids.index(chat_id) if chat_id in chat_ids else 0,
        )
    with c2:
        embedding_ids = [m.id for m in embedding_models]
        embedding_id = st.selectbox(
            "Embedding model",
            embedding_ids,
            index=embedding_ids.index(embedding_id) if embedding_id in embedding_ids else 0,
        )
    st.session_state.chat_model_id = chat_id
    st.session_state.embedding_model_id = embedding_id

    if st.button("Save estimator settings"):
        try:
            save_settings(
                EstimatorSettings(
                    models=models,
                    selected_chat_model_id=chat_id or DEFAULT_CHAT_MODEL_ID,
                    selected_embedding_model_id=embedding_id or DEFAULT_EMBEDDING_MODEL_ID,
                    token_multipliers=multipliers,
                )
            )
            st.success("Settings saved")
        # pylint: disable=broad-exception-caught
        except Exception as e:
            st.error(f"Failed to save settings: {e}")

    i1, i2 = st.columns(2)
    with i1:
        industry = st.selectbox(
            "Industry",
            list(INDUSTRY_PATTERNS),
            format_func=lambda key: INDUSTRY_PATTERNS[key].label,
            index=list(INDUSTRY_PATTERNS).index("university"),
        )
    with i2:
        size = st.selectbox("Organization size", ["small", "medium", "large"])
    st.caption(INDUSTRY_PATTERNS[industry].description)

    t1, t2 = st.columns(2)
    with t1:
        total = st.number_input("Team size", min_value=0, value=100, step=10)
    with t2:
        active = st.number_input("Active users", min_value=0, value=70, step=10)

    dimensions = empty_dimensions(industry).model_copy(
        update={"team_size": TeamSize(total=total, active_users=active)}
    )
    template = apply_template(dimensions, industry, size)
    edited_dimensions = render_dimensions_editor(template.dimensions)

    p1, p2, p3 = st.columns(3)
    with p1:
        growth = st.number_input(
            "Monthly growth rate", min_value=0.0, value=template.pattern.monthly_growth_rate
        )
    with p2:
        queries = st.number_input(
            "Queries per active user per day",
            min_value=0.0,
            value=float(template.pattern.queries_per_active_user),
        )
    with p3:
        turns = st.number_input(
            "Turns per query", min_value=0.0, value=float(template.pattern.turns_per_query)
        )

    if not chat_models or not embedding_models:
        st.info("Add at least one chat and one embedding model to see an estimate.")
        return

    try:
        result = estimate(
            EstimationRequest(
                dimensions=edited_dimensions,
                pattern=MonthlyPattern(
                    monthly_growth_rate=growth,
                    queries_per_active_user=queries,
                    turns_per_query=turns,
                ),
                multipliers=multipliers,
                models=models,
                selected_chat_model_id=chat_id,
                selected_embedding_model_id=embedding_id,
            )
        )
    except ValueError as e:
        st.error(str(e))
        return

    render_estimate(result)


def market_page():
    """Fetches provider pricing pages and optionally structures them with Gemini."""
    st.header("LLM Market Prices")

    analyze = st.checkbox("Analyze with Gemini", value=False)

    if st.button("Fetch prices"):
        with st.spinner("Fetching provider pricing pages..."):
            try:
                records = scrape_prices_sync()
                if analyze:
                    progress = st.progress(0, text="Analyzing...")
                    analyzer = PriceAnalyzer()
                    result = asyncio.run(
                        analyzer.analyze(
                            records,
                            on_progress=lambda provider, percent: progress.progress(
                                int(percent), text=f"Analyzing {provider}..."
                            ),
                        )
                    )
                    records = result.analyzed_data
                st.session_state.price_records = records
            # pylint: disable=broad-exception-caught
            except Exception as e:
                st.error(f"Failed to fetch pricing data: {e}")

    records = st.session_state.get("price_records", [])
    render_price_records(records)
    render_export_tools(records=records)


def main():
    """
    Main entry point for the Streamlit application.
    """
    st.title("RAG Pricing Calculator")

    pricing_tab, estimator_tab, market_tab = st.tabs(
        ["Pricing", "Token Estimator", "Market Prices"]
    )
    with pricing_tab:
        pricing_page()
    with estimator_tab:
        estimator_page()
    with market_tab:
        market_page()


if __name__ == "__main__":
    main()
