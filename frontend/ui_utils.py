import asyncio
import streamlit as st
import pandas as pd
from datetime import datetime
from pydantic import ValidationError

from ragcalc.db.connection import AsyncSessionLocal
from ragcalc.db.init_db import init_db
from ragcalc.db.repository import SettingsRepository
from ragcalc.export import breakdown_rows, breakdown_to_csv_string, prices_to_csv_string
from ragcalc.pricing.currency import format_amount
from ragcalc.tokens.constants import DOCUMENT_TYPES
from ragcalc.tokens.models import ModelPrice, TokenMultipliers, UsageDimensions

def render_breakdown_table(breakdown, currency):
    """Renders the itemized quote in the display currency."""
    st.subheader("Price Breakdown")

    data = [
        {"Item": row["Item"], "Amount": format_amount(row["Amount (USD)"], currency)}
        for row in breakdown_rows(breakdown)
    ]
    df = pd.DataFrame(data)
    st.dataframe(df, width="stretch", hide_index=True)

def rows_to_models(rows):
    """
    Converts edited table rows to model prices.
    Returns (models, errors); rows without an id or type are dropped.
    """
    models, errors = [], []
    for row in rows:
        # Empty cells come back as NaN
        row = {key: None if pd.isna(value) else value for key, value in row.items()}
        if not row.get("id") or row.get("type") not in ("chat", "embedding"):
            continue
        row["name"] = row.get("name") or row["id"]
        try:
            models.append(ModelPrice(**row))
        except ValidationError as e:
            messages = "; ".join(err["msg"] for err in e.errors())
            errors.append(f"{row['id']}: {messages}")
    return models, errors

def render_model_editor(models):
    """Editable table of model prices (USD per million tokens)."""
    with st.expander("Model prices"):
        df = pd.DataFrame([m.model_dump() for m in models])
        edited = st.data_editor(
            df,
            num_rows="dynamic",
            hide_index=True,
            column_config={
                "type": st.column_config.SelectboxColumn(options=["chat", "embedding"]),
            },
        )

    result, errors = rows_to_models(edited.to_dict("records"))
    for message in errors:
        st.error(f"Invalid model price {message}")
    return result

def render_multiplier_editor(multipliers):
    """Editable tokens-per-unit multipliers."""
    values = {}
    with st.expander("Token multipliers"):
        cols = st.columns(3)
        for i, (doc_type, value) in enumerate(multipliers.model_dump().items()):
            with cols[i % len(cols)]:
                values[doc_type] = st.number_input(
                    doc_type, min_value=0.0, value=float(value), key=f"multiplier_{doc_type}"
                )
    return TokenMultipliers(**values)

def render_dimensions_editor(dimensions):
    """Editable per-type document counts, average lengths and image settings."""
    with st.expander("Documents"):
        df = pd.DataFrame(
            [
                {
                    "type": doc_type,
                    "documents": dimensions.documents.get(doc_type, 0),
                    "avg_length": dimensions.avg_document_length.get(doc_type, 0),
                }
                for doc_type in DOCUMENT_TYPES
            ]
        )
        edited = st.data_editor(
            df, hide_index=True, disabled=["type"]
        )
        c1, c2 = st.columns(2)
        with c1:
            image_count = st.number_input(
                "Images per document",
                min_value=0.0,
                value=float(dimensions.avg_image_count),
            )
        with c2:
            image_size = st.number_input(
                "Image size (megapixels)",
                min_value=0.0,
                value=float(dimensions.avg_image_size),
            )

    return dimensions_from_rows(
        dimensions, edited.to_dict("records"), image_count, image_size
    )

def dimensions_from_rows(dimensions, rows, image_count=0, image_size=0):
    """Applies edited document rows and image settings to the dimensions."""
    return UsageDimensions(
        **{
            **dimensions.model_dump(),
            "documents": {row["type"]: row["documents"] for row in rows},
            "avg_document_length": {
                row["type"]: row["avg_length"] for row in rows if row["type"] != "image"
            },
            "avg_image_count": image_count,
            "avg_image_size": image_size,
        }
    )

def load_saved_settings():
    """Loads remembered estimator settings from the database."""
    async def _load():
        await init_db()
        async with AsyncSessionLocal() as session:
            return await SettingsRepository(session).load_estimator_settings()

    return asyncio.run(_load())

def save_settings(settings):
    """Persists estimator settings for the next session."""
    async def _save():
        async with AsyncSessionLocal() as session:
            await SettingsRepository(session).save_estimator_settings(settings)

    asyncio.run(_save())

def render_estimate(result):
    """Renders token usage and cost for the initial load and each month."""
    st.subheader("Estimate")

    c1, c2, c3 = st.columns(3)
    with c1:
        st.metric("Initial embedding tokens", f"{result.initial_usage.embedding:,.0f}")
    with c2:
        st.metric("Initial cost", f"${result.costs.initial.total:,.4f}")
    with c3:
        st.metric("Monthly cost", f"${result.costs.monthly.total:,.4f}")

    data = [
        {
            "Usage": "Embedding",
            "Tokens / month": result.monthly_usage.embedding,
            "Price / 1M": result.model_prices.embedding,
            "Cost / month": result.costs.monthly.embedding,
        },
        {
            "Usage": "Chat input",
            "Tokens / month": result.monthly_usage.chat_input,
            "Price / 1M": result.model_prices.chat_input,
            "Cost / month": result.costs.monthly.chat_input,
        },
        {
            "Usage": "Chat output",
            "Tokens / month": result.monthly_usage.chat_output,
            "Price / 1M": result.model_prices.chat_output,
            "Cost / month": result.costs.monthly.chat_output,
        },
    ]
    st.dataframe(pd.DataFrame(data), width="stretch", hide_index=True)

    pattern = result.monthly_usage.pattern
    st.caption(
        f"Industry reference: {pattern.monthly_growth_rate:.0%} monthly growth, "
        f"{pattern.queries_per_active_user:g} queries per user per day, "
        f"{pattern.turns_per_query:g} turns per query"
    )

def render_price_records(records):
    """Renders scraped or analyzed price records."""
    st.subheader("Price Records")

    if not records:
        st.info("No prices fetched yet.")
        return

    for record in records:
        with st.expander(record.model_info):
            st.caption(f"{record.source} · {record.timestamp}")
            st.text(record.pricing)

def render_export_tools(breakdown=None, records=None):
    """Renders data export tools (e.g. Download CSV)."""
    if breakdown is None and not records:
        return

    st.markdown("---")
    st.subheader("Data Export")
    stamp = datetime.now().strftime('%Y%m%d_%H%M%S')

    if breakdown is not None:
        st.download_button(
            label="📥 Download Quote CSV",
            data=breakdown_to_csv_string(breakdown),
            file_name=f"quote_{stamp}.csv",
            mime="text/csv",
            use_container_width=True,
            key="quote_csv",
        )
    if records:
        st.download_button(
            label="📥 Download Prices CSV",
            data=prices_to_csv_string(records),
            file_name=f"prices_{stamp}.csv",
            mime="text/csv",
            use_container_width=True,
            key="prices_csv",
        )
