from __future__ import annotations

import pandas as pd
import streamlit as st
import altair as alt

from roxiler_stats.aggregate.months import MONTH_NAMES
from roxiler_stats.aggregate.service import AggregationService
from roxiler_stats.config import get_settings
from roxiler_stats.errors import RoxilerStatsError
from roxiler_stats.store import build_store

# =====================================================
# Page config
# =====================================================
st.set_page_config(page_title="Transactions Dashboard", layout="wide")
st.title("📊 Transactions Dashboard")


# =====================================================
# Store connection (one handle per Streamlit server)
# =====================================================
@st.cache_resource
def get_service() -> AggregationService:
    """Build the aggregation service once and reuse it across reruns."""
    return AggregationService(build_store(get_settings()))


try:
    service = get_service()
    service.store.ping()
except (RoxilerStatsError, RuntimeError) as exc:  # pragma: no cover - runtime failure handling
    st.error(f"Unable to reach the transaction store: {exc}")
    st.stop()


# =====================================================
# Helpers
# =====================================================
def kpi(label: str, value) -> None:
    """Display a simple KPI metric in the dashboard.

    Args:
        label: Metric label.
        value: Metric value (displayed as-is).
    """
    st.metric(label, value)


def center_dataframe(df: pd.DataFrame):
    """Center-align column headers and values for display."""
    return (
        df.style
        .set_properties(**{"text-align": "center"})
        .set_table_styles(
            [{"selector": "th", "props": [("text-align", "center")]}]
        )
    )


month_labels = [name.capitalize() for name in MONTH_NAMES]
month = st.selectbox("Month", month_labels, index=2)

try:
    report = service.compute_combined(month)
except RoxilerStatsError as exc:
    st.error(f"Unable to build the report: {exc}")
    st.stop()

# =====================================================
# SECTION 1 - STATISTICS
# =====================================================
st.header(f"📌 Statistics - {month}")

c1, c2, c3 = st.columns(3)
with c1:
    kpi("Total sale", f"{report.statistics.total_sale_amount:,.2f}")
with c2:
    kpi("Total sold items", report.statistics.total_sold_items)
with c3:
    kpi("Total not sold items", report.statistics.total_not_sold_items)

st.caption("Total sale covers every transaction dated in the month, sold or not.")

st.divider()

# =====================================================
# SECTION 2 - PRICE RANGES & CATEGORIES
# =====================================================
left, right = st.columns(2)

with left:
    st.header("📈 Price Ranges")
    df_bar = pd.DataFrame([b.model_dump() for b in report.bar_chart])
    chart_bar = (
        alt.Chart(df_bar)
        .mark_bar()
        .encode(
            x=alt.X("range:N", sort=list(df_bar["range"]), title="Price range"),
            y=alt.Y("count:Q", title="Items"),
            tooltip=["range:N", "count:Q"],
        )
        .properties(height=320)
    )
    st.altair_chart(chart_bar, width="stretch")

with right:
    st.header("🥧 Categories")
    df_pie = pd.DataFrame([p.model_dump() for p in report.pie_chart])
    if df_pie.empty:
        st.info("No transactions in this month.")
    else:
        chart_pie = (
            alt.Chart(df_pie)
            .mark_arc()
            .encode(
                theta=alt.Theta("count:Q"),
                color=alt.Color("category:N", title="Category"),
                tooltip=["category:N", "count:Q"],
            )
            .properties(height=320)
        )
        st.altair_chart(chart_pie, width="stretch")

st.divider()

# =====================================================
# SECTION 3 - TRANSACTIONS
# =====================================================
st.header("🧾 Transactions")

search = st.text_input("Search title, description or exact price")
per_page = st.select_slider("Per page", options=[5, 10, 20, 50], value=10)
page = st.number_input("Page", min_value=1, value=1, step=1)

try:
    listing = service.list_transactions(search or None, int(page), int(per_page))
except RoxilerStatsError as exc:
    st.error(f"Unable to load transactions: {exc}")
    st.stop()

if not listing.transactions:
    st.info("No transactions match.")
else:
    df_tx = pd.DataFrame(
        [t.model_dump(by_alias=True, exclude={"image"}) for t in listing.transactions]
    )
    df_tx["dateOfSale"] = pd.to_datetime(df_tx["dateOfSale"], errors="coerce").dt.strftime("%Y-%m-%d")
    st.dataframe(center_dataframe(df_tx), width="stretch")
st.caption(f"{listing.total} matching transactions")
