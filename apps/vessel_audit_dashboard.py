#!/usr/bin/env python3
"""
Vessel Audit Dashboard - Streamlit Application

Samples tracked vessels from the internal store, fetches the same vessels
from the third-party vessel API and shows every field that disagrees,
together with an error rate and data accuracy figure.

Usage:
    streamlit run apps/vessel_audit_dashboard.py

Environment Variables:
    DATA_SOURCE         - 'demo' or 'live' (default: demo)
    SUPABASE_URL        - Supabase project URL
    SUPABASE_KEY        - Supabase access key
    VESSEL_API_KEY      - Vessel API user key
    VESSEL_API_BATCH    - 'true' if the API accepts comma-separated MMSIs
"""

from __future__ import annotations

import logging

import pandas as pd
import streamlit as st

from vessel_audit.comparator import ComparisonReport, ComparisonRow
from vessel_audit.core_config import Settings, get_settings, log_startup_diagnostics
from vessel_audit.fetcher import RecordFetcher
from vessel_audit.logging_setup import configure_logging
from vessel_audit.state import SAMPLING_LABEL, DashboardState, run_sample

logger = logging.getLogger(__name__)

# Page configuration - must be first Streamlit command
st.set_page_config(
    page_title="Data Sampling Dashboard",
    page_icon="🚢",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown(
    """
    <style>
    .main .block-container {
        padding-top: 2rem;
        max-width: 1200px;
    }
    .error-rate {
        margin-top: 2rem;
        font-weight: 600;
        color: #b91c1c;
    }
    .data-accuracy {
        margin-top: 0.5rem;
        font-weight: 700;
        color: #2e7d32;
    }
    </style>
    """,
    unsafe_allow_html=True,
)

_STATE_KEY = "vessel_audit_state"
_COLUMNS = ["Details", "Marine Radar", "Vessel Finder", "Difference"]


# ---------------------------------------------------------------------------
# Settings & Fetcher
# ---------------------------------------------------------------------------


@st.cache_resource(show_spinner="Connecting to data sources...")
def get_fetcher() -> RecordFetcher:
    """Create and cache the record fetcher for this process."""
    settings = get_settings()
    configure_logging(settings)
    log_startup_diagnostics(settings, "Vessel Audit Dashboard")
    try:
        return RecordFetcher.from_settings(settings)
    except Exception as e:
        logger.error("Failed to initialize data sources: %s", e)
        raise


def get_state(settings: Settings) -> DashboardState:
    if _STATE_KEY not in st.session_state:
        st.session_state[_STATE_KEY] = DashboardState.from_settings(settings)
    return st.session_state[_STATE_KEY]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def comparison_frame(row: ComparisonRow) -> pd.DataFrame:
    """Four-column table for one vessel: label, internal, external, diff flag."""
    return pd.DataFrame(
        [
            {
                "Details": diff.label,
                "Marine Radar": diff.internal_display,
                "Vessel Finder": diff.external_display,
                "Difference": "Diff" if diff.differs else "",
            }
            for diff in row.fields
        ],
        columns=_COLUMNS,
    )


def _highlight_diffs(frame: pd.DataFrame) -> pd.DataFrame:
    styles = pd.DataFrame("", index=frame.index, columns=frame.columns)
    styles.loc[frame["Difference"] == "Diff", :] = "color: #b91c1c; font-weight: 600"
    return styles


def render_controls(state: DashboardState, fetcher: RecordFetcher) -> None:
    col_slider, col_button, col_start, col_end = st.columns([3, 1, 2, 2])

    with col_slider:
        percent = st.slider(
            "Sample Size (%)",
            min_value=1,
            max_value=100,
            value=state.sample_percent,
        )
        state.set_sample_percent(percent)

    with col_start:
        start = st.date_input("Date Range: from", value=state.start_date)
    with col_end:
        end = st.date_input("to", value=state.end_date)
    state.set_date_range(start, end)

    with col_button:
        st.write("")
        clicked = st.button(state.button_label, disabled=state.loading, type="primary")

    if clicked:
        with st.spinner(SAMPLING_LABEL):
            try:
                run_sample(state, fetcher)
            except Exception as e:
                logger.error("Sample cycle crashed: %s", e)

    if state.error:
        st.error(f"Error: {state.error}")


def render_comparison(state: DashboardState, report: ComparisonReport) -> None:
    st.header("Ship Comparison")

    if not state.has_data:
        st.info("No data")
        return

    if not report.rows:
        st.success("No differences found")

    for row in report.rows:
        st.subheader(f"🚢 {row.title}")
        frame = comparison_frame(row)
        st.dataframe(
            frame.style.apply(_highlight_diffs, axis=None),
            hide_index=True,
            use_container_width=True,
        )

    st.markdown(
        f'<div class="error-rate">Error Rate: {report.error_rate:.2f}%</div>',
        unsafe_allow_html=True,
    )
    st.markdown(
        f'<div class="data-accuracy">Data Accuracy: {report.accuracy:.2f}%</div>',
        unsafe_allow_html=True,
    )


def render_analytics(report: ComparisonReport) -> None:
    st.header("Analytics")
    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("Total Ships Compared", f"{report.total_compared:,}")
    col2.metric("Ships in Date Range", f"{report.in_range:,}")
    col3.metric("Differences Found", f"{report.differing:,}")
    col4.metric("Error Rate", f"{report.error_rate:.2f}%")
    col5.metric("Data Accuracy", f"{report.accuracy:.2f}%")


# ---------------------------------------------------------------------------
# Main Application
# ---------------------------------------------------------------------------


def main():
    """Main application entry point."""
    st.title("Data Sampling Dashboard")

    try:
        settings = get_settings()
        fetcher = get_fetcher()
    except Exception as e:
        st.error(
            f"""
            ## ⚠️ Data Source Error

            Could not configure the data sources. Please check your environment variables:

            - `DATA_SOURCE` ('demo' or 'live')
            - `SUPABASE_URL` / `SUPABASE_KEY`
            - `VESSEL_API_KEY`

            **Error:** {e}
            """
        )
        st.stop()

    env_color = "🟢" if settings.is_demo else "🔵"
    st.caption(f"{env_color} Data source: **{settings.DATA_SOURCE.upper()}**")

    state = get_state(settings)
    render_controls(state, fetcher)

    report = state.report()
    render_comparison(state, report)
    st.divider()
    render_analytics(report)


if __name__ == "__main__":
    main()
