from __future__ import annotations

from typing import Any, Dict, Sequence

import altair as alt
import pandas as pd

from survey_core.labels import order_subgroups

alt.data_transformers.disable_max_rows()

FREQ_SCALE = alt.Scale(domain=[0, 100])


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def stacked_subgroup_chart(df: pd.DataFrame, *, response_order: Sequence[str], x_title: str) -> Dict[str, Any]:
    present = list(df["response_category"].unique())
    order = [r for r in response_order if r in present] + [r for r in present if r not in response_order]
    chart = (
        alt.Chart(df[["subgroup", "response_category", "freq"]])
        .mark_bar()
        .encode(
            y=alt.Y("subgroup:N", title="Demographic Subgroups", sort=order_subgroups(df["subgroup"])),
            x=alt.X("freq:Q", title=x_title, stack="zero", scale=FREQ_SCALE),
            color=alt.Color("response_category:N", title="Response(s)", sort=order),
            tooltip=[
                alt.Tooltip("subgroup:N", title="Demographic Subgroup"),
                alt.Tooltip("response_category:N", title="Response"),
                alt.Tooltip("freq:Q", title="Percentage", format=".0f"),
            ],
        )
    )
    return to_vega_spec(chart)


def lollipop_chart(df: pd.DataFrame, *, x_title: str) -> Dict[str, Any]:
    base = alt.Chart(df[["subgroup", "freq"]]).encode(
        y=alt.Y("subgroup:N", title="Demographic Subgroups", sort=order_subgroups(df["subgroup"])),
        tooltip=[
            alt.Tooltip("subgroup:N", title="Demographic Subgroup"),
            alt.Tooltip("freq:Q", title="Percentage", format=".0f"),
        ],
    )
    stem = (
        base.mark_rule()
        .encode(x=alt.X("zero:Q", title=x_title, scale=FREQ_SCALE), x2=alt.X2("freq"))
        .transform_calculate(zero="0")
    )
    head = base.mark_point(filled=True).encode(x=alt.X("freq:Q", scale=FREQ_SCALE))
    return to_vega_spec(stem + head)


def ranking_chart(df: pd.DataFrame, *, top_n: int) -> Dict[str, Any]:
    chart = (
        alt.Chart(df[["source", "response_category", "freq"]])
        .mark_bar()
        .encode(
            y=alt.Y("source:N", title=f"Top {top_n} Trusted Sources", sort="-x"),
            x=alt.X("freq:Q", title="% Trusts the source", scale=FREQ_SCALE),
            tooltip=[
                alt.Tooltip("response_category:N", title="Source of Information"),
                alt.Tooltip("freq:Q", title="Trusts the Source", format=".0f"),
            ],
        )
    )
    return to_vega_spec(chart)
