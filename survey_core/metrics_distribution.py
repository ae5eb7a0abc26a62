from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Sequence

import pandas as pd

from survey_core.charts import stacked_subgroup_chart
from survey_core.filters import DashboardFilters
from survey_core.labels import KNOWLEDGE_RESPONSE_ORDER, NEGATIVE_IMPACT_RESPONSE_ORDER, order_subgroups

ROW_COLUMNS = ["subgroup", "response_category", "responders_n", "base_sub_total", "freq"]


def _distribution_payload(
    filters: DashboardFilters,
    df: pd.DataFrame,
    *,
    response_order: Sequence[str],
    x_title: str,
) -> Dict[str, Any]:
    if df.empty:
        return {"filters": asdict(filters), "subgroups": [], "responses": [], "rows": [], "charts": {}}

    subgroups = order_subgroups(df["subgroup"])
    present = list(df["response_category"].unique())
    responses = [r for r in response_order if r in present] + [r for r in present if r not in response_order]

    rows = df[ROW_COLUMNS].copy()
    rows["_s"] = rows["subgroup"].map(subgroups.index)
    rows["_r"] = rows["response_category"].map(responses.index)
    rows = rows.sort_values(["_s", "_r"], kind="stable").drop(columns=["_s", "_r"])

    return {
        "filters": asdict(filters),
        "subgroups": subgroups,
        "responses": responses,
        "rows": rows.to_dict(orient="records"),
        "charts": {"distribution": stacked_subgroup_chart(df, response_order=responses, x_title=x_title)},
    }


def compute_knowledge(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("knowledge", pd.DataFrame())
    return _distribution_payload(
        filters, df, response_order=KNOWLEDGE_RESPONSE_ORDER, x_title="% State the knowledge"
    )


def compute_negative_impact(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("negative_impact", pd.DataFrame())
    return _distribution_payload(
        filters, df, response_order=NEGATIVE_IMPACT_RESPONSE_ORDER, x_title="% Negative effect on daily life"
    )
