from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from survey_core.charts import lollipop_chart
from survey_core.filters import DashboardFilters
from survey_core.labels import order_subgroups


def compute_urgency(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("urgency", pd.DataFrame()).copy()
    if df.empty:
        return {"filters": asdict(filters), "statement": filters.urgency_response, "rows": [], "charts": {}}

    subgroups = order_subgroups(df["subgroup"])
    df["_s"] = df["subgroup"].map(subgroups.index)
    df = df.sort_values("_s", kind="stable").drop(columns="_s")

    highest = df.loc[df["freq"].idxmax()]
    lowest = df.loc[df["freq"].idxmin()]
    return {
        "filters": asdict(filters),
        "statement": filters.urgency_response,
        "kpis": {
            "highest": {"subgroup": str(highest["subgroup"]), "freq": float(highest["freq"])},
            "lowest": {"subgroup": str(lowest["subgroup"]), "freq": float(lowest["freq"])},
        },
        "rows": df[["subgroup", "responders_n", "base_sub_total", "freq"]].to_dict(orient="records"),
        "charts": {"urgency": lollipop_chart(df, x_title=f"% {filters.urgency_response}")},
    }
