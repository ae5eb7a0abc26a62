from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from survey_core.charts import ranking_chart
from survey_core.filters import DashboardFilters


def compute_sources(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    df: pd.DataFrame = ctx.get("sources", pd.DataFrame()).copy()
    if df.empty:
        return {"filters": asdict(filters), "top": [], "charts": {}}

    # Ties at the cut-off are kept, so there can be more than top_n rows.
    ranked = df.sort_values("freq", ascending=False, kind="stable").reset_index(drop=True)
    ranked.insert(0, "rank", ranked["freq"].rank(method="min", ascending=False).astype(int))
    return {
        "filters": asdict(filters),
        "subgroup": filters.sources_subgroup,
        "top": ranked[["rank", "source", "response_category", "freq"]].to_dict(orient="records"),
        "charts": {"sources": ranking_chart(ranked, top_n=filters.sources_top_n)},
    }
