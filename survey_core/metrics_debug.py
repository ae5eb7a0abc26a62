from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from survey_core.filters import DashboardFilters
from survey_core.labels import PARAMETER_LABELS, SUBGROUP_ORDER


def compute_debug(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    table: pd.DataFrame = ctx.get("table", pd.DataFrame()).copy()
    payload = {
        "filters": asdict(filters),
        "row_counts": {
            "table_rows": int(len(table)),
            "parameter_rows": int(len(ctx.get("by_parameter", pd.DataFrame()))),
            "knowledge_rows": int(len(ctx.get("knowledge", pd.DataFrame()))),
            "urgency_rows": int(len(ctx.get("urgency", pd.DataFrame()))),
            "sources_rows": int(len(ctx.get("sources", pd.DataFrame()))),
            "negative_impact_rows": int(len(ctx.get("negative_impact", pd.DataFrame()))),
        },
        "cleaning_checks": {
            "missing_responders_n": 0,
            "missing_base_sub_total": 0,
            "missing_freq": 0,
            "freq_out_of_range": 0,
        },
        "question_rows": [],
        "unmapped_parameters": [],
        "unmapped_subgroups": [],
    }
    if table.empty:
        return payload

    payload["cleaning_checks"] = {
        "missing_responders_n": int(table["responders_n"].isna().sum()),
        "missing_base_sub_total": int(table["base_sub_total"].isna().sum()),
        "missing_freq": int(table["freq"].isna().sum()),
        "freq_out_of_range": int(((table["freq"] < 0) | (table["freq"] > 100)).sum()),
    }
    payload["question_rows"] = (
        table.groupby("question_number", sort=False).size().reset_index(name="rows").to_dict(orient="records")
    )

    # Codes without a display label pass through the build unchanged; list them here.
    known_parameters = set(PARAMETER_LABELS.values())
    payload["unmapped_parameters"] = sorted(
        str(p) for p in table["demographic_parameter"].dropna().unique() if p not in known_parameters
    )
    payload["unmapped_subgroups"] = sorted(
        str(s) for s in table["subgroup"].dropna().unique() if s not in SUBGROUP_ORDER
    )
    return payload
