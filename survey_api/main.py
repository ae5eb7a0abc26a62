from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from survey_api.schemas import DashboardFiltersModel, MetaListResponse
from survey_core.data import load_dashboard_data, prepare_context
from survey_core.filters import DashboardFilters, normalize_filters
from survey_core.metrics_debug import compute_debug
from survey_core.metrics_distribution import compute_knowledge, compute_negative_impact
from survey_core.metrics_sources import compute_sources
from survey_core.metrics_urgency import compute_urgency


app = FastAPI(title="Views on Climate Change API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: DashboardFiltersModel, data_ctx: Dict[str, Any]) -> DashboardFilters:
    raw = model.model_dump()
    return normalize_filters(
        raw,
        available_subgroups=data_ctx.get("parameter_subgroups") or None,
        available_responses=data_ctx.get("question_responses") or None,
    )


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(name: str, exc: Exception) -> JSONResponse:
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _panel(name: str, filters: DashboardFiltersModel, compute: Callable[[DashboardFilters, Dict[str, Any]], Dict[str, Any]]):
    try:
        data_ctx = load_dashboard_data()
        f = _filters_from_model(filters, data_ctx)
        ctx = prepare_context(f, data_ctx)
        payload = compute(f, ctx)
        payload["subgroup_choices"] = ctx.get("subgroup_choices", [])
        return _json(payload)
    except Exception as exc:
        return _error(name, exc)


@app.get("/meta/questions", response_model=MetaListResponse)
def meta_questions():
    try:
        return _json({"values": load_dashboard_data().get("questions", [])})
    except Exception as exc:
        return _error("meta_questions", exc)


@app.get("/meta/parameters", response_model=MetaListResponse)
def meta_parameters():
    try:
        return _json({"values": load_dashboard_data().get("parameters", [])})
    except Exception as exc:
        return _error("meta_parameters", exc)


@app.get("/meta/subgroups", response_model=MetaListResponse)
def meta_subgroups(parameter: str = Query(default="Overall Population")):
    try:
        subgroups = (load_dashboard_data().get("parameter_subgroups") or {}).get(parameter, [])
        return _json({"values": subgroups})
    except Exception as exc:
        return _error("meta_subgroups", exc)


@app.get("/meta/responses", response_model=MetaListResponse)
def meta_responses(question: str = Query(...)):
    try:
        responses = (load_dashboard_data().get("question_responses") or {}).get(question, [])
        return _json({"values": responses})
    except Exception as exc:
        return _error("meta_responses", exc)


@app.post("/knowledge")
def knowledge(filters: DashboardFiltersModel):
    return _panel("knowledge", filters, compute_knowledge)


@app.post("/urgency")
def urgency(filters: DashboardFiltersModel):
    return _panel("urgency", filters, compute_urgency)


@app.post("/sources")
def sources(filters: DashboardFiltersModel):
    return _panel("sources", filters, compute_sources)


@app.post("/negative-impact")
def negative_impact(filters: DashboardFiltersModel):
    return _panel("negative_impact", filters, compute_negative_impact)


@app.post("/debug")
def debug(filters: DashboardFiltersModel):
    return _panel("debug", filters, compute_debug)


@app.post("/export")
def export_table(filters: DashboardFiltersModel):
    data_ctx = load_dashboard_data()
    f = _filters_from_model(filters, data_ctx)
    ctx = prepare_context(f, data_ctx)
    export_df = ctx.get("by_parameter")
    if export_df is None or not hasattr(export_df, "to_csv"):
        export_df = pd.DataFrame()
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(
        content=csv_bytes,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=scs_data_filtered.csv"},
    )
