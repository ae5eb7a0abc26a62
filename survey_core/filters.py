from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from survey_core.config import (
    DEFAULT_URGENCY_RESPONSE,
    KNOWLEDGE_QUESTION,
    NEGATIVE_IMPACT_QUESTION,
    SOURCES_TOP_N_DEFAULT,
    SOURCES_TOP_N_MAX,
    SOURCES_TOP_N_MIN,
    URGENCY_QUESTION,
)
from survey_core.labels import OVERALL_LABEL


@dataclass(frozen=True)
class DashboardFilters:
    demographic_parameter: str = OVERALL_LABEL
    knowledge_responses: List[str] = field(default_factory=list)
    knowledge_subgroups: List[str] = field(default_factory=list)
    urgency_response: str = DEFAULT_URGENCY_RESPONSE
    urgency_subgroups: List[str] = field(default_factory=list)
    sources_top_n: int = SOURCES_TOP_N_DEFAULT
    sources_subgroup: str = OVERALL_LABEL
    negative_impact_responses: List[str] = field(default_factory=list)
    negative_impact_subgroups: List[str] = field(default_factory=list)


def _as_str_list(values: Optional[Iterable[object]]) -> List[str]:
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    return [str(x).strip() for x in values if x is not None and str(x).strip()]


def _keep_valid(values: List[str], valid: Optional[List[str]]) -> List[str]:
    if valid is None:
        return values
    return [v for v in values if v in valid]


def _top_n(value: object) -> int:
    try:
        n = int(value)  # type: ignore[arg-type]
    except Exception:
        n = SOURCES_TOP_N_DEFAULT
    return max(SOURCES_TOP_N_MIN, min(SOURCES_TOP_N_MAX, n))


def normalize_filters(
    raw: dict,
    *,
    available_subgroups: Optional[Dict[str, List[str]]] = None,
    available_responses: Optional[Dict[str, List[str]]] = None,
) -> DashboardFilters:
    """Coerce raw dashboard inputs and drop selections the data cannot satisfy.

    Subgroup selections are cross-filtered against the chosen demographic
    parameter, so switching parameter never leaves stale subgroups selected.
    An empty selection list means "no filter".
    """
    parameter = str(raw.get("demographic_parameter") or OVERALL_LABEL).strip()
    valid_subgroups: Optional[List[str]] = None
    if available_subgroups:
        if parameter not in available_subgroups:
            parameter = OVERALL_LABEL if OVERALL_LABEL in available_subgroups else next(iter(available_subgroups))
        valid_subgroups = available_subgroups.get(parameter, [])

    responses = available_responses or {}

    def valid_responses(question: str) -> Optional[List[str]]:
        return responses.get(question) if available_responses else None

    sources_subgroup = str(raw.get("sources_subgroup") or OVERALL_LABEL).strip()
    if valid_subgroups and sources_subgroup not in valid_subgroups:
        sources_subgroup = valid_subgroups[0]

    urgency_response = str(raw.get("urgency_response") or DEFAULT_URGENCY_RESPONSE).strip()
    urgency_choices = valid_responses(URGENCY_QUESTION)
    if urgency_choices and urgency_response not in urgency_choices:
        urgency_response = DEFAULT_URGENCY_RESPONSE if DEFAULT_URGENCY_RESPONSE in urgency_choices else urgency_choices[0]

    return DashboardFilters(
        demographic_parameter=parameter,
        knowledge_responses=_keep_valid(_as_str_list(raw.get("knowledge_responses")), valid_responses(KNOWLEDGE_QUESTION)),
        knowledge_subgroups=_keep_valid(_as_str_list(raw.get("knowledge_subgroups")), valid_subgroups),
        urgency_response=urgency_response,
        urgency_subgroups=_keep_valid(_as_str_list(raw.get("urgency_subgroups")), valid_subgroups),
        sources_top_n=_top_n(raw.get("sources_top_n", SOURCES_TOP_N_DEFAULT)),
        sources_subgroup=sources_subgroup,
        negative_impact_responses=_keep_valid(
            _as_str_list(raw.get("negative_impact_responses")), valid_responses(NEGATIVE_IMPACT_QUESTION)
        ),
        negative_impact_subgroups=_keep_valid(_as_str_list(raw.get("negative_impact_subgroups")), valid_subgroups),
    )
