from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from survey_core.config import SOURCES_TOP_N_DEFAULT, SOURCES_TOP_N_MAX, SOURCES_TOP_N_MIN
from survey_core.labels import OVERALL_LABEL


class DashboardFiltersModel(BaseModel):
    demographic_parameter: str = OVERALL_LABEL
    knowledge_responses: List[str] = Field(default_factory=list)
    knowledge_subgroups: List[str] = Field(default_factory=list)
    urgency_response: Optional[str] = None
    urgency_subgroups: List[str] = Field(default_factory=list)
    sources_top_n: int = Field(default=SOURCES_TOP_N_DEFAULT, ge=SOURCES_TOP_N_MIN, le=SOURCES_TOP_N_MAX)
    sources_subgroup: str = OVERALL_LABEL
    negative_impact_responses: List[str] = Field(default_factory=list)
    negative_impact_subgroups: List[str] = Field(default_factory=list)


class MetaListResponse(BaseModel):
    values: List[str]
