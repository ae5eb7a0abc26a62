"""Display labels for demographic codes, plus dashboard orderings."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional

import pandas as pd


OVERALL_LABEL = "Overall Population"

PARAMETER_LABELS = {
    "overall": OVERALL_LABEL,
    "sex": "Biological Sex",
    "age": "Age",
    "area": "Area Type (Population Density)",
    "energyhub": "Energy Hub Area",
    "floodrisk": "Flood Risk Area",
    "education": "Education",
    "work": "Working Status",
    "income": "Income",
    "mode": "Survey Mode Completion",
}

SUBGROUP_LABELS = {
    "man": "Men",
    "woman": "Women",
    "16_34": "From 16 to 34",
    "35_54": "From 35 to 54",
    "55_69": "From 55 to 69",
    "70_and_above": "70 and above",
    "35_and_above": "35 and above",
    "under_55": "Under 55",
    "urban": "Urban (All)",
    "rural": "Rural (All)",
    "urban_large": "Urban (Large)",
    "urban_other": "Urban (Other)",
    "small_towns_accessible": "Small Towns (Accessible)",
    "small_towns_remote": "Small Towns (Remote)",
    "rural_accessible": "Rural (Accessible)",
    "rural_remote": "Rural (Remote)",
    "yes": "Yes/Applicable",
    "no": "No/Not Applicable",
    "no_formal": "No Formal Qualifications",
    "other": "Other Qualifications",
    "graduate": "Degree or Higher Qualifications",
    "non_graduate": "Non-graduate",
    "employed": "Employed (FT or PT)",
    "unemployed": "Unemployed",
    "retired": "Retired",
    "less_26000": "Less than £26,000",
    "26000_52000": "From £26,000 to less than £52,000",
    "less_than_52000": "Less than £52,000",
    "52000_and_above": "£52,000 and above",
    "online": "Online",
    "postal": "Postal",
}

# Display order for subgroup axes; alphabetical order reads badly for age and income bands.
SUBGROUP_ORDER = (
    OVERALL_LABEL,
    "Men",
    "Women",
    "From 16 to 34",
    "35 and above",
    "From 35 to 54",
    "Under 55",
    "From 55 to 69",
    "70 and above",
    "Urban (All)",
    "Rural (All)",
    "Urban (Large)",
    "Urban (Other)",
    "Small Towns (Accessible)",
    "Small Towns (Remote)",
    "Rural (Accessible)",
    "Rural (Remote)",
    "Yes/Applicable",
    "No/Not Applicable",
    "Degree or Higher Qualifications",
    "Non-graduate",
    "Other Qualifications",
    "No Formal Qualifications",
    "Employed (FT or PT)",
    "Unemployed",
    "Retired",
    "Less than £26,000",
    "From £26,000 to less than £52,000",
    "Less than £52,000",
    "£52,000 and above",
    "Online",
    "Postal",
)

KNOWLEDGE_RESPONSE_ORDER = (
    "A great deal",
    "A fair amount",
    "A little",
    "Nothing at all",
    "Don't know",
    "Prefer not to say",
)

NEGATIVE_IMPACT_RESPONSE_ORDER = (
    "Constantly",
    "Often",
    "Sometimes",
    "Rarely",
    "Never",
    "Don't know",
    "Prefer not to say",
)


def label_parameter(code: Optional[str]) -> Optional[str]:
    if code is None or pd.isna(code):
        return code
    return PARAMETER_LABELS.get(code, code)


def label_subgroup(code: Optional[str]) -> str:
    if code is None or pd.isna(code):
        return OVERALL_LABEL
    return SUBGROUP_LABELS.get(code, code)


def apply_labels(df: pd.DataFrame) -> pd.DataFrame:
    """Swap demographic codes for display labels.

    Unknown codes are kept as they are so new survey columns show up in the
    dashboard instead of failing the build. A missing subgroup (the ``overall``
    column) becomes ``OVERALL_LABEL``.
    """
    out = df.copy()
    out["demographic_parameter"] = out["demographic_parameter"].map(label_parameter)
    out["subgroup"] = out["subgroup"].map(label_subgroup)
    return out


def order_subgroups(values: Iterable[object]) -> List[str]:
    seen: List[str] = []
    for v in values:
        if v is None or pd.isna(v):
            continue
        s = str(v)
        if s not in seen:
            seen.append(s)
    known = [s for s in SUBGROUP_ORDER if s in seen]
    return known + [s for s in seen if s not in SUBGROUP_ORDER]


def strip_source_detail(label: object) -> object:
    """'Television (e.g. BBC, STV)' -> 'Television'."""
    if label is None or pd.isna(label):
        return label
    return re.sub(r"\s*\(.*\)", "", str(label))
