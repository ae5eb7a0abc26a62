from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

# Root of the project (repo root)
PROJECT_ROOT = Path(__file__).resolve().parents[1]

DATA_DIR = PROJECT_ROOT / "data"

# Raw workbook (read-only) and the cleaned table consumed by the dashboard.
# Both can be overridden via environment variables.
SOURCE_PATH = Path(
    os.getenv("SCS_SOURCE_PATH", "").strip() or DATA_DIR / "scottish_climate_survey_2024.xlsx"
)
OUTPUT_PATH = Path(os.getenv("SCS_OUTPUT_PATH", "").strip() or DATA_DIR / "scs_data_cleaned.csv")

# ---------------------------------------------------------------------------
# Workbook layout
# ---------------------------------------------------------------------------

# Question sheets, in output order.
SHEETS = ("T1", "T3", "T7", "T11")

# Metadata rows above the first data row on every question sheet.
SKIP_ROWS = 15

LABEL_COLUMN = "response_category"
QUESTION_COLUMN = "question_number"

# Last valid response option on every sheet; anything below it is notes.
SENTINEL_LABEL = "Prefer not to say"

# Rows carrying the denominator for each subgroup ("Base: All answering" etc).
BASE_PREFIX = "Base"

# Survey-administration columns, not demographic data.
DROP_PREFIX = "mode"

SUPPRESSION_MARKERS = ("-", "*", "**")

# The workbook has no usable header row, so the schema is fixed here.
VARIABLES = (
    "response_category",
    "overall",
    "sex_man",
    "sex_woman",
    "age_16_34",
    "age_35_54",
    "age_55_69",
    "age_70_and_above",
    "age_35_and_above",
    "age_under_55",
    "area_urban",
    "area_rural",
    "area_urban_large",
    "area_urban_other",
    "area_small_towns_accessible",
    "area_small_towns_remote",
    "area_rural_accessible",
    "area_rural_remote",
    "energyhub_yes",
    "energyhub_no",
    "floodrisk_yes",
    "floodrisk_no",
    "education_no_formal",
    "education_other",
    "education_graduate",
    "education_non_graduate",
    "work_employed",
    "work_unemployed",
    "work_retired",
    "income_less_26000",
    "income_26000_52000",
    "income_less_than_52000",
    "income_52000_and_above",
    "mode_online",
    "mode_postal",
    "mode_total_unweighted",
    "mode_online_unweighted",
    "mode_postal_unweighted",
)

OUTPUT_COLUMNS = (
    "question_number",
    "response_category",
    "demographic_parameter",
    "subgroup",
    "responders_n",
    "base_sub_total",
    "freq",
)

# ---------------------------------------------------------------------------
# Dashboard panels
# ---------------------------------------------------------------------------

KNOWLEDGE_QUESTION = "T1"
URGENCY_QUESTION = "T3"
SOURCES_QUESTION = "T7"
NEGATIVE_IMPACT_QUESTION = "T11"

DEFAULT_URGENCY_RESPONSE = "Climate change is an immediate and urgent problem"

SOURCES_TOP_N_MIN = 3
SOURCES_TOP_N_MAX = 11
SOURCES_TOP_N_DEFAULT = 5
