"""Shared fixtures: small survey workbooks and a cleaned dashboard table."""

from pathlib import Path
from typing import Dict, List, Sequence

import pandas as pd
import pytest
from openpyxl import Workbook

from survey_core.config import SKIP_ROWS, VARIABLES
from survey_core.data import load_dashboard_data, write_survey_table

# Label column, two demographic columns and one survey-mode column.
NARROW_VARIABLES = ("response_category", "overall", "sex_man", "mode_online")

DEMOGRAPHIC_WIDTH = len([v for v in VARIABLES[1:] if not v.startswith("mode")])
MODE_WIDTH = len([v for v in VARIABLES if v.startswith("mode")])


def write_workbook(path: Path, sheets: Dict[str, Sequence[Sequence[object]]], header_rows: int = SKIP_ROWS) -> Path:
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for i in range(header_rows):
            ws.append([f"Table {name} - metadata line {i + 1}"])
        for row in rows:
            ws.append(list(row))
    wb.save(path)
    return path


def full_row(label: object, value: object = "10") -> List[object]:
    """A row across the full workbook schema: every demographic cell set to value."""
    return [label] + [value] * DEMOGRAPHIC_WIDTH + ["1"] * MODE_WIDTH


def scenario_rows() -> List[List[object]]:
    return [
        ["Base: All adults", "200", "100", "900"],
        ["Yes", "120", "55", "1"],
        ["No", "60", "40", "1"],
        ["Prefer not to say", "20", "5", "1"],
        ["Source: survey notes", "n/a", "n/a", "n/a"],
    ]


@pytest.fixture
def scenario_workbook(tmp_path):
    return write_workbook(tmp_path / "scenario.xlsx", {"T1": scenario_rows()})


@pytest.fixture
def full_workbook(tmp_path):
    t1 = [
        full_row("Base: All", "1,000"),
        full_row("A great deal", "250"),
        full_row("A fair amount", "*"),
        full_row("Prefer not to say", "5"),
        full_row("Notes: weighted data", "n/a"),
    ]
    t3 = [
        full_row("Base: All", "800"),
        full_row(None, None),
        full_row("Climate change is an immediate and urgent problem", "600"),
        full_row("Prefer not to say", "-"),
    ]
    return write_workbook(tmp_path / "survey.xlsx", {"T1": t1, "T3": t3})


QUESTION_RESPONSES = {
    "T1": ["A great deal", "A fair amount", "Don't know", "Prefer not to say"],
    "T3": [
        "Climate change is an immediate and urgent problem",
        "Climate change is not really a problem",
        "Prefer not to say",
    ],
    "T7": [
        "Scientists (e.g. universities)",
        "Television (BBC, STV)",
        "Friends and family",
        "Newspapers",
        "Radio",
        "Prefer not to say",
    ],
    "T11": ["Often", "Never", "Prefer not to say"],
}

SUBGROUPS = [
    ("Overall Population", "Overall Population"),
    ("Biological Sex", "Men"),
    ("Biological Sex", "Women"),
]


def dashboard_table() -> pd.DataFrame:
    rows = []
    for question, responses in QUESTION_RESPONSES.items():
        for i, response in enumerate(responses):
            for parameter, subgroup in SUBGROUPS:
                n = 10.0 * (len(responses) - i)
                if subgroup == "Women":
                    n += 5.0
                rows.append(
                    {
                        "question_number": question,
                        "response_category": response,
                        "demographic_parameter": parameter,
                        "subgroup": subgroup,
                        "responders_n": n,
                        "base_sub_total": 100.0,
                        "freq": round(n / 100.0, 2) * 100,
                    }
                )
    # A suppressed cell: no count, no frequency.
    rows.append(
        {
            "question_number": "T1",
            "response_category": "Nothing at all",
            "demographic_parameter": "Biological Sex",
            "subgroup": "Women",
            "responders_n": None,
            "base_sub_total": 100.0,
            "freq": None,
        }
    )
    return pd.DataFrame(rows)


@pytest.fixture
def dashboard_csv(tmp_path):
    return write_survey_table(dashboard_table(), tmp_path / "scs_data_cleaned.csv")


@pytest.fixture
def data_ctx(dashboard_csv):
    return load_dashboard_data(dashboard_csv)
