from __future__ import annotations

import logging
import os
import re
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from survey_core.config import (
    BASE_PREFIX,
    DROP_PREFIX,
    KNOWLEDGE_QUESTION,
    LABEL_COLUMN,
    NEGATIVE_IMPACT_QUESTION,
    OUTPUT_COLUMNS,
    OUTPUT_PATH,
    QUESTION_COLUMN,
    SENTINEL_LABEL,
    SHEETS,
    SKIP_ROWS,
    SOURCES_QUESTION,
    SUPPRESSION_MARKERS,
    URGENCY_QUESTION,
    VARIABLES,
)
from survey_core.filters import DashboardFilters, normalize_filters
from survey_core.labels import apply_labels, order_subgroups, strip_source_detail


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

JOIN_KEYS = [QUESTION_COLUMN, "demographic_parameter", "subgroup"]

_NUMBER_RE = re.compile(r"(-?(?:\d{1,3}(?:[ ,\xa0]\d{3})+|\d+)(?:\.\d+)?|-?\.\d+)\s*%?")


class SurveyDataError(Exception):
    """Raised when the workbook cannot be turned into a clean table. Never retryable."""


class SchemaError(SurveyDataError):
    """Sheet layout does not match the fixed column schema."""


class SentinelNotFoundError(SurveyDataError):
    """Sheet has no terminating 'Prefer not to say' row."""


class JoinAmbiguityError(SurveyDataError):
    """More than one base/total row for a question/parameter/subgroup key."""


class ValueParseError(SurveyDataError):
    """Cell is neither a suppression marker nor a number."""


# ---------------- Helpers ----------------
def split_parameter_subgroup(name: str) -> Tuple[str, Optional[str]]:
    """'age_16_34' -> ('age', '16_34'); 'overall' -> ('overall', None)."""
    parameter, sep, subgroup = str(name).partition("_")
    if not sep:
        return parameter, None
    return parameter, subgroup


def demographic_columns(df: pd.DataFrame) -> List[str]:
    return [c for c in df.columns if c not in (QUESTION_COLUMN, LABEL_COLUMN)]


def parse_count(value: object) -> Optional[float]:
    """Number parse that tolerates cell formatting only.

    '1,234' and '1 234' -> 1234.0, '45%' -> 45.0, suppression markers -> None.
    Anything else, such as '1 2' or 'see note 3', raises ValueParseError.
    """
    if value is None or pd.isna(value):
        return None
    s = str(value).strip()
    if not s or s in SUPPRESSION_MARKERS:
        return None
    match = _NUMBER_RE.fullmatch(s)
    if not match:
        raise ValueParseError(f"cannot parse {s!r} as a number")
    return float(re.sub(r"[ ,\xa0]", "", match.group(1)))


def compute_freq(responders_n: object, base_sub_total: object) -> Optional[float]:
    # The ratio is rounded before scaling; rounding the percentage gives different output.
    if responders_n is None or base_sub_total is None:
        return None
    if pd.isna(responders_n) or pd.isna(base_sub_total) or float(base_sub_total) == 0:
        return None
    return round(float(responders_n) / float(base_sub_total), 2) * 100


def _cell_context(question: object, label: object, parameter: object, subgroup: object) -> str:
    column = parameter if subgroup is None or pd.isna(subgroup) else f"{parameter}_{subgroup}"
    return f"sheet {question!r}, row {label!r}, column {column!r}"


def _parse_count_column(df: pd.DataFrame, column: str) -> pd.Series:
    values: List[Optional[float]] = []
    rows = zip(df[QUESTION_COLUMN], df[LABEL_COLUMN], df["demographic_parameter"], df["subgroup"], df[column])
    for question, label, parameter, subgroup, raw in rows:
        try:
            values.append(parse_count(raw))
        except ValueParseError as exc:
            raise ValueParseError(f"{_cell_context(question, label, parameter, subgroup)} ({column}): {exc}") from exc
    return pd.Series(values, index=df.index, dtype="float64")


def _fit_schema(raw: pd.DataFrame, variables: List[str], sheet: str) -> pd.DataFrame:
    width = len(variables)
    if raw.shape[1] == 0:
        # Nothing below the header rows; the sentinel check reports it.
        return pd.DataFrame(columns=variables, dtype=object)
    if raw.shape[1] > width:
        extra = raw.iloc[:, width:]
        if extra.notna().any().any():
            raise SchemaError(f"Sheet {sheet!r}: expected {width} columns, found {raw.shape[1]} with data")
        raw = raw.iloc[:, :width]
    if raw.shape[1] < width:
        raise SchemaError(f"Sheet {sheet!r}: expected {width} columns, found {raw.shape[1]}")
    raw = raw.copy()
    raw.columns = variables
    return raw


# ---------------- Pipeline stages ----------------
def read_question_sheet(
    source: PathLike,
    sheet: str,
    *,
    variables: Sequence[str] = VARIABLES,
    skip_rows: int = SKIP_ROWS,
) -> pd.DataFrame:
    """Read one question sheet into a wide table tagged with its question number.

    Survey-mode columns and rows without a label are dropped, and the sheet is
    cut off after the first 'Prefer not to say' row.
    """
    variables = list(variables)
    if LABEL_COLUMN not in variables:
        raise SchemaError(f"Schema has no {LABEL_COLUMN!r} column")

    try:
        raw = pd.read_excel(source, sheet_name=sheet, header=None, skiprows=skip_rows, dtype=str)
    except ValueError as exc:
        raise SurveyDataError(f"Could not read sheet {sheet!r} from {source}: {exc}") from exc

    df = _fit_schema(raw, variables, sheet)
    df = df[[c for c in df.columns if not c.startswith(DROP_PREFIX)]]

    labels = df[LABEL_COLUMN].fillna("").astype(str).str.strip()
    keep = labels != ""
    df = df[keep].copy()
    df[LABEL_COLUMN] = labels[keep]
    df = df.reset_index(drop=True)

    hits = df.index[df[LABEL_COLUMN] == SENTINEL_LABEL]
    if len(hits) == 0:
        raise SentinelNotFoundError(f"Sheet {sheet!r}: no {SENTINEL_LABEL!r} row found")
    df = df.iloc[: int(hits[0]) + 1]

    df.insert(0, QUESTION_COLUMN, sheet)
    logger.info("Sheet %s: %d rows kept", sheet, len(df))
    return df


def load_question_sheets(
    source: PathLike,
    sheets: Iterable[str] = SHEETS,
    *,
    variables: Sequence[str] = VARIABLES,
    skip_rows: int = SKIP_ROWS,
) -> pd.DataFrame:
    frames = [read_question_sheet(source, s, variables=variables, skip_rows=skip_rows) for s in sheets]
    if not frames:
        raise ValueError("No question sheets given")
    return pd.concat(frames, ignore_index=True)


def reshape_long(wide: pd.DataFrame) -> pd.DataFrame:
    """One record per (row, demographic column), row-major."""
    value_cols = demographic_columns(wide)
    pairs = {c: split_parameter_subgroup(c) for c in value_cols}

    tmp = wide.reset_index(drop=True)
    tmp["_row"] = range(len(tmp))
    long = tmp.melt(
        id_vars=["_row", QUESTION_COLUMN, LABEL_COLUMN],
        value_vars=value_cols,
        var_name="demographic_parameter_subgroup",
        value_name="responders_n",
    )
    long = long.sort_values("_row", kind="stable").reset_index(drop=True)

    names = long["demographic_parameter_subgroup"]
    long["demographic_parameter"] = names.map(lambda c: pairs[c][0])
    long["subgroup"] = names.map(lambda c: pairs[c][1]).astype(object)
    return long[[QUESTION_COLUMN, LABEL_COLUMN, "demographic_parameter", "subgroup", "responders_n"]]


def split_base_totals(long: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
    is_base = long[LABEL_COLUMN].astype(str).str.startswith(BASE_PREFIX)
    base_totals = (
        long[is_base]
        .drop(columns=[LABEL_COLUMN])
        .rename(columns={"responders_n": "base_sub_total"})
        .reset_index(drop=True)
    )
    responses = long[~is_base].reset_index(drop=True)
    return responses, base_totals


def join_base_totals(responses: pd.DataFrame, base_totals: pd.DataFrame) -> pd.DataFrame:
    dupes = base_totals[base_totals.duplicated(subset=JOIN_KEYS, keep=False)]
    if not dupes.empty:
        first = dupes.iloc[0]
        raise JoinAmbiguityError(
            f"{len(dupes)} base/total rows share a join key, e.g. sheet {first[QUESTION_COLUMN]!r}, "
            f"parameter {first['demographic_parameter']!r}, subgroup {first['subgroup']!r}"
        )

    joined = responses.merge(base_totals, on=JOIN_KEYS, how="left", indicator=True)
    unmatched = int((joined["_merge"] == "left_only").sum())
    if unmatched:
        logger.warning("%d response rows have no base/total row; freq left empty", unmatched)
    return joined.drop(columns=["_merge"])


def normalize_values(joined: pd.DataFrame) -> pd.DataFrame:
    out = joined.copy()
    out["responders_n"] = _parse_count_column(out, "responders_n")
    out["base_sub_total"] = _parse_count_column(out, "base_sub_total")
    out["freq"] = pd.Series(
        [compute_freq(n, b) for n, b in zip(out["responders_n"], out["base_sub_total"])],
        index=out.index,
        dtype="float64",
    )
    out_of_range = int(((out["freq"] < 0) | (out["freq"] > 100)).sum())
    if out_of_range:
        logger.warning("%d rows have freq outside [0, 100]", out_of_range)
    return out


def build_survey_table(
    source: PathLike,
    sheets: Iterable[str] = SHEETS,
    *,
    variables: Sequence[str] = VARIABLES,
    skip_rows: int = SKIP_ROWS,
) -> pd.DataFrame:
    wide = load_question_sheets(source, sheets, variables=variables, skip_rows=skip_rows)
    long = reshape_long(wide)
    logger.info("Reshaped %d sheet rows into %d long rows", len(wide), len(long))

    responses, base_totals = split_base_totals(long)
    logger.info("Split %d base/total rows from %d response rows", len(base_totals), len(responses))

    table = normalize_values(join_base_totals(responses, base_totals))
    table = apply_labels(table)
    return table[list(OUTPUT_COLUMNS)].reset_index(drop=True)


def write_survey_table(table: pd.DataFrame, output: PathLike) -> Path:
    """Write the table as UTF-8 CSV; the target is replaced only on success."""
    output = Path(output)
    output.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{output.name}.", suffix=".tmp", dir=output.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            table.to_csv(fh, index=False, lineterminator="\n")
        os.replace(tmp_name, output)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return output


def run_pipeline(
    source: PathLike,
    output: PathLike,
    sheets: Iterable[str] = SHEETS,
    *,
    variables: Sequence[str] = VARIABLES,
    skip_rows: int = SKIP_ROWS,
) -> Path:
    table = build_survey_table(source, sheets, variables=variables, skip_rows=skip_rows)
    path = write_survey_table(table, output)
    logger.info("Wrote %d rows to %s", len(table), path)
    return path


# ---------------- Dashboard data ----------------
def read_survey_table(path: PathLike) -> pd.DataFrame:
    text_cols = [QUESTION_COLUMN, LABEL_COLUMN, "demographic_parameter", "subgroup"]
    df = pd.read_csv(
        path,
        dtype={c: str for c in text_cols},
        keep_default_na=False,
        na_values=[""],
        encoding="utf-8",
    )
    missing = [c for c in OUTPUT_COLUMNS if c not in df.columns]
    if missing:
        raise SchemaError(f"{path}: missing columns {missing}")
    for col in ["responders_n", "base_sub_total", "freq"]:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    return df[list(OUTPUT_COLUMNS)]


def unique_in_order(values: Iterable[object]) -> List[str]:
    out: List[str] = []
    for v in values:
        if v is None or pd.isna(v):
            continue
        s = str(v)
        if s not in out:
            out.append(s)
    return out


def subgroups_for_parameter(table: pd.DataFrame, parameter: str) -> List[str]:
    if table.empty:
        return []
    return order_subgroups(table.loc[table["demographic_parameter"] == parameter, "subgroup"])


def responses_for_question(table: pd.DataFrame, question: str) -> List[str]:
    if table.empty:
        return []
    return unique_in_order(table.loc[table[QUESTION_COLUMN] == question, LABEL_COLUMN])


def file_signature(path: Path) -> Tuple[str, float]:
    return str(path), path.stat().st_mtime


def _empty_context() -> Dict[str, object]:
    return {
        "files": [],
        "table": pd.DataFrame(columns=list(OUTPUT_COLUMNS)),
        "questions": [],
        "parameters": [],
        "parameter_subgroups": {},
        "question_responses": {},
    }


@lru_cache(maxsize=4)
def _load_dashboard_data_cached(path: str, mtime: float) -> Dict[str, object]:
    table = read_survey_table(path)
    questions = unique_in_order(table[QUESTION_COLUMN])
    parameters = unique_in_order(table["demographic_parameter"])
    return {
        "files": [Path(path).name],
        "table": table,
        "questions": questions,
        "parameters": parameters,
        "parameter_subgroups": {p: subgroups_for_parameter(table, p) for p in parameters},
        "question_responses": {q: responses_for_question(table, q) for q in questions},
    }


def load_dashboard_data(path: Optional[PathLike] = None) -> Dict[str, object]:
    path = Path(path or OUTPUT_PATH)
    if not path.exists():
        logger.warning("Cleaned table %s not found; run scs-build first", path)
        return _empty_context()
    return _load_dashboard_data_cached(*file_signature(path))


def prepare_context(filters: dict | DashboardFilters, data_ctx: Dict[str, object]) -> Dict[str, object]:
    table: pd.DataFrame = data_ctx.get("table", pd.DataFrame(columns=list(OUTPUT_COLUMNS))).copy()
    parameter_subgroups: Dict[str, List[str]] = data_ctx.get("parameter_subgroups") or {}
    question_responses: Dict[str, List[str]] = data_ctx.get("question_responses") or {}

    filt = (
        filters
        if isinstance(filters, DashboardFilters)
        else normalize_filters(
            filters,
            available_subgroups=parameter_subgroups or None,
            available_responses=question_responses or None,
        )
    )

    by_parameter = table[table["demographic_parameter"] == filt.demographic_parameter]
    # Panels only plot rows with a frequency.
    plotted = by_parameter.dropna(subset=["freq"])

    def question_rows(question: str, subgroups: List[str]) -> pd.DataFrame:
        df = plotted[plotted[QUESTION_COLUMN] == question]
        if subgroups:
            df = df[df["subgroup"].isin(subgroups)]
        return df

    knowledge = question_rows(KNOWLEDGE_QUESTION, filt.knowledge_subgroups)
    if filt.knowledge_responses:
        knowledge = knowledge[knowledge[LABEL_COLUMN].isin(filt.knowledge_responses)]

    urgency = question_rows(URGENCY_QUESTION, filt.urgency_subgroups)
    urgency = urgency[urgency[LABEL_COLUMN] == filt.urgency_response]

    negative_impact = question_rows(NEGATIVE_IMPACT_QUESTION, filt.negative_impact_subgroups)
    if filt.negative_impact_responses:
        negative_impact = negative_impact[negative_impact[LABEL_COLUMN].isin(filt.negative_impact_responses)]

    sources = question_rows(SOURCES_QUESTION, [filt.sources_subgroup])
    sources = sources.nlargest(filt.sources_top_n, "freq", keep="all").copy()
    sources["source"] = sources[LABEL_COLUMN].map(strip_source_detail)

    return {
        "filters": filt,
        "table": table,
        "by_parameter": by_parameter,
        "subgroup_choices": parameter_subgroups.get(filt.demographic_parameter, []),
        "knowledge": knowledge,
        "urgency": urgency,
        "sources": sources,
        "negative_impact": negative_impact,
    }
