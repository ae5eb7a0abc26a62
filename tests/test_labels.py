"""Tests for display labels and dashboard orderings."""

import pandas as pd

from survey_core.labels import (
    OVERALL_LABEL,
    PARAMETER_LABELS,
    SUBGROUP_LABELS,
    SUBGROUP_ORDER,
    apply_labels,
    label_parameter,
    label_subgroup,
    order_subgroups,
    strip_source_detail,
)


class TestLookupTables:
    def test_table_sizes(self):
        assert len(PARAMETER_LABELS) == 10
        assert len(SUBGROUP_LABELS) == 31

    def test_every_subgroup_label_has_a_display_position(self):
        assert set(SUBGROUP_LABELS.values()) | {OVERALL_LABEL} == set(SUBGROUP_ORDER)


class TestLabelling:
    def test_sex_codes(self):
        assert label_subgroup("man") == "Men"
        assert label_subgroup("woman") == "Women"

    def test_unmapped_codes_pass_through(self):
        assert label_subgroup("nonbinary") == "nonbinary"
        assert label_parameter("ethnicity") == "ethnicity"

    def test_missing_subgroup_is_overall(self):
        assert label_subgroup(None) == OVERALL_LABEL
        assert label_subgroup(float("nan")) == OVERALL_LABEL

    def test_overall_parameter(self):
        assert label_parameter("overall") == OVERALL_LABEL

    def test_apply_labels(self):
        df = pd.DataFrame(
            {
                "demographic_parameter": ["overall", "income", "mode"],
                "subgroup": [None, "26000_52000", "online"],
            }
        )
        out = apply_labels(df)
        assert list(out["demographic_parameter"]) == [OVERALL_LABEL, "Income", "Survey Mode Completion"]
        assert list(out["subgroup"]) == [OVERALL_LABEL, "From £26,000 to less than £52,000", "Online"]
        # input untouched
        assert df["demographic_parameter"].iloc[0] == "overall"


class TestOrdering:
    def test_known_order_then_unknown(self):
        values = ["Women", "Unknown band", "Men", OVERALL_LABEL, "Women", None]
        assert order_subgroups(values) == [OVERALL_LABEL, "Men", "Women", "Unknown band"]

    def test_age_bands_follow_display_order(self):
        values = ["70 and above", "From 16 to 34", "Under 55", "35 and above"]
        assert order_subgroups(values) == ["From 16 to 34", "35 and above", "Under 55", "70 and above"]

    def test_strip_source_detail(self):
        assert strip_source_detail("Television (BBC, STV)") == "Television"
        assert strip_source_detail("Radio") == "Radio"
