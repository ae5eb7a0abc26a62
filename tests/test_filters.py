"""Tests for dashboard filter normalization."""

from survey_core.filters import DashboardFilters, normalize_filters

SUBGROUPS = {
    "Overall Population": ["Overall Population"],
    "Biological Sex": ["Men", "Women"],
}

RESPONSES = {
    "T1": ["A great deal", "A little"],
    "T3": ["Climate change is an immediate and urgent problem", "Not a problem"],
    "T11": ["Often", "Never"],
}


class TestDefaults:
    def test_empty_input(self):
        assert normalize_filters({}) == DashboardFilters()

    def test_top_n_clamped(self):
        assert normalize_filters({"sources_top_n": 1}).sources_top_n == 3
        assert normalize_filters({"sources_top_n": 50}).sources_top_n == 11
        assert normalize_filters({"sources_top_n": "7"}).sources_top_n == 7
        assert normalize_filters({"sources_top_n": "many"}).sources_top_n == 5

    def test_single_string_becomes_list(self):
        f = normalize_filters({"knowledge_subgroups": "Men"})
        assert f.knowledge_subgroups == ["Men"]


class TestCrossFiltering:
    def test_subgroups_must_belong_to_parameter(self):
        f = normalize_filters(
            {"demographic_parameter": "Biological Sex", "knowledge_subgroups": ["Men", "Urban (All)"]},
            available_subgroups=SUBGROUPS,
        )
        assert f.knowledge_subgroups == ["Men"]

    def test_unknown_parameter_falls_back_to_overall(self):
        f = normalize_filters({"demographic_parameter": "Shoe Size"}, available_subgroups=SUBGROUPS)
        assert f.demographic_parameter == "Overall Population"

    def test_sources_subgroup_defaults_to_first_valid(self):
        f = normalize_filters(
            {"demographic_parameter": "Biological Sex", "sources_subgroup": "Overall Population"},
            available_subgroups=SUBGROUPS,
        )
        assert f.sources_subgroup == "Men"

    def test_responses_filtered_to_question(self):
        f = normalize_filters(
            {"knowledge_responses": ["A little", "Often"], "negative_impact_responses": ["Often"]},
            available_responses=RESPONSES,
        )
        assert f.knowledge_responses == ["A little"]
        assert f.negative_impact_responses == ["Often"]

    def test_urgency_statement_defaults(self):
        f = normalize_filters({"urgency_response": "Something else"}, available_responses=RESPONSES)
        assert f.urgency_response == "Climate change is an immediate and urgent problem"
        f = normalize_filters({"urgency_response": "Not a problem"}, available_responses=RESPONSES)
        assert f.urgency_response == "Not a problem"
