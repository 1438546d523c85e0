"""Tests for the built-in models."""

import math

import pytest

from ceagraph import DEFAULT_MODEL_ID, CEAModel, DependencyGraph, NodeKind, evaluate, get_model, list_models
from ceagraph._cli.query import check_model


class TestCatalog:
    """Tests for catalog lookup."""

    def test_default_model_first(self) -> None:
        models = list_models()
        assert models[0].id == DEFAULT_MODEL_ID == "amf-itn"
        assert [m.id for m in models] == ["amf-itn", "new-incentives", "taimaka", "smc"]

    def test_get_model(self) -> None:
        assert get_model("smc").title == "GiveWell Malaria Consortium Cost-Effectiveness Analysis"

    def test_unknown_model_falls_back_to_default(self) -> None:
        assert get_model("no-such-model").id == DEFAULT_MODEL_ID


@pytest.mark.parametrize("model", list_models(), ids=lambda m: m.id)
class TestBuiltInModels:
    """Consistency checks that every built-in model must pass."""

    def test_graph_is_valid_for_every_region(self, model: CEAModel) -> None:
        assert check_model(model) == []

    def test_every_leaf_has_a_base_value(self, model: CEAModel) -> None:
        for region in model.regions:
            for node in model.nodes:
                if not node.is_derived:
                    assert node.id in region.base_values, (region.id, node.id)

    def test_evaluates_to_finite_values(self, model: CEAModel) -> None:
        for region in model.regions:
            values = evaluate(model.nodes, region.base_values)
            assert all(math.isfinite(values[node_id]) for node_id in model.node_ids), region.id

    def test_layout_sections_cover_every_node_once(self, model: CEAModel) -> None:
        listed = [node_id for section in model.layout_sections for node_id in section.node_ids]
        assert sorted(listed) == sorted(model.node_ids)

    def test_outputs_have_no_dependents(self, model: CEAModel) -> None:
        graph = DependencyGraph.from_nodes(model.nodes)
        for node in model.get_nodes_by_kind(NodeKind.OUTPUT):
            assert graph.successors(node.id) == ()

    def test_derived_kinds_have_compute_rules(self, model: CEAModel) -> None:
        for node in model.nodes:
            assert node.is_derived == node.kind.is_derived, node.id

    def test_narrative(self, model: CEAModel) -> None:
        region = model.default_region
        assert model.narrative is not None
        text = model.narrative(evaluate(model.nodes, region.base_values), region.name)
        assert region.name in text


class TestAmfItn:
    """Figures of the AMF ITN model."""

    def test_guinea_figures(self) -> None:
        model = get_model("amf-itn")
        values = evaluate(model.nodes, model.get_region("guinea").base_values)
        assert values["num_u5_reached"] == pytest.approx(1_000_000 / 15.19)
        assert values["deaths_averted_u5"] == pytest.approx(46.94, abs=0.01)
        assert values["cost_per_death_averted"] == pytest.approx(1_000_000 / values["deaths_averted_u5"])

    def test_zero_grant_gives_nan_cost_per_death(self) -> None:
        model = get_model("amf-itn")
        values = evaluate(model.nodes, model.get_region("guinea").base_values, {"grant_size": 0})
        assert values["num_u5_reached"] == 0
        assert math.isnan(values["cost_per_death_averted"])

    def test_full_negative_outcome_adjustment_gives_infinite_cost(self) -> None:
        model = get_model("amf-itn")
        values = evaluate(model.nodes, model.get_region("guinea").base_values, {"overall_outcome_adj": -1})
        assert values["final_cost_per_life"] == math.inf


class TestMalariaConsortiumSmc:
    """Figures of the SMC model."""

    def test_burkina_faso_figures(self) -> None:
        model = get_model("smc")
        values = evaluate(model.nodes, model.get_region("burkina_faso").base_values)
        children = 10_000_000 / 6.332846
        deaths = children * 0.004748327 * 0.70 * 0.7936950
        assert values["additional_children"] == pytest.approx(children)
        assert values["deaths_averted"] == pytest.approx(deaths)
        assert values["initial_ce"] == pytest.approx(deaths * 116.25262 / 10_000_000 / 0.00335)
        assert values["final_ce"] == pytest.approx(
            values["initial_ce"] * (1 + 0.06857112 + 0.31328741) * (1 + 0.191) * (1 - 0.08) * (1 - 0.40038118),
        )


class TestNewIncentives:
    """Figures of the New Incentives model."""

    def test_bauchi_figures(self) -> None:
        model = get_model("new-incentives")
        values = evaluate(model.nodes, model.get_region("bauchi").base_values)
        enrolled = 1_000_000 / 18.2126
        increase = 0.2931 * 0.4368
        vaccinated = enrolled * increase / ((1 - 0.4368) + increase)
        assert values["children_enrolled"] == pytest.approx(enrolled)
        assert values["children_vaccinated"] == pytest.approx(vaccinated)
        assert values["deaths_averted_u5"] == pytest.approx(vaccinated * 0.05654 * 0.5226)
        assert values["deaths_averted_5_14"] == pytest.approx(vaccinated * 0.004314 * 0.5100 * 0.995**10)

    def test_states(self) -> None:
        model = get_model("new-incentives")
        assert model.region_label == "State"
        assert [region.id for region in model.regions] == [
            "bauchi",
            "gombe",
            "jigawa",
            "kaduna",
            "kano",
            "katsina",
            "kebbi",
        ]

    def test_mortality_risks_are_not_nodes(self) -> None:
        model = get_model("new-incentives")
        assert not model.has_node("_death_rate_u5")
        assert "_death_rate_u5" in model.default_region.base_values

    def test_zero_cost_per_infant_gives_infinite_enrollment(self) -> None:
        model = get_model("new-incentives")
        values = evaluate(model.nodes, model.default_region.base_values, {"cost_per_infant": 0})
        assert values["children_enrolled"] == math.inf


class TestTaimaka:
    """Figures of the Taimaka model."""

    def test_gombe_figures(self) -> None:
        model = get_model("taimaka")
        values = evaluate(model.nodes, model.get_region("gombe").base_values)
        treated = 4_787_985 / 105.4065076
        additional = treated * (1 - 0.0465520683)
        rate = 0.1321771 * 0.3286322691
        deaths = additional * rate * 0.5949166667 + (treated - additional) * rate * 0.09697699304
        assert values["children_treated"] == pytest.approx(treated)
        assert values["additional_children"] == pytest.approx(additional)
        assert values["deaths_averted"] == pytest.approx(deaths)
        assert values["total_value"] == pytest.approx(deaths * 1.2015 * 117.59366)
        assert values["cost_per_life_saved"] == pytest.approx(
            4_787_985 / (deaths * (1 - 0.02045637367) * (1 - 0.09906706939)),
        )

    def test_only_adjustments_and_grant_are_editable(self) -> None:
        model = get_model("taimaka")
        assert [node.id for node in model.nodes if node.editable] == [
            "grant_size",
            "adj_program",
            "adj_leverage_funging",
        ]
