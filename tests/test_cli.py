"""Tests for the command line interface."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ceagraph import load_overrides_from_toml
from ceagraph._cli.main import app

EXAMPLES = Path(__file__).parent.parent / "examples"

runner = CliRunner()


def _simple_model(**overrides: object) -> dict[str, object]:
    definition: dict[str, object] = {
        "id": "simple",
        "title": "Simple",
        "nodes": [
            {"id": "grant", "kind": "input", "format": "currency", "editable": True},
            {"id": "cost", "kind": "input", "format": "currency"},
            {
                "id": "reached",
                "kind": "output",
                "format": "number",
                "dependencies": ["grant", "cost"],
                "compute": "grant / cost",
            },
        ],
        "regions": [{"id": "r1", "name": "Region One", "baseValues": {"grant": 100, "cost": 4}}],
    }
    definition.update(overrides)
    return definition


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep the repository's own pyproject.toml out of the lookup
    monkeypatch.chdir(tmp_path)


class TestModelsCommand:
    """Tests for the models command."""

    def test_lists_models(self) -> None:
        result = runner.invoke(app, ["models"])
        assert result.exit_code == 0
        assert "amf-itn" in result.output


class TestCalcCommand:
    """Tests for the calc command."""

    def test_json_output(self) -> None:
        result = runner.invoke(app, ["calc", "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["model"] == "amf-itn"
        assert payload["region"] == "guinea"
        assert payload["overrides"] == {}
        assert payload["values"]["deaths_averted_u5"] == pytest.approx(46.94, abs=0.01)

    def test_set_override(self) -> None:
        result = runner.invoke(app, ["calc", "amf-itn", "--set", "grant_size=2000000", "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["overrides"] == {"grant_size": 2_000_000.0}
        assert payload["values"]["num_u5_reached"] == pytest.approx(2_000_000 / 15.19)

    def test_region_option(self) -> None:
        result = runner.invoke(app, ["calc", "smc", "--region", "chad", "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["region"] == "chad"

    def test_table_output(self) -> None:
        result = runner.invoke(app, ["calc", "amf-itn", "--set", "adj_program=0.2"])
        assert result.exit_code == 0, result.output
        assert "Guinea" in result.output
        assert "Overrides" in result.output
        assert "vs base" in result.output
        assert "Summary" in result.output

    def test_model_file(self) -> None:
        result = runner.invoke(app, ["calc", "--file", str(EXAMPLES / "itn_simple.json"), "--region", "illustrative"])
        assert result.exit_code == 0, result.output
        assert "Simple ITN" in result.output

    def test_scenario_and_save(self, tmp_path: Path) -> None:
        saved = tmp_path / "saved.toml"
        result = runner.invoke(
            app,
            [
                "calc",
                "--scenario",
                str(EXAMPLES / "pessimistic_guinea.toml"),
                "--set",
                "adj_program=0.2",
                "--save-scenario",
                str(saved),
            ],
        )
        assert result.exit_code == 0, result.output
        scenario = load_overrides_from_toml(saved)
        assert scenario.region == "guinea"
        assert scenario.overrides == {
            "grant_size": 2_000_000.0,
            "effect_on_deaths": 0.18,
            "adj_funging": -0.3,
            "adj_program": 0.2,
        }

    def test_non_finite_values_are_null_in_json(self) -> None:
        result = runner.invoke(app, ["calc", "amf-itn", "--set", "grant_size=0", "--json"])
        assert result.exit_code == 0, result.output
        values = json.loads(result.stdout)["values"]
        assert values["num_u5_reached"] == 0
        assert values["cost_per_death_averted"] is None

    def test_narrative_with_unknown_reference(self, tmp_path: Path) -> None:
        path = tmp_path / "model.json"
        path.write_text(json.dumps(_simple_model(narrative="{v.nope:int} reached in {region}")))
        result = runner.invoke(app, ["calc", "--file", str(path)])
        assert result.exit_code == 1
        assert "Narrative failed" in result.output
        assert "nope" in result.output

    def test_unknown_model(self) -> None:
        result = runner.invoke(app, ["calc", "no-such-model"])
        assert result.exit_code == 1
        assert "Unknown model" in result.output

    def test_unknown_region(self) -> None:
        result = runner.invoke(app, ["calc", "--region", "atlantis"])
        assert result.exit_code == 1
        assert "Region not found" in result.output

    def test_unknown_override_node(self) -> None:
        result = runner.invoke(app, ["calc", "--set", "nope=1"])
        assert result.exit_code == 1
        assert "Node not found" in result.output

    def test_malformed_override(self) -> None:
        result = runner.invoke(app, ["calc", "--set", "grant_size"])
        assert result.exit_code == 2

    def test_model_and_file_conflict(self) -> None:
        result = runner.invoke(app, ["calc", "amf-itn", "--file", str(EXAMPLES / "itn_simple.json")])
        assert result.exit_code == 1

    def test_broken_model_file(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"id": "broken", "nodes": [], "regions": []}))
        result = runner.invoke(app, ["calc", "--file", str(path)])
        assert result.exit_code == 1
        assert "Missing required field: title" in result.output


class TestConfig:
    """Tests for defaults taken from [tool.ceagraph]."""

    def test_model_and_region_from_config(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.ceagraph]\nmodel = "smc"\nregion = "chad"\n',
        )
        result = runner.invoke(app, ["calc", "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["model"] == "smc"
        assert payload["region"] == "chad"

    def test_command_line_overrides_config(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[tool.ceagraph]\nmodel = "smc"\nregion = "chad"\n')
        result = runner.invoke(app, ["calc", "--region", "burkina_faso", "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["region"] == "burkina_faso"

    def test_invalid_config(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.ceagraph]\nregion = 1\n")
        result = runner.invoke(app, ["calc"])
        assert result.exit_code == 1
        assert "expected string" in result.output


class TestCheckCommand:
    """Tests for the check command."""

    def test_valid_model(self) -> None:
        result = runner.invoke(app, ["check", "smc"])
        assert result.exit_code == 0, result.output
        assert "Model is valid" in result.output

    def test_cycle_and_unresolved_dependencies(self, tmp_path: Path) -> None:
        path = tmp_path / "cyclic.json"
        path.write_text(
            json.dumps(
                {
                    "id": "cyclic",
                    "title": "Cyclic",
                    "nodes": [
                        {"id": "x", "kind": "calculation", "format": "number", "dependencies": ["y"], "compute": "y"},
                        {"id": "y", "kind": "calculation", "format": "number", "dependencies": ["x"], "compute": "x"},
                        {"id": "z", "kind": "output", "format": "number", "dependencies": ["w"], "compute": "w"},
                    ],
                    "regions": [{"id": "r", "name": "R", "baseValues": {}}],
                },
            ),
        )
        result = runner.invoke(app, ["check", "--file", str(path)])
        assert result.exit_code == 1
        assert "Cycle detected" in result.output
        assert "unresolved" in result.output

    def test_leaf_without_base_value(self, tmp_path: Path) -> None:
        path = tmp_path / "model.json"
        regions = [{"id": "r1", "name": "Region One", "baseValues": {"grant": 100}}]
        path.write_text(json.dumps(_simple_model(regions=regions)))
        result = runner.invoke(app, ["check", "--file", str(path)])
        assert result.exit_code == 1
        assert "node 'cost' has no base value" in result.output

    def test_derived_kind_without_compute_rule(self, tmp_path: Path) -> None:
        path = tmp_path / "model.json"
        nodes = [
            {"id": "grant", "kind": "input", "format": "currency"},
            {"id": "cost", "kind": "input", "format": "currency"},
            {"id": "reached", "kind": "output", "format": "number"},
        ]
        regions = [{"id": "r1", "name": "Region One", "baseValues": {"grant": 100, "cost": 4, "reached": 25}}]
        path.write_text(json.dumps(_simple_model(nodes=nodes, regions=regions)))
        result = runner.invoke(app, ["check", "--file", str(path)])
        assert result.exit_code == 1
        assert "Node 'reached' has kind 'output' but no compute rule" in result.output

    def test_narrative_with_unknown_reference(self, tmp_path: Path) -> None:
        path = tmp_path / "model.json"
        path.write_text(json.dumps(_simple_model(narrative="{v.nope:int} reached in {region}")))
        result = runner.invoke(app, ["check", "--file", str(path)])
        assert result.exit_code == 1
        assert "narrative references unknown ids: nope" in result.output

    def test_simple_model_is_valid(self, tmp_path: Path) -> None:
        path = tmp_path / "model.json"
        path.write_text(json.dumps(_simple_model(narrative="{v.reached:int} reached in {region}")))
        result = runner.invoke(app, ["check", "--file", str(path)])
        assert result.exit_code == 0, result.output


class TestSensitivityCommand:
    """Tests for the sensitivity command."""

    def test_ranks_inputs(self) -> None:
        result = runner.invoke(app, ["sensitivity", "--target", "final_ce"])
        assert result.exit_code == 0, result.output
        assert "Sensitivity of" in result.output

    def test_unknown_target(self) -> None:
        result = runner.invoke(app, ["sensitivity", "--target", "nope"])
        assert result.exit_code == 1
        assert "Node not found" in result.output


class TestNodeCommand:
    """Tests for the node command."""

    def test_node_detail(self) -> None:
        result = runner.invoke(app, ["node", "initial_ce"])
        assert result.exit_code == 0, result.output
        assert "Dependencies (4 direct)" in result.output
        assert "Dependents (1 direct)" in result.output

    def test_downstream_count(self) -> None:
        result = runner.invoke(app, ["node", "effect_on_deaths"])
        assert result.exit_code == 0, result.output
        assert "Dependents (1 direct)" in result.output
        assert "5 downstream in total" in result.output

    def test_dependency_tree(self) -> None:
        result = runner.invoke(app, ["node", "num_u5_reached", "--tree"])
        assert result.exit_code == 0, result.output
        assert "cost_per_u5_reached" in result.output

    def test_unknown_node(self) -> None:
        result = runner.invoke(app, ["node", "nope"])
        assert result.exit_code == 1
        assert "Node not found: nope" in result.output
