"""Tests for scenario files."""

from pathlib import Path

import pytest

from ceagraph import ScenarioFile, dump_overrides_to_toml, load_overrides_from_toml

EXAMPLE_SCENARIO = Path(__file__).parent.parent / "examples" / "pessimistic_guinea.toml"


class TestLoadOverrides:
    """Tests for load_overrides_from_toml."""

    def test_region_and_overrides(self, tmp_path: Path) -> None:
        path = tmp_path / "scenario.toml"
        path.write_text(
            """
region = "chad"

[overrides]
grant_size = 2000000
effect_on_deaths = 0.18
""",
        )
        scenario = load_overrides_from_toml(path)
        assert scenario.region == "chad"
        assert scenario.overrides == {"grant_size": 2_000_000.0, "effect_on_deaths": 0.18}
        assert isinstance(scenario.overrides["grant_size"], float)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "scenario.toml"
        path.write_text("")
        assert load_overrides_from_toml(path) == ScenarioFile()

    def test_example_scenario(self) -> None:
        scenario = load_overrides_from_toml(EXAMPLE_SCENARIO)
        assert scenario.region == "guinea"
        assert scenario.overrides["effect_on_deaths"] == 0.18

    @pytest.mark.parametrize(
        ("contents", "message"),
        [
            ('[overrides]\ngrant_size = "big"\n', "Override 'grant_size'.*must be a finite number"),
            ("[overrides]\nflag = true\n", "Override 'flag'"),
            ("[overrides]\nx = nan\n", "Override 'x'"),
            ("overrides = 3\n", "'overrides'.*must be a table"),
            ("region = 1\n", "'region'.*must be a string"),
            ("region = \n", "Invalid TOML"),
        ],
    )
    def test_invalid_contents(self, tmp_path: Path, contents: str, message: str) -> None:
        path = tmp_path / "scenario.toml"
        path.write_text(contents)
        with pytest.raises(ValueError, match=message):
            load_overrides_from_toml(path)


class TestDumpOverrides:
    """Tests for dump_overrides_to_toml."""

    def test_written_file_loads_back(self, tmp_path: Path) -> None:
        path = tmp_path / "out.toml"
        scenario = ScenarioFile(region="guinea", overrides={"adj_program": 0.2})
        dump_overrides_to_toml(scenario, path)
        assert load_overrides_from_toml(path) == scenario

    def test_without_region(self, tmp_path: Path) -> None:
        path = tmp_path / "out.toml"
        dump_overrides_to_toml(ScenarioFile(overrides={"grant_size": 5.0}), path)
        assert "region" not in path.read_text()
