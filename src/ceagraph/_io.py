import logging
import math
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

import tomli_w

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScenarioFile:
    """A saved scenario: an optional region and a set of overrides."""

    region: str | None = None
    overrides: dict[str, float] = field(default_factory=dict)


def _parse_overrides(raw: object, path: Path) -> dict[str, float]:
    if not isinstance(raw, dict):
        msg = f"'overrides' in {path} must be a table"
        raise ValueError(msg)  # noqa: TRY004

    overrides: dict[str, float] = {}
    for key, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, int | float) or not math.isfinite(value):
            msg = f"Override '{key}' in {path} must be a finite number, got {value!r}"
            raise ValueError(msg)
        overrides[key] = float(value)
    return overrides


def load_overrides_from_toml(path: Path) -> ScenarioFile:
    """Load a scenario from a TOML file.

    The file may contain a ``region`` key and an ``[overrides]`` table
    mapping node ids to numbers::

        region = "guinea"

        [overrides]
        effect_on_deaths = 0.18

    Raises:
        ValueError: If the file is not valid TOML or has values of the wrong type.
        OSError: If the file cannot be read.

    """
    with path.open("rb") as f:
        try:
            contents = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {path}: {e}"
            raise ValueError(msg) from e

    region = contents.get("region")
    if region is not None and not isinstance(region, str):
        msg = f"'region' in {path} must be a string"
        raise ValueError(msg)

    overrides = _parse_overrides(contents.get("overrides", {}), path)
    logger.debug("Loaded %d overrides from %s", len(overrides), path)
    return ScenarioFile(region=region, overrides=overrides)


def dump_overrides_to_toml(scenario: ScenarioFile, path: Path) -> None:
    """Write a scenario to a TOML file readable by ``load_overrides_from_toml``."""
    contents: dict[str, object] = {}
    if scenario.region is not None:
        contents["region"] = scenario.region
    contents["overrides"] = dict(scenario.overrides)

    with path.open("wb") as f:
        tomli_w.dump(contents, f)
    logger.debug("Wrote %d overrides to %s", len(scenario.overrides), path)
