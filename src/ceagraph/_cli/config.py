"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import cast


class ConfigError(Exception):
    """Error in ceagraph configuration."""


@dataclass(slots=True, frozen=True)
class CatalogSource:
    """A built-in model, by id."""

    model_id: str


@dataclass(slots=True, frozen=True)
class FileSource:
    """A model loaded from a JSON file."""

    file: Path


ModelSource = CatalogSource | FileSource


@dataclass(slots=True, frozen=True)
class CeagraphConfig:
    """Configuration loaded from pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    model: ModelSource | None = None
    region: str | None = None
    scenario: Path | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def _resolve(path_value: str, project_root: Path) -> Path:
    path = Path(path_value)
    return path if path.is_absolute() else project_root / path


def _parse_model_source(value: object, project_root: Path) -> ModelSource:
    """Parse the model field: a catalog id or a ``{ file = "..." }`` table.

    Raises:
        ConfigError: If the value format is invalid

    """
    if isinstance(value, str):
        if not value:
            msg = "Invalid [tool.ceagraph].model: expected a non-empty model id"
            raise ConfigError(msg)
        return CatalogSource(model_id=value)

    if isinstance(value, dict):
        value_dict = cast("dict[str, object]", value)
        file_value = value_dict.get("file")
        if not isinstance(file_value, str):
            msg = "Invalid [tool.ceagraph].model.file: expected string path"
            raise ConfigError(msg)
        return FileSource(file=_resolve(file_value, project_root))

    msg = "Invalid [tool.ceagraph].model configuration. Expected string or table with 'file' key."
    raise ConfigError(msg)


def load_config(pyproject_path: Path) -> CeagraphConfig:
    """Load and validate [tool.ceagraph] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed CeagraphConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("ceagraph", {})
    if not section:
        return CeagraphConfig(project_root=project_root)

    model_source: ModelSource | None = None
    if "model" in section:
        model_source = _parse_model_source(section["model"], project_root)

    region = section.get("region")
    if region is not None and not isinstance(region, str):
        msg = "Invalid [tool.ceagraph].region: expected string"
        raise ConfigError(msg)

    scenario: Path | None = None
    if "scenario" in section:
        scenario_value = section["scenario"]
        if not isinstance(scenario_value, str):
            msg = "Invalid [tool.ceagraph].scenario: expected string path"
            raise ConfigError(msg)
        scenario = _resolve(scenario_value, project_root)

    return CeagraphConfig(
        model=model_source,
        region=region,
        scenario=scenario,
        project_root=project_root,
    )


def get_config() -> CeagraphConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        CeagraphConfig (may be empty if no pyproject.toml or no [tool.ceagraph] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return CeagraphConfig()
    return load_config(pyproject_path)
