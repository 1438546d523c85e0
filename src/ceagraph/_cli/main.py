import json
import logging
import math
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from ceagraph._catalog import DEFAULT_MODEL_ID, get_model, has_model, list_models
from ceagraph._expr import ExpressionError
from ceagraph._graph import CycleError
from ceagraph._io import ScenarioFile, dump_overrides_to_toml, load_overrides_from_toml
from ceagraph._loader import ModelLoadError, load_model_file
from ceagraph._model import CEAModel, NodeKind
from ceagraph._sensitivity import sensitivity as run_sensitivity
from ceagraph._session import Session

from .config import CatalogSource, CeagraphConfig, ConfigError, FileSource, get_config
from .query import check_model, get_dependency_tree, get_node_detail, get_section_rows
from .render import (
    format_relative_change,
    render_changes,
    render_model_table,
    render_narrative,
    render_node_detail,
    render_sensitivity,
    render_tree,
    render_value_sections,
)

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

ModelArgument = Annotated[
    str | None,
    typer.Argument(help="Built-in model id (see 'ceagraph models')"),
]
FileOption = Annotated[
    Path | None,
    typer.Option("-f", "--file", help="Path to a model definition JSON file"),
]
RegionOption = Annotated[
    str | None,
    typer.Option("-r", "--region", help="Region id (defaults to the model's first region)"),
]
SetOption = Annotated[
    list[str] | None,
    typer.Option("-s", "--set", help="Override a node value, as id=value (repeatable)"),
]
ScenarioOption = Annotated[
    Path | None,
    typer.Option("--scenario", help="Path to a scenario TOML file with region and overrides"),
]


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Ceagraph CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]✗ {escape(message)}[/red]")
    raise typer.Exit(code=1)


def _error_message(error: Exception) -> str:
    # KeyError wraps its message in quotes
    if isinstance(error, KeyError) and error.args:
        return str(error.args[0])
    return str(error)


def _load_config() -> CeagraphConfig:
    try:
        return get_config()
    except ConfigError as e:
        _fail(str(e))


def _resolve_model(model_id: str | None, file: Path | None, config: CeagraphConfig) -> CEAModel:
    """Pick the model from the CLI arguments, falling back to the config and then the default."""
    if file is not None and model_id is not None:
        _fail("Give either a model id or --file, not both")

    if file is None and model_id is None:
        match config.model:
            case FileSource(file=config_file):
                file = config_file
            case CatalogSource(model_id=config_id):
                model_id = config_id
            case None:
                model_id = DEFAULT_MODEL_ID

    if file is not None:
        err_console.print(f"[cyan]Loading model from:[/cyan] {file}")
        try:
            return load_model_file(file)
        except (ModelLoadError, OSError) as e:
            _fail(str(e))

    assert model_id is not None
    if not has_model(model_id):
        available = ", ".join(model.id for model in list_models())
        _fail(f"Unknown model '{model_id}'. Available models: {available}")
    return get_model(model_id)


def _parse_assignment(text: str) -> tuple[str, float]:
    """Parse an ``id=value`` override."""
    node_id, sep, raw_value = text.partition("=")
    node_id = node_id.strip()
    if not sep or not node_id:
        msg = f"Invalid override '{text}'. Expected format: id=value"
        raise typer.BadParameter(msg)
    try:
        value = float(raw_value)
    except ValueError:
        msg = f"Invalid value in override '{text}': expected a number"
        raise typer.BadParameter(msg) from None
    if not math.isfinite(value):
        msg = f"Invalid value in override '{text}': expected a finite number"
        raise typer.BadParameter(msg)
    return node_id, value


def _json_number(value: float) -> float | None:
    # JSON has no NaN or Infinity
    return value if math.isfinite(value) else None


def _build_session(
    model: CEAModel,
    *,
    region: str | None,
    scenario: Path | None,
    assignments: list[str] | None,
    config: CeagraphConfig,
) -> Session:
    """Create a session from the region, scenario file and --set options.

    Precedence, lowest first: config file, scenario file, command line.
    """
    scenario_path = scenario or config.scenario
    scenario_file = ScenarioFile()
    if scenario_path is not None:
        err_console.print(f"[cyan]Loading scenario from:[/cyan] {scenario_path}")
        try:
            scenario_file = load_overrides_from_toml(scenario_path)
        except (ValueError, OSError) as e:
            _fail(str(e))

    region_id = region or scenario_file.region or config.region
    try:
        session = Session(model, region_id)
        for node_id, value in scenario_file.overrides.items():
            _set_override(session, node_id, value)
        for assignment in assignments or []:
            _set_override(session, *_parse_assignment(assignment))
    except (KeyError, ValueError) as e:
        _fail(_error_message(e))
    return session


def _set_override(session: Session, node_id: str, value: float) -> None:
    node = session.model.get_node(node_id)
    if not node.editable:
        logger.warning("Node '%s' is not editable; the override may be ignored", node_id)
    session.set_override(node_id, value)


@app.command()
def models() -> None:
    """List the built-in models."""
    render_model_table(list_models(), DEFAULT_MODEL_ID, out_console)


@app.command()
def calc(  # noqa: PLR0913
    model_id: ModelArgument = None,
    *,
    file: FileOption = None,
    region: RegionOption = None,
    assignments: SetOption = None,
    scenario: ScenarioOption = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the values as JSON instead of a table"),
    ] = False,
    save_scenario: Annotated[
        Path | None,
        typer.Option("--save-scenario", help="Write the region and overrides to a scenario TOML file"),
    ] = None,
) -> None:
    """Evaluate a model for one region and print every node value."""
    config = _load_config()
    model = _resolve_model(model_id, file, config)
    session = _build_session(model, region=region, scenario=scenario, assignments=assignments, config=config)

    try:
        values = session.current_values()
    except (CycleError, ArithmeticError, ValueError) as e:
        _fail(f"Evaluation failed: {e}")

    if save_scenario is not None:
        dump_overrides_to_toml(ScenarioFile(session.region.id, session.overrides), save_scenario)
        err_console.print(f"[cyan]Scenario written to:[/cyan] {save_scenario}")

    if as_json:
        payload = {
            "model": model.id,
            "region": session.region.id,
            "overrides": session.overrides,
            "values": {node_id: _json_number(values[node_id]) for node_id in model.node_ids},
        }
        out_console.print_json(json.dumps(payload))
        return

    out_console.print(f"[bold]{escape(model.title)}[/bold]")
    if model.subtitle:
        out_console.print(f"[dim]{escape(model.subtitle)}[/dim]")
    out_console.print(f"[cyan]{escape(model.region_label)}:[/cyan] {escape(session.region.name)}")
    out_console.print()

    has_overrides = bool(session.overrides)
    render_value_sections(get_section_rows(session), out_console, show_base=has_overrides)
    out_console.print()

    if has_overrides:
        render_changes(session.changes(), out_console)
        for node in model.get_nodes_by_kind(NodeKind.OUTPUT):
            change = format_relative_change(session.relative_change(node.id))
            label = escape(node.display_label)
            out_console.print(f"[bold]{label}:[/bold] {session.format_node_value(node.id)} ({change})")
        out_console.print()

    try:
        narrative = session.narrative()
    except ExpressionError as e:
        _fail(f"Narrative failed: {e}")
    if narrative:
        render_narrative(narrative, out_console)


@app.command()
def check(
    model_id: ModelArgument = None,
    *,
    file: FileOption = None,
) -> None:
    """Check a model's dependency graph without evaluating it."""
    config = _load_config()
    model = _resolve_model(model_id, file, config)

    err_console.print("[cyan]Validating dependencies...[/cyan]")
    errors = check_model(model)

    summary = (
        f"[cyan]Nodes:[/cyan] {len(model.nodes)}\n"
        f"[cyan]Regions:[/cyan] {len(model.regions)}\n"
        f"[cyan]Layout sections:[/cyan] {len(model.layout_sections)}\n"
        f"[cyan]Narrative:[/cyan] {'yes' if model.narrative else 'no'}"
    )
    out_console.print(Panel(summary, title=f"[bold]Model: {escape(model.id)}[/bold]", border_style="cyan"))

    if errors:
        for error in errors:
            err_console.print(f"  [red]•[/red] {escape(error)}")
        _fail(f"Model has {len(errors)} problem(s)")

    err_console.print("[green]✓ Model is valid[/green]")


@app.command()
def sensitivity(  # noqa: PLR0913
    model_id: ModelArgument = None,
    *,
    target: Annotated[
        str,
        typer.Option("-t", "--target", help="Id of the node to observe"),
    ],
    step: Annotated[
        float,
        typer.Option("--step", help="Perturbation step (relative, or absolute for adjustments)"),
    ] = 0.1,
    file: FileOption = None,
    region: RegionOption = None,
    assignments: SetOption = None,
    scenario: ScenarioOption = None,
) -> None:
    """Rank the editable inputs by how much they move a target node."""
    config = _load_config()
    model = _resolve_model(model_id, file, config)
    session = _build_session(model, region=region, scenario=scenario, assignments=assignments, config=config)

    try:
        rows = run_sensitivity(session, target, step=step)
    except (KeyError, CycleError, ArithmeticError, ValueError) as e:
        _fail(_error_message(e))

    target_node = model.get_node(target)
    out_console.print(
        f"[bold]Sensitivity of {escape(target_node.display_label)}[/bold] "
        f"({escape(session.region.name)}, step {step:g})",
    )
    render_sensitivity(rows, target_node, out_console)


@app.command()
def node(  # noqa: PLR0913
    node_id: Annotated[str, typer.Argument(help="Id of the node to show")],
    model_id: ModelArgument = None,
    *,
    file: FileOption = None,
    region: RegionOption = None,
    tree: Annotated[
        bool,
        typer.Option("--tree", help="Show the full dependency tree"),
    ] = False,
    depth: Annotated[
        int | None,
        typer.Option("--depth", help="Maximum depth of the dependency tree"),
    ] = None,
) -> None:
    """Show details about one node."""
    config = _load_config()
    model = _resolve_model(model_id, file, config)
    session = _build_session(model, region=region, scenario=None, assignments=None, config=config)

    try:
        detail = get_node_detail(session, node_id)
    except (KeyError, CycleError) as e:
        _fail(_error_message(e))

    render_node_detail(detail, out_console)
    if tree:
        out_console.print()
        render_tree(get_dependency_tree(model, node_id, max_depth=depth), out_console)


def main() -> None:
    app()
