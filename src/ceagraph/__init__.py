"""Dependency-graph engine for interactive cost-effectiveness analyses."""

__all__ = [
    "DEFAULT_MODEL_ID",
    "CEAModel",
    "CycleError",
    "DependencyGraph",
    "Expression",
    "ExpressionError",
    "LayoutSection",
    "ModelLoadError",
    "NarrativeTemplate",
    "Node",
    "NodeKind",
    "OverrideChange",
    "Region",
    "ScenarioFile",
    "SensitivityRow",
    "Session",
    "ValueFormat",
    "compile_expression",
    "compile_narrative",
    "dump_overrides_to_toml",
    "evaluate",
    "evaluation_order",
    "format_node_value",
    "format_signed_percentage",
    "format_value",
    "get_model",
    "list_models",
    "load_model",
    "load_model_file",
    "load_overrides_from_toml",
    "sensitivity",
]

from ._catalog import DEFAULT_MODEL_ID, get_model, list_models
from ._eval_engine import evaluate, evaluation_order
from ._expr import Expression, ExpressionError, NarrativeTemplate, compile_expression, compile_narrative
from ._format import format_node_value, format_signed_percentage, format_value
from ._graph import CycleError, DependencyGraph
from ._io import ScenarioFile, dump_overrides_to_toml, load_overrides_from_toml
from ._loader import ModelLoadError, load_model, load_model_file
from ._model import CEAModel, LayoutSection, Node, NodeKind, Region, ValueFormat
from ._sensitivity import SensitivityRow, sensitivity
from ._session import OverrideChange, Session
