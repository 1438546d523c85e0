"""Loading model definitions from JSON."""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ._expr import ExpressionError, compile_expression, compile_narrative
from ._model import CEAModel, LayoutSection, NarrativeFn, Node, NodeKind, Region, ValueFormat

logger = logging.getLogger(__name__)


class ModelLoadError(ValueError):
    """A model definition could not be loaded."""


# Required top-level fields and the JSON shape each must have.
_REQUIRED_FIELDS: dict[str, tuple[type, str]] = {
    "id": (str, "a non-empty string"),
    "title": (str, "a non-empty string"),
    "nodes": (list, "an array"),
    "regions": (list, "an array"),
}

# Spellings used by models exported from the legacy web application.
_LEGACY_KINDS = {"derived": NodeKind.CALCULATION.value}
_LEGACY_FORMATS = {"uov": ValueFormat.UNITS_OF_VALUE.value}


class _Document(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class NodeDocument(_Document):
    """JSON shape of a node. ``compute`` is formula text."""

    id: str = Field(min_length=1)
    kind: NodeKind = Field(validation_alias=AliasChoices("kind", "nodeKind"))
    format: ValueFormat
    editable: bool = False
    label: str = ""
    section: str = ""
    description: str = ""
    formula: str = ""
    compute: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    dependency_operators: dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("dependencyOperators", "dependencyOps", "dependency_operators"),
    )

    @field_validator("kind", mode="before")
    @classmethod
    def _accept_legacy_kind(cls, value: object) -> object:
        return _LEGACY_KINDS.get(value, value) if isinstance(value, str) else value

    @field_validator("format", mode="before")
    @classmethod
    def _accept_legacy_format(cls, value: object) -> object:
        return _LEGACY_FORMATS.get(value, value) if isinstance(value, str) else value


class RegionDocument(_Document):
    """JSON shape of a region."""

    id: str = Field(min_length=1)
    name: str
    base_values: dict[str, float] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("baseValues", "values", "base_values"),
    )


class LayoutSectionDocument(_Document):
    """JSON shape of a layout section."""

    id: str
    label: str
    node_ids: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("nodeIds", "node_ids"),
    )


class ModelDocument(_Document):
    """JSON shape of a whole model. ``narrative`` is template text."""

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    subtitle: str = ""
    region_label: str = Field(default="Region", validation_alias=AliasChoices("regionLabel", "region_label"))
    nodes: list[NodeDocument]
    regions: list[RegionDocument]
    layout_sections: list[LayoutSectionDocument] = Field(
        default_factory=list,
        validation_alias=AliasChoices("layoutSections", "layout_sections"),
    )
    narrative: str | None = Field(default=None, validation_alias=AliasChoices("narrative", "getNarrative"))


def _check_required_fields(raw: Mapping[str, Any]) -> None:
    for name, (expected_type, shape) in _REQUIRED_FIELDS.items():
        if name not in raw or raw[name] is None:
            msg = f"Missing required field: {name}."
            raise ModelLoadError(msg)
        value = raw[name]
        if not isinstance(value, expected_type) or (expected_type is str and not value):
            msg = f"Invalid field '{name}': expected {shape}."
            raise ModelLoadError(msg)


def _format_validation_error(error: ValidationError) -> str:
    lines = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        lines.append(f"  {location}: {detail['msg']}")
    return "Invalid model definition:\n" + "\n".join(lines)


def _build_node(doc: NodeDocument) -> Node:
    compute = None
    if doc.compute is not None:
        try:
            compute = compile_expression(doc.compute)
        except ExpressionError as e:
            msg = f'Invalid compute expression for node "{doc.id}": {doc.compute}'
            raise ModelLoadError(msg) from e

    return Node(
        id=doc.id,
        kind=doc.kind,
        format=doc.format,
        editable=doc.editable,
        label=doc.label,
        section=doc.section,
        description=doc.description,
        formula=doc.formula,
        dependencies=tuple(doc.dependencies),
        compute=compute,
        dependency_operators=dict(doc.dependency_operators),
    )


def _build_narrative(doc: ModelDocument) -> NarrativeFn | None:
    if not doc.narrative:
        return None
    try:
        return compile_narrative(doc.narrative)
    except ExpressionError as e:
        # The model stays usable without its summary text.
        logger.warning("Ignoring narrative of model '%s': %s", doc.id, e)
        return None


def load_model(raw: object) -> CEAModel:
    """Build a model from a parsed JSON definition.

    Validation is limited to the shape of the definition: required fields,
    node and region shapes, and compilable formulas. Dependency cycles are
    not checked here; the evaluator rejects them.

    Args:
        raw: The parsed JSON value (normally a dict).

    Returns:
        The loaded CEAModel.

    Raises:
        ModelLoadError: If a required field is missing or malformed, a node
            or region does not have the expected shape, or a compute
            expression does not compile.

    """
    if not isinstance(raw, Mapping):
        msg = "Invalid model definition: expected an object."
        raise ModelLoadError(msg)

    _check_required_fields(raw)

    try:
        doc = ModelDocument.model_validate(raw)
    except ValidationError as e:
        raise ModelLoadError(_format_validation_error(e)) from e

    nodes = tuple(_build_node(node_doc) for node_doc in doc.nodes)
    logger.debug("Loaded %d nodes for model '%s'", len(nodes), doc.id)

    try:
        return CEAModel(
            id=doc.id,
            title=doc.title,
            subtitle=doc.subtitle,
            region_label=doc.region_label,
            nodes=nodes,
            regions=tuple(
                Region(id=r.id, name=r.name, base_values=dict(r.base_values)) for r in doc.regions
            ),
            layout_sections=tuple(
                LayoutSection(id=s.id, label=s.label, node_ids=tuple(s.node_ids)) for s in doc.layout_sections
            ),
            narrative=_build_narrative(doc),
        )
    except ValueError as e:
        raise ModelLoadError(str(e)) from e


def load_model_file(path: Path) -> CEAModel:
    """Load a model from a JSON file.

    Raises:
        ModelLoadError: If the file is not valid JSON or not a valid model.
        OSError: If the file cannot be read.

    """
    with path.open(encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            msg = f"Invalid JSON in {path}: {e}"
            raise ModelLoadError(msg) from e

    logger.debug("Loading model from %s", path)
    return load_model(raw)
