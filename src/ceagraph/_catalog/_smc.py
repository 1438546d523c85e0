"""Malaria Consortium seasonal malaria chemoprevention (SMC) model."""

from collections.abc import Mapping

from ceagraph._arithmetic import divide
from ceagraph._format import format_integer
from ceagraph._model import CEAModel, LayoutSection, Node, NodeKind, Region, ValueFormat


def _adjustment(node_id: str, label: str, section: str, description: str) -> Node:
    return Node(
        id=node_id,
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        label=label,
        section=section,
        description=description,
    )


def _final_ce(v: Mapping[str, float]) -> float:
    return (
        v["initial_ce"]
        * (1 + v["adj_over5"] + v["adj_developmental"])
        * (1 + v["adj_program"])
        * (1 + v["adj_grantee"])
        * (1 + v["adj_leverage_funging"])
    )


def _cost_per_life_saved(v: Mapping[str, float]) -> float:
    lives_saved = (
        v["deaths_averted"]
        * (1 + v["adj_over5"])
        * (1 + v["adj_program"])
        * (1 + v["adj_grantee"])
        * (1 + v["adj_leverage_funging"])
    )
    return divide(v["grant_size"], lives_saved)


NODES: tuple[Node, ...] = (
    Node(
        id="grant_size",
        kind=NodeKind.INPUT,
        format=ValueFormat.CURRENCY,
        editable=True,
        label="Grant size",
        section="grant",
        description="Hypothetical grant used to express results per donation.",
    ),
    Node(
        id="cost_per_child",
        kind=NodeKind.INPUT,
        format=ValueFormat.CURRENCY,
        label="Cost per child reached",
        section="grant",
        description="Cost of delivering a full season of SMC to one child.",
    ),
    Node(
        id="children_reached",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.NUMBER,
        label="Children reached",
        section="coverage",
        formula="Grant size ÷ Cost per child",
        dependencies=("grant_size", "cost_per_child"),
        compute=lambda v: divide(v["grant_size"], v["cost_per_child"]),
        dependency_operators={"grant_size": "÷", "cost_per_child": "÷"},
    ),
    Node(
        id="counterfactual_share",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Counterfactual coverage",
        section="coverage",
        description="Share of children who would have received SMC without this grant.",
    ),
    Node(
        id="additional_children",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.NUMBER,
        label="Additional children reached",
        section="coverage",
        formula="Children reached × (1 − Counterfactual coverage)",
        dependencies=("children_reached", "counterfactual_share"),
        compute=lambda v: v["children_reached"] * (1 - v["counterfactual_share"]),
        dependency_operators={"children_reached": "×", "counterfactual_share": "× (1−)"},
    ),
    Node(
        id="mortality_rate",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Malaria mortality rate",
        section="mortality",
        description="Annual malaria mortality rate among children aged 3-59 months.",
    ),
    Node(
        id="seasonal_share",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Share of deaths in SMC season",
        section="mortality",
    ),
    Node(
        id="smc_effect",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Effect of SMC on malaria deaths",
        section="mortality",
    ),
    Node(
        id="deaths_averted",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.NUMBER,
        label="Deaths averted",
        section="mortality",
        formula="Additional children × Mortality rate × Seasonal share × Effect",
        dependencies=("additional_children", "mortality_rate", "seasonal_share", "smc_effect"),
        compute=lambda v: v["additional_children"] * v["mortality_rate"] * v["seasonal_share"] * v["smc_effect"],
        dependency_operators={
            "additional_children": "×",
            "mortality_rate": "×",
            "seasonal_share": "×",
            "smc_effect": "×",
        },
    ),
    Node(
        id="moral_weight",
        kind=NodeKind.INPUT,
        format=ValueFormat.UNITS_OF_VALUE,
        label="Moral weight of averting a death",
        section="initial_ce",
    ),
    Node(
        id="benchmark",
        kind=NodeKind.INPUT,
        format=ValueFormat.NUMBER,
        label="Cash transfer benchmark",
        section="initial_ce",
        description="Units of value per dollar of unconditional cash transfers.",
    ),
    Node(
        id="initial_ce",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.MULTIPLIER,
        label="Initial cost-effectiveness",
        section="initial_ce",
        formula="(Deaths averted × Moral weight ÷ Grant) ÷ Benchmark",
        dependencies=("deaths_averted", "moral_weight", "grant_size", "benchmark"),
        compute=lambda v: divide(divide(v["deaths_averted"] * v["moral_weight"], v["grant_size"]), v["benchmark"]),
        dependency_operators={"deaths_averted": "×", "moral_weight": "×", "grant_size": "÷", "benchmark": "÷"},
    ),
    _adjustment(
        "adj_over5",
        "Adj: deaths averted age 5+",
        "other_benefits",
        "Additional value from malaria deaths averted among older children and adults.",
    ),
    _adjustment(
        "adj_developmental",
        "Adj: developmental benefits",
        "other_benefits",
        "Long-term income gains from reduced childhood malaria.",
    ),
    _adjustment(
        "adj_program",
        "Adj: program benefits & downsides",
        "adjustments",
        "Net effect of supplemental program factors.",
    ),
    _adjustment(
        "adj_grantee",
        "Adj: grantee-level factors",
        "adjustments",
        "Adjustment for quality of the grantee's monitoring and implementation.",
    ),
    _adjustment(
        "adj_leverage_funging",
        "Adj: leverage & funging",
        "adjustments",
        "Combined adjustment for funding crowded in and displaced.",
    ),
    Node(
        id="final_ce",
        kind=NodeKind.OUTPUT,
        format=ValueFormat.MULTIPLIER,
        label="Final cost-effectiveness",
        section="final",
        formula="Initial CE × (1 + other benefits) × (1 + program) × (1 + grantee) × (1 + leverage & funging)",
        dependencies=(
            "initial_ce",
            "adj_over5",
            "adj_developmental",
            "adj_program",
            "adj_grantee",
            "adj_leverage_funging",
        ),
        compute=_final_ce,
        dependency_operators={
            "initial_ce": "×",
            "adj_over5": "× (1+)",
            "adj_developmental": "× (1+)",
            "adj_program": "× (1+)",
            "adj_grantee": "× (1+)",
            "adj_leverage_funging": "× (1+)",
        },
    ),
    Node(
        id="cost_per_life_saved",
        kind=NodeKind.OUTPUT,
        format=ValueFormat.CURRENCY,
        label="Cost per life saved",
        section="final",
        formula="Grant ÷ (Deaths averted × adjustments)",
        dependencies=(
            "grant_size",
            "deaths_averted",
            "adj_over5",
            "adj_program",
            "adj_grantee",
            "adj_leverage_funging",
        ),
        compute=_cost_per_life_saved,
    ),
)

_SHARED = {
    "grant_size": 10_000_000,
    "counterfactual_share": 0.0,
    "seasonal_share": 0.70,
    "smc_effect": 0.7936950,
    "moral_weight": 116.25262,
    "benchmark": 0.00335,
    "adj_grantee": -0.08,
}

REGIONS: tuple[Region, ...] = (
    Region(
        id="burkina_faso",
        name="Burkina Faso",
        base_values={
            **_SHARED,
            "cost_per_child": 6.332846,
            "mortality_rate": 0.004748327,
            "adj_over5": 0.06857112,
            "adj_developmental": 0.31328741,
            "adj_program": 0.191,
            "adj_leverage_funging": -0.40038118,
        },
    ),
    Region(
        id="chad",
        name="Chad",
        base_values={
            **_SHARED,
            "cost_per_child": 7.014882,
            "mortality_rate": 0.004788735,
            "adj_over5": 0.05499181,
            "adj_developmental": 0.20796504,
            "adj_program": 0.241,
            "adj_leverage_funging": -0.23380867,
        },
    ),
)


def _narrative(v: Mapping[str, float], region: str) -> str:
    return (
        f"A ${format_integer(v['grant_size'])} grant to Malaria Consortium in {region} "
        f"reaches about {format_integer(v['additional_children'])} additional children with SMC, "
        f"averting roughly {format_integer(v['deaths_averted'])} deaths. "
        f"That is {v['final_ce']:.1f}x as cost-effective as cash transfers, "
        f"at ${format_integer(v['cost_per_life_saved'])} per life saved."
    )


MODEL = CEAModel(
    id="smc",
    title="GiveWell Malaria Consortium Cost-Effectiveness Analysis",
    subtitle="Seasonal malaria chemoprevention",
    region_label="Country",
    nodes=NODES,
    regions=REGIONS,
    layout_sections=(
        LayoutSection("grant", "Grant", ("grant_size", "cost_per_child")),
        LayoutSection("coverage", "Coverage", ("children_reached", "counterfactual_share", "additional_children")),
        LayoutSection(
            "mortality",
            "Mortality Benefits",
            ("mortality_rate", "seasonal_share", "smc_effect", "deaths_averted"),
        ),
        LayoutSection("initial_ce", "Initial Cost-Effectiveness", ("moral_weight", "benchmark", "initial_ce")),
        LayoutSection("other_benefits", "Other Benefits", ("adj_over5", "adj_developmental")),
        LayoutSection("adjustments", "Adjustments", ("adj_program", "adj_grantee", "adj_leverage_funging")),
        LayoutSection("final", "Final Estimate", ("final_ce", "cost_per_life_saved")),
    ),
    narrative=_narrative,
)
