"""Taimaka treatment of severe acute malnutrition (SAM) in Gombe State."""

from collections.abc import Mapping

from ceagraph._arithmetic import divide
from ceagraph._format import format_integer
from ceagraph._model import CEAModel, LayoutSection, Node, NodeKind, Region, ValueFormat


def _deaths_averted(v: Mapping[str, float]) -> float:
    # Children who would have had government treatment only gain the incremental effect
    government_treated = v["children_treated"] - v["additional_children"]
    return (
        v["additional_children"] * v["mortality_rate_adjusted"] * v["treatment_effect_ngo"]
        + government_treated * v["mortality_rate_adjusted"] * v["increased_effect_vs_govt"]
    )


def _cost_per_life_saved(v: Mapping[str, float]) -> float:
    adjusted_deaths = v["deaths_averted"] * (1 + v["adj_program"]) * (1 + v["adj_leverage_funging"])
    return divide(v["grant_size"], adjusted_deaths)


NODES: tuple[Node, ...] = (
    # Grant
    Node(
        id="grant_size",
        kind=NodeKind.INPUT,
        format=ValueFormat.CURRENCY,
        editable=True,
        label="Grant size",
        section="grant",
        description="Total grant for malnutrition treatment in Gombe State, Nigeria.",
    ),
    Node(
        id="cost_per_child",
        kind=NodeKind.INPUT,
        format=ValueFormat.CURRENCY,
        label="Cost per child treated",
        section="grant",
        description="Program cost per child treated for SAM, including direct treatment costs and overhead.",
    ),
    # Children reached
    Node(
        id="children_treated",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.NUMBER,
        label="Children treated",
        section="coverage",
        formula="Grant size ÷ Cost per child",
        dependencies=("grant_size", "cost_per_child"),
        compute=lambda v: divide(v["grant_size"], v["cost_per_child"]),
        dependency_operators={"grant_size": "÷", "cost_per_child": "÷"},
    ),
    Node(
        id="govt_treatment_share",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Share receiving govt treatment (counterfactual)",
        section="coverage",
        description="Share of children who would have received government treatment without the program.",
    ),
    Node(
        id="additional_children",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.NUMBER,
        label="Additional children reached",
        section="coverage",
        description="Children treated who would otherwise have received no treatment at all.",
        formula="Children treated × (1 − Govt treatment share)",
        dependencies=("children_treated", "govt_treatment_share"),
        compute=lambda v: v["children_treated"] * (1 - v["govt_treatment_share"]),
        dependency_operators={"children_treated": "×", "govt_treatment_share": "× (1−)"},
    ),
    # Untreated mortality rate
    Node(
        id="mortality_rate_initial",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Untreated mortality rate (initial)",
        section="mortality",
        description="Annual all-cause mortality of children 6-59 months with untreated SAM, from a systematic review.",
    ),
    Node(
        id="plausibility_discount",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Plausibility discount",
        section="mortality",
        description="Scales the initial rate down so implied under-5 mortality does not exceed the observed rate.",
    ),
    Node(
        id="mortality_rate_adjusted",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.PERCENTAGE,
        label="Untreated mortality rate (adjusted)",
        section="mortality",
        formula="Initial rate × Plausibility discount",
        dependencies=("mortality_rate_initial", "plausibility_discount"),
        compute=lambda v: v["mortality_rate_initial"] * v["plausibility_discount"],
        dependency_operators={"mortality_rate_initial": "×", "plausibility_discount": "×"},
    ),
    # Treatment effect
    Node(
        id="treatment_effect_ngo",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Mortality reduction vs no treatment",
        section="treatment",
    ),
    Node(
        id="increased_effect_vs_govt",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Additional reduction vs govt treatment",
        section="treatment",
        description="Extra mortality reduction of NGO-supported treatment over standard government treatment.",
    ),
    Node(
        id="deaths_averted",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.NUMBER,
        label="Deaths averted",
        section="treatment",
        formula="Additional children × Rate × Effect + Govt-substituted × Rate × Incremental effect",
        dependencies=(
            "additional_children",
            "children_treated",
            "mortality_rate_adjusted",
            "treatment_effect_ngo",
            "increased_effect_vs_govt",
        ),
        compute=_deaths_averted,
        dependency_operators={
            "additional_children": "×",
            "mortality_rate_adjusted": "×",
            "treatment_effect_ngo": "×",
            "increased_effect_vs_govt": "+×",
        },
    ),
    # Value of outcomes
    Node(
        id="income_ratio",
        kind=NodeKind.INPUT,
        format=ValueFormat.NUMBER,
        label="Income-to-mortality value ratio",
        section="value",
        description="Value of long-term income gains relative to mortality value, from SMC and adjusted down.",
    ),
    Node(
        id="moral_weight",
        kind=NodeKind.INPUT,
        format=ValueFormat.UNITS_OF_VALUE,
        label="Moral weight: under-5 death averted",
        section="value",
    ),
    Node(
        id="total_value",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.UNITS_OF_VALUE,
        label="Total units of value",
        section="value",
        formula="Deaths averted × (1 + Income ratio) × Moral weight",
        dependencies=("deaths_averted", "income_ratio", "moral_weight"),
        compute=lambda v: v["deaths_averted"] * (1 + v["income_ratio"]) * v["moral_weight"],
        dependency_operators={"deaths_averted": "×", "income_ratio": "× (1+)", "moral_weight": "×"},
    ),
    # Initial cost-effectiveness
    Node(
        id="benchmark",
        kind=NodeKind.INPUT,
        format=ValueFormat.UNITS_OF_VALUE,
        label="Cash transfer benchmark",
        section="initial_ce",
        description="Units of value per dollar of unconditional cash transfers (33.5 per $10,000).",
    ),
    Node(
        id="initial_ce",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.MULTIPLIER,
        label="Initial cost-effectiveness",
        section="initial_ce",
        formula="(Total value ÷ Grant) ÷ Benchmark",
        dependencies=("total_value", "grant_size", "benchmark"),
        compute=lambda v: divide(divide(v["total_value"], v["grant_size"]), v["benchmark"]),
        dependency_operators={"total_value": "÷", "grant_size": "÷", "benchmark": "÷"},
    ),
    # Adjustments
    Node(
        id="adj_program",
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        editable=True,
        label="Adj: program benefits & downsides",
        section="adjustments",
        description="Caregiver time costs, nutrition gains beyond mortality and program quality.",
    ),
    Node(
        id="adj_leverage_funging",
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        editable=True,
        label="Adj: leverage & funging",
        section="adjustments",
        description="Net effect of funding crowded out (funging) or crowded in (leverage).",
    ),
    # Final estimate
    Node(
        id="final_ce",
        kind=NodeKind.OUTPUT,
        format=ValueFormat.MULTIPLIER,
        label="Final cost-effectiveness",
        section="final",
        formula="Initial CE × (1 + program adj) × (1 + leverage adj)",
        dependencies=("initial_ce", "adj_program", "adj_leverage_funging"),
        compute=lambda v: v["initial_ce"] * (1 + v["adj_program"]) * (1 + v["adj_leverage_funging"]),
        dependency_operators={"initial_ce": "×", "adj_program": "× (1+)", "adj_leverage_funging": "× (1+)"},
    ),
    Node(
        id="cost_per_life_saved",
        kind=NodeKind.OUTPUT,
        format=ValueFormat.CURRENCY,
        label="Cost per life saved",
        section="final",
        formula="Grant ÷ (Deaths averted × program adj × leverage adj)",
        dependencies=("grant_size", "deaths_averted", "adj_program", "adj_leverage_funging"),
        compute=_cost_per_life_saved,
        dependency_operators={
            "grant_size": "÷",
            "deaths_averted": "÷",
            "adj_program": "÷ (1+)",
            "adj_leverage_funging": "÷ (1+)",
        },
    ),
)

REGIONS: tuple[Region, ...] = (
    Region(
        id="gombe",
        name="Gombe State, Nigeria",
        base_values={
            "grant_size": 4_787_985,
            "cost_per_child": 105.4065076,
            "govt_treatment_share": 0.0465520683,
            "mortality_rate_initial": 0.1321771,
            "plausibility_discount": 0.3286322691,
            "treatment_effect_ngo": 0.5949166667,
            "increased_effect_vs_govt": 0.09697699304,
            "income_ratio": 0.2015,
            "moral_weight": 117.59366,
            "benchmark": 0.00335,
            "adj_program": -0.02045637367,
            "adj_leverage_funging": -0.09906706939,
        },
    ),
)


def _narrative(v: Mapping[str, float], region: str) -> str:
    return (
        f"For every ${format_integer(v['grant_size'])} donated to Taimaka in {region}, "
        f"roughly {format_integer(v['children_treated'])} severely malnourished children receive treatment, "
        f"averting an estimated {v['deaths_averted']:.1f} deaths and delivering "
        f"{v['final_ce']:.1f}x the impact of direct cash transfers "
        f"(${format_integer(v['cost_per_life_saved'])} per life saved)."
    )


MODEL = CEAModel(
    id="taimaka",
    title="GiveWell Taimaka Cost-Effectiveness Analysis",
    subtitle="Malnutrition Treatment · Gombe State, Nigeria",
    region_label="Region",
    nodes=NODES,
    regions=REGIONS,
    layout_sections=(
        LayoutSection("grant", "Grant", ("grant_size", "cost_per_child")),
        LayoutSection(
            "coverage",
            "Children Reached",
            ("children_treated", "govt_treatment_share", "additional_children"),
        ),
        LayoutSection(
            "mortality",
            "Untreated Mortality Rate",
            ("mortality_rate_initial", "plausibility_discount", "mortality_rate_adjusted"),
        ),
        LayoutSection(
            "treatment",
            "Treatment Effect",
            ("treatment_effect_ngo", "increased_effect_vs_govt", "deaths_averted"),
        ),
        LayoutSection("value", "Value of Outcomes", ("income_ratio", "moral_weight", "total_value")),
        LayoutSection("initial_ce", "Initial Cost-Effectiveness", ("benchmark", "initial_ce")),
        LayoutSection("adjustments", "Adjustments", ("adj_program", "adj_leverage_funging")),
        LayoutSection("final", "Final Estimate", ("final_ce", "cost_per_life_saved")),
    ),
    narrative=_narrative,
)
