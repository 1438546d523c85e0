"""New Incentives conditional cash transfers for infant vaccination.

Regions are Nigerian states. Mortality risk per vaccinated child and the
value of consumption gains enter as hidden parameters (ids starting with
``_``) that have no node of their own.
"""

from collections.abc import Mapping

from ceagraph._arithmetic import divide
from ceagraph._format import format_integer
from ceagraph._model import CEAModel, LayoutSection, Node, NodeKind, Region, ValueFormat

# Deaths averted later in life are discounted at 0.5% per year over the
# average delay between vaccination and death in each age group.
DISCOUNT_5_14 = 0.995**10
DISCOUNT_15_49 = 0.995**32.5
DISCOUNT_50_74 = 0.995**62.5

# Intervention-level adjustment that applies to lives saved, the same in every state.
ADJ_INTERVENTION_LIVES = 0.236

_AGE_GROUPS = ("u5", "5_14", "15_49", "50_74")


def _children_vaccinated(v: Mapping[str, float]) -> float:
    increase = v["treatment_effect"] * v["counterfactual_unvax_rate"]
    vaccinated_share = (1 - v["counterfactual_unvax_rate"]) + increase
    return divide(v["children_enrolled"] * increase, vaccinated_share)


def _deaths_averted_node(age: str, label: str, discount: float, description: str) -> Node:
    rate = f"_death_rate_{age}"
    return Node(
        id=f"deaths_averted_{age}",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.NUMBER,
        label=label,
        section="deaths_averted",
        description=description,
        formula="Children vaccinated × Mortality risk" + (" × Discount factor" if discount != 1 else ""),
        dependencies=("children_vaccinated", rate),
        compute=lambda v: v["children_vaccinated"] * v[rate] * discount,
    )


def _value_node(age: str, label: str) -> Node:
    return Node(
        id=f"value_per_{age}_death",
        kind=NodeKind.INPUT,
        format=ValueFormat.UNITS_OF_VALUE,
        label=label,
        section="value",
        description="Units of value assigned to averting one death in this age group.",
    )


def _total_value(v: Mapping[str, float]) -> float:
    under_15 = (
        v["deaths_averted_u5"] * v["value_per_u5_death"] + v["deaths_averted_5_14"] * v["value_per_5_14_death"]
    )
    over_15 = (
        v["deaths_averted_15_49"] * v["value_per_15_49_death"]
        + v["deaths_averted_50_74"] * v["value_per_50_74_death"]
    )
    income = v["income_value_ratio"] * under_15
    return under_15 + over_15 + income + v["_value_consumption"]


def _cost_per_life_saved(v: Mapping[str, float]) -> float:
    deaths = sum(v[f"deaths_averted_{age}"] for age in _AGE_GROUPS)
    adjustment = (1 + v["adj_grantee"]) * (1 + ADJ_INTERVENTION_LIVES) * (1 + v["adj_leverage_funging"])
    return divide(v["grant_size"], deaths * adjustment)


NODES: tuple[Node, ...] = (
    # Costs
    Node(
        id="grant_size",
        kind=NodeKind.INPUT,
        format=ValueFormat.CURRENCY,
        editable=True,
        label="Grant size",
        section="costs",
        description="Total grant for the conditional cash transfer program.",
    ),
    Node(
        id="cost_per_infant",
        kind=NodeKind.INPUT,
        format=ValueFormat.CURRENCY,
        label="Adjusted cost per infant enrolled",
        section="costs",
        description="Cost per infant enrolled ($16.26), adjusted up 10.7% for repeat enrollments.",
    ),
    Node(
        id="children_enrolled",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.NUMBER,
        label="Total children enrolled",
        section="costs",
        formula="Grant size ÷ Cost per infant enrolled",
        dependencies=("grant_size", "cost_per_infant"),
        compute=lambda v: divide(v["grant_size"], v["cost_per_infant"]),
        dependency_operators={"grant_size": "÷", "cost_per_infant": "÷"},
    ),
    # Vaccination coverage
    Node(
        id="counterfactual_unvax_rate",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Counterfactual unvaccinated rate",
        section="coverage",
        description="Share of children who would not be vaccinated without the program.",
    ),
    Node(
        id="treatment_effect",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Treatment effect on unvaccinated",
        section="coverage",
        description="Reduction in the unvaccinated share from the program RCT (33.3%), less 12% for validity.",
    ),
    Node(
        id="children_vaccinated",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.NUMBER,
        label="Children counterfactually vaccinated",
        section="coverage",
        formula="Enrolled × Effect × Unvax rate ÷ Total vax rate",
        dependencies=("children_enrolled", "counterfactual_unvax_rate", "treatment_effect"),
        compute=_children_vaccinated,
        dependency_operators={
            "children_enrolled": "×",
            "counterfactual_unvax_rate": "×",
            "treatment_effect": "×",
        },
    ),
    # Deaths averted
    _deaths_averted_node(
        "u5",
        "Deaths averted (under 5)",
        1,
        "Deaths averted under age 5, including indirect mortality effects.",
    ),
    _deaths_averted_node(
        "5_14",
        "Deaths averted (5-14, discounted)",
        DISCOUNT_5_14,
        "Deaths averted at age 5-14, discounted over 10 years.",
    ),
    _deaths_averted_node(
        "15_49",
        "Deaths averted (15-49, discounted)",
        DISCOUNT_15_49,
        "Deaths averted at age 15-49, discounted over 32.5 years.",
    ),
    _deaths_averted_node(
        "50_74",
        "Deaths averted (50-74, discounted)",
        DISCOUNT_50_74,
        "Deaths averted at age 50-74, discounted over 62.5 years.",
    ),
    # Value of outcomes
    _value_node("u5", "Value per under-5 death averted"),
    _value_node("5_14", "Value per 5-14 death averted"),
    _value_node("15_49", "Value per 15-49 death averted"),
    _value_node("50_74", "Value per 50-74 death averted"),
    Node(
        id="income_value_ratio",
        kind=NodeKind.INPUT,
        format=ValueFormat.NUMBER,
        label="Income increase value ratio",
        section="value",
        description="Value of long-term income gains relative to under-15 mortality value, taken from SMC.",
    ),
    Node(
        id="total_value",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.UNITS_OF_VALUE,
        label="Total units of value (before adjustments)",
        section="value",
        description="Mortality value across age groups plus income and consumption gains.",
        formula="Σ(Deaths × Value) + Income value + Consumption value",
        dependencies=(
            *(f"deaths_averted_{age}" for age in _AGE_GROUPS),
            *(f"value_per_{age}_death" for age in _AGE_GROUPS),
            "income_value_ratio",
            "_value_consumption",
        ),
        compute=_total_value,
        dependency_operators={
            **{f"deaths_averted_{age}": "×" for age in _AGE_GROUPS},
            **{f"value_per_{age}_death": "×" for age in _AGE_GROUPS},
            "income_value_ratio": "×",
        },
    ),
    # Initial cost-effectiveness
    Node(
        id="benchmark",
        kind=NodeKind.INPUT,
        format=ValueFormat.UNITS_OF_VALUE,
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
        formula="(Total value ÷ Grant) ÷ Benchmark",
        dependencies=("total_value", "grant_size", "benchmark"),
        compute=lambda v: divide(divide(v["total_value"], v["grant_size"]), v["benchmark"]),
        dependency_operators={"total_value": "×", "grant_size": "÷", "benchmark": "÷"},
    ),
    # Adjustments
    Node(
        id="adj_grantee",
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        editable=True,
        label="Adj: grantee-level factors",
        section="adjustments",
        description="Biased monitoring (-2%) and non-funding bottlenecks (-5%).",
    ),
    Node(
        id="adj_intervention",
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        editable=True,
        label="Adj: intervention-level factors",
        section="adjustments",
        description=(
            "Net supplemental effects: morbidity, inflation, treatment costs averted, herd immunity, "
            "timeliness, outbreaks and serotype replacement."
        ),
    ),
    Node(
        id="adj_leverage_funging",
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        editable=True,
        label="Adj: leverage & funging",
        section="adjustments",
        description="Combined adjustment for funding crowded into and out of the program. Varies by state.",
    ),
    # Final estimate
    Node(
        id="final_ce",
        kind=NodeKind.OUTPUT,
        format=ValueFormat.MULTIPLIER,
        label="Final cost-effectiveness",
        section="final",
        formula="Initial CE × (1 + grantee adj) × (1 + intervention adj) × (1 + leverage/funging adj)",
        dependencies=("initial_ce", "adj_grantee", "adj_intervention", "adj_leverage_funging"),
        compute=lambda v: (
            v["initial_ce"]
            * (1 + v["adj_grantee"])
            * (1 + v["adj_intervention"])
            * (1 + v["adj_leverage_funging"])
        ),
        dependency_operators={
            "initial_ce": "×",
            "adj_grantee": "× (1+)",
            "adj_intervention": "× (1+)",
            "adj_leverage_funging": "× (1+)",
        },
    ),
    Node(
        id="cost_per_life_saved",
        kind=NodeKind.OUTPUT,
        format=ValueFormat.CURRENCY,
        label="Cost per life saved",
        section="final",
        formula="Grant ÷ (Total deaths × All adjustments)",
        dependencies=(
            "grant_size",
            *(f"deaths_averted_{age}" for age in _AGE_GROUPS),
            "adj_grantee",
            "adj_leverage_funging",
        ),
        compute=_cost_per_life_saved,
        dependency_operators={
            "grant_size": "÷",
            **{f"deaths_averted_{age}": "÷" for age in _AGE_GROUPS},
            "adj_grantee": "× (1+)",
            "adj_leverage_funging": "× (1+)",
        },
    ),
)

_SHARED = {
    "grant_size": 1_000_000,
    "cost_per_infant": 18.2126,
    "treatment_effect": 0.2931,
    "value_per_u5_death": 116.25262,
    "value_per_5_14_death": 133.7,
    "value_per_15_49_death": 103.58571,
    "value_per_50_74_death": 42.44,
    "income_value_ratio": 0.30647,
    "benchmark": 0.00333,
    "adj_grantee": -0.07,
    "adj_intervention": 0.503,
    "_value_consumption": 2472.90,
}


def _state(
    state_id: str,
    name: str,
    unvax_rate: float,
    leverage_funging: float,
    death_rates: tuple[float, float, float, float],
) -> Region:
    # Each death rate is the combined mortality probability times vaccine efficacy.
    return Region(
        id=state_id,
        name=name,
        base_values={
            **_SHARED,
            "counterfactual_unvax_rate": unvax_rate,
            "adj_leverage_funging": leverage_funging,
            **{f"_death_rate_{age}": rate for age, rate in zip(_AGE_GROUPS, death_rates, strict=True)},
        },
    )


REGIONS: tuple[Region, ...] = (
    _state(
        "bauchi",
        "Bauchi",
        0.4368,
        -0.13768,
        (0.05654 * 0.5226, 0.004314 * 0.5100, 0.01358 * 0.1730, 0.05343 * 0.08492),
    ),
    _state(
        "gombe",
        "Gombe",
        0.3174,
        -0.14388,
        (0.04199 * 0.5274, 0.003082 * 0.5115, 0.008089 * 0.1802, 0.03700 * 0.09082),
    ),
    _state(
        "jigawa",
        "Jigawa",
        0.3613,
        -0.13048,
        (0.06325 * 0.5508, 0.004581 * 0.5329, 0.01553 * 0.1685, 0.05265 * 0.08175),
    ),
    _state(
        "kaduna",
        "Kaduna",
        0.3898,
        -0.16690,
        (0.02844 * 0.5437, 0.002095 * 0.5286, 0.005946 * 0.1846, 0.02086 * 0.09052),
    ),
    _state(
        "kano",
        "Kano",
        0.4074,
        -0.15232,
        (0.04002 * 0.5160, 0.003000 * 0.4997, 0.007590 * 0.1782, 0.02798 * 0.08790),
    ),
    _state(
        "katsina",
        "Katsina",
        0.4438,
        -0.14572,
        (0.04391 * 0.5458, 0.003599 * 0.5291, 0.01273 * 0.1713, 0.04545 * 0.08387),
    ),
    _state(
        "kebbi",
        "Kebbi",
        0.5711,
        -0.14155,
        (0.05121 * 0.5582, 0.004145 * 0.5379, 0.01367 * 0.1728, 0.05635 * 0.08450),
    ),
)


def _narrative(v: Mapping[str, float], region: str) -> str:
    return (
        f"For every ${format_integer(v['grant_size'])} donated to New Incentives in {region}, "
        f"roughly {format_integer(v['children_enrolled'])} infants are enrolled in the vaccination program, "
        f"averting an estimated {v['deaths_averted_u5']:.1f} under-5 deaths and delivering "
        f"{v['final_ce']:.1f}x the impact of direct cash transfers "
        f"(${format_integer(v['cost_per_life_saved'])} per life saved)."
    )


MODEL = CEAModel(
    id="new-incentives",
    title="GiveWell New Incentives Cost-Effectiveness Analysis",
    subtitle="Conditional Cash Transfers for Infant Vaccination · Main CEA",
    region_label="State",
    nodes=NODES,
    regions=REGIONS,
    layout_sections=(
        LayoutSection("costs", "Costs", ("grant_size", "cost_per_infant", "children_enrolled")),
        LayoutSection(
            "coverage",
            "Vaccination Coverage",
            ("counterfactual_unvax_rate", "treatment_effect", "children_vaccinated"),
        ),
        LayoutSection("deaths_averted", "Deaths Averted", tuple(f"deaths_averted_{age}" for age in _AGE_GROUPS)),
        LayoutSection(
            "value",
            "Value of Outcomes",
            (*(f"value_per_{age}_death" for age in _AGE_GROUPS), "income_value_ratio", "total_value"),
        ),
        LayoutSection("initial_ce", "Initial Cost-Effectiveness", ("benchmark", "initial_ce")),
        LayoutSection("adjustments", "Adjustments", ("adj_grantee", "adj_intervention", "adj_leverage_funging")),
        LayoutSection("final", "Final Estimate", ("final_ce", "cost_per_life_saved")),
    ),
    narrative=_narrative,
)
