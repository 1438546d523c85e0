"""Against Malaria Foundation insecticide-treated net (ITN) model."""

from collections.abc import Mapping

from ceagraph._arithmetic import divide
from ceagraph._format import format_integer
from ceagraph._model import CEAModel, LayoutSection, Node, NodeKind, Region, ValueFormat

NODES: tuple[Node, ...] = (
    # Grant
    Node(
        id="grant_size",
        kind=NodeKind.INPUT,
        format=ValueFormat.CURRENCY,
        editable=True,
        label="Grant size",
        section="grant",
        description="Total grant amount allocated for ITN distribution in this country.",
    ),
    Node(
        id="cost_per_u5_reached",
        kind=NodeKind.INPUT,
        format=ValueFormat.CURRENCY,
        label="Cost per person under 5 reached",
        section="grant",
        description=(
            "Upstream cost of reaching one child under age 5 with an ITN, from net and distribution costs, "
            "net usage, people per net and the under-5 share of the population."
        ),
    ),
    # Under-5 mortality benefits
    Node(
        id="num_u5_reached",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.NUMBER,
        label="People under 5 reached",
        section="under5_mortality",
        description="Children under age 5 who sleep under an ITN as a result of this grant.",
        formula="Grant size ÷ Cost per person under 5 reached",
        dependencies=("grant_size", "cost_per_u5_reached"),
        compute=lambda v: divide(v["grant_size"], v["cost_per_u5_reached"]),
        dependency_operators={"grant_size": "÷", "cost_per_u5_reached": "÷"},
    ),
    Node(
        id="years_effective_coverage",
        kind=NodeKind.INPUT,
        format=ValueFormat.NUMBER,
        label="Years of effective coverage",
        section="under5_mortality",
        description="Years of effective protection per net, net of decay, attrition and damage.",
    ),
    Node(
        id="mortality_rate_u5",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Malaria mortality rate (under-5)",
        section="under5_mortality",
        description="Annual malaria-attributable mortality rate among children aged 1-59 months without ITNs.",
    ),
    Node(
        id="effect_on_deaths",
        kind=NodeKind.INPUT,
        format=ValueFormat.PERCENTAGE,
        label="Effect of ITNs on malaria deaths",
        section="under5_mortality",
        description="Expected reduction in malaria mortality among children under 5 who sleep under an ITN.",
    ),
    Node(
        id="deaths_averted_u5",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.NUMBER,
        label="Deaths averted (under-5)",
        section="under5_mortality",
        description="Deaths among children under 5 prevented by this grant.",
        formula="People reached × Years of coverage × Mortality rate × Effect on deaths",
        dependencies=("num_u5_reached", "years_effective_coverage", "mortality_rate_u5", "effect_on_deaths"),
        compute=lambda v: (
            v["num_u5_reached"] * v["years_effective_coverage"] * v["mortality_rate_u5"] * v["effect_on_deaths"]
        ),
        dependency_operators={
            "num_u5_reached": "×",
            "years_effective_coverage": "×",
            "mortality_rate_u5": "×",
            "effect_on_deaths": "×",
        },
    ),
    # Initial cost-effectiveness
    Node(
        id="cost_per_death_averted",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.CURRENCY,
        label="Cost per under-5 death averted",
        section="initial_ce",
        description="Grant money spent per under-5 life saved, before adjustments.",
        formula="Grant size ÷ Deaths averted",
        dependencies=("grant_size", "deaths_averted_u5"),
        compute=lambda v: divide(v["grant_size"], v["deaths_averted_u5"]),
        dependency_operators={"grant_size": "÷", "deaths_averted_u5": "÷"},
    ),
    Node(
        id="moral_value_u5_death",
        kind=NodeKind.INPUT,
        format=ValueFormat.UNITS_OF_VALUE,
        label="Moral value of averting under-5 death",
        section="initial_ce",
        description="Units of value assigned to averting the death of a child under 5.",
    ),
    Node(
        id="benchmark",
        kind=NodeKind.INPUT,
        format=ValueFormat.UNITS_OF_VALUE,
        label="Cash transfer benchmark",
        section="initial_ce",
        description="Units of value generated per dollar of unconditional cash transfers.",
    ),
    Node(
        id="initial_ce",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.MULTIPLIER,
        label="Initial cost-effectiveness",
        section="initial_ce",
        description="Cost-effectiveness relative to cash transfers, counting under-5 mortality benefits only.",
        formula="(Deaths averted × Moral value ÷ Grant) ÷ Benchmark",
        dependencies=("deaths_averted_u5", "moral_value_u5_death", "grant_size", "benchmark"),
        compute=lambda v: divide(
            divide(v["deaths_averted_u5"] * v["moral_value_u5_death"], v["grant_size"]),
            v["benchmark"],
        ),
        dependency_operators={
            "deaths_averted_u5": "×",
            "moral_value_u5_death": "×",
            "grant_size": "÷",
            "benchmark": "÷",
        },
    ),
    # Other benefits
    Node(
        id="adj_5plus_mortality",
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        editable=True,
        label="Adj: mortality averted (age 5+)",
        section="other_benefits",
        description="Upward adjustment for malaria deaths averted among people age 5 and older.",
    ),
    Node(
        id="adj_developmental",
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        editable=True,
        label="Adj: developmental benefits",
        section="other_benefits",
        description="Upward adjustment for long-term income gains from averting childhood malaria.",
    ),
    Node(
        id="u5_mortality_share",
        kind=NodeKind.CALCULATION,
        format=ValueFormat.PERCENTAGE,
        label="Under-5 mortality share of impact",
        section="other_benefits",
        description="Share of total program value attributed to preventing deaths of children under 5.",
        formula="1 − (5+ share + developmental share)",
        dependencies=("adj_5plus_mortality", "adj_developmental"),
        compute=lambda v: (
            1
            - divide(v["adj_5plus_mortality"], (1 + v["adj_5plus_mortality"]) * (1 + v["adj_developmental"]))
            - divide(v["adj_developmental"], 1 + v["adj_developmental"])
        ),
        dependency_operators={"adj_5plus_mortality": "−", "adj_developmental": "−"},
    ),
    # Additional adjustments
    Node(
        id="adj_program",
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        editable=True,
        label="Adj: program benefits & downsides",
        section="adjustments",
        description="Net adjustment for supplemental program effects such as morbidity and anemia reduction.",
    ),
    Node(
        id="adj_grantee",
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        editable=True,
        label="Adj: grantee-level factors",
        section="adjustments",
        description="Adjustment for grantee risks: wastage, monitoring quality, misappropriation.",
    ),
    Node(
        id="adj_leverage",
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        editable=True,
        label="Adj: leverage",
        section="adjustments",
        description="Adjustment for donations crowding additional funding into the program.",
    ),
    Node(
        id="adj_funging",
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        editable=True,
        label="Adj: funging",
        section="adjustments",
        description="Adjustment for donations displacing funding that would have happened anyway.",
    ),
    # Cost per life saved inputs
    Node(
        id="deaths_u5",
        kind=NodeKind.INPUT,
        format=ValueFormat.NUMBER,
        label="Malaria deaths (under-5)",
        section="final",
        description="Estimated malaria deaths among children under 5 in the country.",
    ),
    Node(
        id="deaths_5plus",
        kind=NodeKind.INPUT,
        format=ValueFormat.NUMBER,
        label="Malaria deaths (age 5+)",
        section="final",
        description="Estimated malaria deaths among people age 5 and older.",
    ),
    Node(
        id="overall_outcome_adj",
        kind=NodeKind.ADJUSTMENT,
        format=ValueFormat.PERCENTAGE,
        editable=True,
        label="Overall outcome adjustment",
        section="final",
        description="Combined proportional adjustment for program, grantee, leverage and funging factors.",
    ),
    # Final results
    Node(
        id="final_ce",
        kind=NodeKind.OUTPUT,
        format=ValueFormat.MULTIPLIER,
        label="Final cost-effectiveness",
        section="final",
        description="Final estimate as a multiple of the cash transfer benchmark.",
        formula="Initial CE ÷ Under-5 share × (1 + program adj) × (1 + grantee adj) × (1 + leverage + funging)",
        dependencies=("initial_ce", "u5_mortality_share", "adj_program", "adj_grantee", "adj_leverage", "adj_funging"),
        compute=lambda v: (
            divide(v["initial_ce"], v["u5_mortality_share"])
            * (1 + v["adj_program"])
            * (1 + v["adj_grantee"])
            * (1 + v["adj_leverage"] + v["adj_funging"])
        ),
        dependency_operators={
            "initial_ce": "×",
            "u5_mortality_share": "÷",
            "adj_program": "× (1+)",
            "adj_grantee": "× (1+)",
            "adj_leverage": "× (1+)",
            "adj_funging": "× (1+)",
        },
    ),
    Node(
        id="final_cost_per_life",
        kind=NodeKind.OUTPUT,
        format=ValueFormat.CURRENCY,
        label="Cost per life saved",
        section="final",
        description="Cost per life counterfactually saved, across all age groups and adjustments.",
        formula="Cost per u5 death averted × u5 share of deaths ÷ (1 + outcome adjustment)",
        dependencies=("cost_per_death_averted", "deaths_u5", "deaths_5plus", "overall_outcome_adj"),
        compute=lambda v: divide(
            v["cost_per_death_averted"] * divide(v["deaths_u5"], v["deaths_u5"] + v["deaths_5plus"]),
            1 + v["overall_outcome_adj"],
        ),
        dependency_operators={
            "cost_per_death_averted": "×",
            "deaths_u5": "×",
            "deaths_5plus": "÷",
            "overall_outcome_adj": "÷ (1+)",
        },
    ),
)

REGIONS: tuple[Region, ...] = (
    Region(
        id="guinea",
        name="Guinea",
        base_values={
            "grant_size": 1_000_000,
            "moral_value_u5_death": 116.25262,
            "benchmark": 0.00335,
            "cost_per_u5_reached": 15.19,
            "years_effective_coverage": 1.97,
            "mortality_rate_u5": 0.001508,
            "effect_on_deaths": 0.24,
            "adj_5plus_mortality": 0.29,
            "adj_developmental": 0.33,
            "adj_program": 0.14,
            "adj_grantee": -0.04,
            "adj_leverage": -0.006,
            "adj_funging": -0.21,
            "deaths_u5": 10_650,
            "deaths_5plus": 3_870,
            "overall_outcome_adj": -0.12,
        },
    ),
)


def _narrative(v: Mapping[str, float], region: str) -> str:
    return (
        f"For every ${format_integer(v['grant_size'])} donated to AMF in {region}, "
        f"roughly {format_integer(v['num_u5_reached'])} children under 5 sleep under an ITN, "
        f"averting an estimated {format_integer(v['deaths_averted_u5'])} deaths and delivering "
        f"{v['final_ce']:.1f}x the impact of direct cash transfers "
        f"(${format_integer(v['final_cost_per_life'])} per life saved)."
    )


MODEL = CEAModel(
    id="amf-itn",
    title="GiveWell ITN Cost-Effectiveness Analysis",
    subtitle="Against Malaria Foundation · Interactive Simple CEA",
    region_label="Country",
    nodes=NODES,
    regions=REGIONS,
    layout_sections=(
        LayoutSection("grant", "Grant", ("grant_size", "cost_per_u5_reached")),
        LayoutSection(
            "under5_mortality",
            "Under-5 Mortality Benefits",
            (
                "num_u5_reached",
                "years_effective_coverage",
                "mortality_rate_u5",
                "effect_on_deaths",
                "deaths_averted_u5",
            ),
        ),
        LayoutSection(
            "initial_ce",
            "Initial Cost-Effectiveness",
            ("cost_per_death_averted", "moral_value_u5_death", "benchmark", "initial_ce"),
        ),
        LayoutSection(
            "other_benefits",
            "Other Benefits Adjustments",
            ("adj_5plus_mortality", "adj_developmental", "u5_mortality_share"),
        ),
        LayoutSection(
            "adjustments",
            "Additional Adjustments",
            ("adj_program", "adj_grantee", "adj_leverage", "adj_funging"),
        ),
        LayoutSection(
            "final",
            "Final Estimate",
            ("deaths_u5", "deaths_5plus", "overall_outcome_adj", "final_ce", "final_cost_per_life"),
        ),
    ),
    narrative=_narrative,
)
