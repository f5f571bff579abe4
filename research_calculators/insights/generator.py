"""
Insight Generator

Turns calculator outputs into short, templated insights by comparing the
computed values with the benchmark tables:
- Recommendations when a result is already in a good band
- Warnings when a value falls in a weak band
- Benchmarks that place a result against industry norms
- Optimizations with a suggested input change

Insight ids only need to be unique within a displayed list.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union
import math
import random
import string
import time

import structlog

from ..calculators import (
    DemographicsOutputs,
    FeasibilityOutputs,
    FeasibilityScore,
    FeasibilityVerdict,
    LOICostOutputs,
    MaxDiffOutputs,
    MOEOutputs,
    QuestionnaireOutputs,
    RiskSeverity,
    SampleSizeOutputs,
)
from ..extraction import CalculatorType
from ..reference import (
    BandTable,
    INCIDENCE_BANDS,
    INDUSTRY_STANDARDS,
    LOI_COST_TIERS,
    MOE_BENCHMARKS,
    QualityRating,
    SAMPLE_QUALITY_BANDS,
    SAMPLE_SIZE_BENCHMARKS,
    lookup_band,
)
from ..results import is_result

logger = structlog.get_logger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


class InsightType(Enum):
    """Tone of an insight."""
    RECOMMENDATION = "recommendation"
    WARNING = "warning"
    BENCHMARK = "benchmark"
    OPTIMIZATION = "optimization"


@dataclass(frozen=True)
class InsightAction:
    """One-click input change offered with an insight."""
    label: str
    field: str
    value: Union[int, float, str]


def _generate_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"insight-{int(time.time() * 1000)}-{suffix}"


@dataclass
class AIInsight:
    """A single insight about a calculator result."""
    id: str = field(default_factory=_generate_id)
    message: str = ""
    source: CalculatorType = CalculatorType.SAMPLE
    type: InsightType = InsightType.RECOMMENDATION
    confidence: float = 0.9  # 0-1
    action: Optional[InsightAction] = None


@dataclass(frozen=True)
class BenchmarkTables:
    """The tables insights are judged against."""
    moe: BandTable = field(default_factory=lambda: MOE_BENCHMARKS)
    sample_quality: BandTable = field(default_factory=lambda: SAMPLE_QUALITY_BANDS)
    loi_cost: BandTable = field(default_factory=lambda: LOI_COST_TIERS)
    incidence: BandTable = field(default_factory=lambda: INCIDENCE_BANDS)
    sample_sizes: tuple = field(default_factory=lambda: SAMPLE_SIZE_BENCHMARKS)
    standards: Any = field(default_factory=lambda: INDUSTRY_STANDARDS)


DEFAULT_TABLES = BenchmarkTables()


def _insight(source, kind, message, confidence, action=None) -> AIInsight:
    return AIInsight(
        message=message,
        source=source,
        type=kind,
        confidence=confidence,
        action=action
    )


def _previous_band(table: BandTable, label: str):
    for prev, band in zip(table, table.bands[1:]):
        if band.label == label:
            return prev
    return None


# =============================================================================
# Sample size
# =============================================================================

def sample_size_insights(
    outputs: SampleSizeOutputs,
    inputs=None,
    tables: BenchmarkTables = DEFAULT_TABLES
) -> list[AIInsight]:
    src = CalculatorType.SAMPLE
    insights = []
    n = outputs.recommended_sample

    if outputs.subgroup_capacity >= 4:
        insights.append(_insight(
            src, InsightType.RECOMMENDATION,
            f"This sample allows analysis of {outputs.subgroup_capacity} subgroups "
            f"(n={n // outputs.subgroup_capacity} each).",
            0.95
        ))
    elif outputs.subgroup_capacity < 2:
        insights.append(_insight(
            src, InsightType.WARNING,
            "Sample size may be too small for meaningful subgroup analysis. "
            "Consider increasing to at least 400.",
            0.9,
            InsightAction("Increase to 400", "sample_size", 400)
        ))

    if outputs.estimated_cost > 30000:
        if inputs is not None:
            relaxed = inputs.margin_of_error + 1
            insights.append(_insight(
                src, InsightType.OPTIMIZATION,
                f"Estimated cost: ${outputs.estimated_cost:,.0f}. Consider reducing MOE "
                f"target to {relaxed:g}% to reduce sample and cost.",
                0.85,
                InsightAction(f"Set MOE to {relaxed:g}%", "margin_of_error", relaxed)
            ))
        else:
            insights.append(_insight(
                src, InsightType.OPTIMIZATION,
                f"Estimated cost: ${outputs.estimated_cost:,.0f}. A looser MOE target "
                "would reduce sample and cost.",
                0.85
            ))

    for benchmark in tables.sample_sizes:
        if benchmark.minimum <= n <= benchmark.typical * 2:
            insights.append(_insight(
                src, InsightType.BENCHMARK,
                f"Sample aligns with {benchmark.methodology} standards "
                f"(typical: {benchmark.typical}, min: {benchmark.minimum}).",
                0.9
            ))
            break

    if lookup_band(tables.sample_quality, n).label == QualityRating.EXCELLENT.value:
        insights.append(_insight(
            src, InsightType.RECOMMENDATION,
            "Excellent sample size for high-stakes decisions and detailed segmentation analysis.",
            0.95
        ))

    return insights


# =============================================================================
# Margin of error
# =============================================================================

def moe_insights(
    outputs: MOEOutputs,
    inputs=None,
    tables: BenchmarkTables = DEFAULT_TABLES
) -> list[AIInsight]:
    src = CalculatorType.MOE
    insights = []
    moe = outputs.margin_of_error
    band = lookup_band(tables.moe, moe)
    acceptable = tables.standards["max_acceptable_moe"]
    optimal = tables.standards["optimal_moe"]
    to_3 = outputs.what_if.get("to_reach_3_percent")
    to_5 = outputs.what_if.get("to_reach_5_percent")

    if band.label == QualityRating.EXCELLENT.value:
        insights.append(_insight(
            src, InsightType.BENCHMARK,
            f"±{moe}% is excellent precision. Industry standard accepts up to ±{acceptable}%.",
            0.95
        ))
    elif band.label == QualityRating.POOR.value and isinstance(to_5, int):
        insights.append(_insight(
            src, InsightType.WARNING,
            f"±{moe}% is high. For reliable insights, increase sample to {to_5:,}.",
            0.9,
            InsightAction(f"Set sample to {to_5}", "sample_size", to_5)
        ))

    if optimal < moe <= acceptable and isinstance(to_3, int):
        extra = ""
        if inputs is not None:
            extra = f" (+{to_3 - inputs.sample_size:,})"
        insights.append(_insight(
            src, InsightType.OPTIMIZATION,
            f"To reach ±{optimal}% MOE, you need {to_3:,} respondents{extra}.",
            0.95
        ))

    insights.append(_insight(src, InsightType.RECOMMENDATION, outputs.client_friendly, 0.9))
    return insights


# =============================================================================
# MaxDiff
# =============================================================================

def maxdiff_insights(
    outputs: MaxDiffOutputs,
    inputs=None,
    tables: BenchmarkTables = DEFAULT_TABLES
) -> list[AIInsight]:
    src = CalculatorType.MAXDIFF
    insights = []

    if outputs.is_balanced_design:
        insights.append(_insight(
            src, InsightType.RECOMMENDATION,
            f"Balanced design: each item shown {outputs.times_each_item_shown}x per respondent. "
            "Optimal for reliable utility estimation.",
            0.95
        ))
    else:
        insights.append(_insight(
            src, InsightType.WARNING,
            f"Design is not perfectly balanced: some items appear more than "
            f"{outputs.times_each_item_shown}x. Consider adjusting items per set.",
            0.85
        ))

    planned = inputs.sample_size if inputs is not None else None
    if planned is not None and planned < outputs.minimum_sample_for_utilities:
        target = outputs.minimum_sample_for_utilities
        insights.append(_insight(
            src, InsightType.WARNING,
            f"For individual-level utility estimation, increase sample to {target}.",
            0.9,
            InsightAction(f"Set sample to {target}", "sample_size", target)
        ))

    if outputs.estimated_duration > 5:
        insights.append(_insight(
            src, InsightType.WARNING,
            f"{outputs.number_of_sets} sets (~{outputs.estimated_duration} min) may cause "
            f"fatigue. Consider reducing to {math.ceil(outputs.number_of_sets * 0.7)} sets.",
            0.8
        ))

    if outputs.reliability_score == "high":
        insights.append(_insight(
            src, InsightType.BENCHMARK,
            "High reliability design - suitable for segmentation and individual-level analysis.",
            0.9
        ))

    low = tables.standards["maxdiff_min_items"]
    high = tables.standards["maxdiff_max_items"]
    if outputs.total_items > high:
        insights.append(_insight(
            src, InsightType.OPTIMIZATION,
            f"{outputs.total_items} items is above optimal range ({low}-{high}). "
            "Consider grouping or reducing items.",
            0.85
        ))

    return insights


# =============================================================================
# Demographics
# =============================================================================

def demographics_insights(
    outputs: DemographicsOutputs,
    inputs=None,
    tables: BenchmarkTables = DEFAULT_TABLES
) -> list[AIInsight]:
    src = CalculatorType.DEMOGRAPHICS
    insights = []
    rate = outputs.incidence_rate
    band = lookup_band(tables.incidence, rate)

    if rate >= 50:
        insights.append(_insight(
            src, InsightType.BENCHMARK,
            f"{rate}% incidence rate - broad target, straightforward to achieve.",
            0.9
        ))
    elif rate < 20:
        insights.append(_insight(
            src, InsightType.WARNING,
            f"{rate}% incidence rate is low ({band.description.lower()}). "
            "Expect extended fieldwork or consider broadening criteria.",
            0.85
        ))

    min_subgroup = tables.standards["min_sample_for_subgroup"]
    if outputs.smallest_cell < min_subgroup:
        moe = f" (±{outputs.smallest_cell_moe}%)" if outputs.smallest_cell_moe else ""
        insights.append(_insight(
            src, InsightType.WARNING,
            f"Smallest quota cell has n={outputs.smallest_cell}{moe}; cells under "
            f"{min_subgroup} should not be read on their own.",
            0.85
        ))

    if outputs.hard_to_reach:
        insights.append(_insight(src, InsightType.WARNING, outputs.hard_to_reach[0], 0.8))

    if outputs.is_achievable:
        insights.append(_insight(
            src, InsightType.RECOMMENDATION,
            "Distribution is achievable with standard online panel recruitment.",
            0.9
        ))
    else:
        insights.append(_insight(
            src, InsightType.WARNING,
            "This distribution may be challenging. Consider panel blend or extended fieldwork.",
            0.85
        ))

    insights.append(_insight(
        src, InsightType.BENCHMARK,
        f"Population data from {outputs.data_source} ({outputs.last_updated}).",
        1.0
    ))
    return insights


# =============================================================================
# Feasibility
# =============================================================================

_VERDICT_MESSAGES = {
    FeasibilityVerdict.FEASIBLE: (
        InsightType.RECOMMENDATION, "Project is feasible with current parameters.", 0.95
    ),
    FeasibilityVerdict.AT_RISK: (
        InsightType.WARNING, "Feasible with adjustments. Review risk areas below.", 0.9
    ),
    FeasibilityVerdict.INFEASIBLE: (
        InsightType.WARNING, "High risk. Significant changes recommended.", 0.9
    ),
}


def feasibility_insights(
    outputs: FeasibilityScore,
    inputs=None,
    tables: BenchmarkTables = DEFAULT_TABLES
) -> list[AIInsight]:
    src = CalculatorType.FEASIBILITY
    insights = []

    kind, text, confidence = _VERDICT_MESSAGES[outputs.verdict]
    insights.append(_insight(
        src, kind, f"Score: {outputs.overall_score:.0f}/100 - {text}", confidence
    ))

    severe = [
        r for r in outputs.risks
        if r.severity in (RiskSeverity.HIGH, RiskSeverity.CRITICAL)
    ]
    if severe:
        insights.append(_insight(src, InsightType.WARNING, severe[0].description, 0.9))

    if outputs.dimensions:
        weakest = min(outputs.dimensions, key=lambda d: d.score)
        if weakest.score < 70:
            insights.append(_insight(
                src, InsightType.OPTIMIZATION,
                f"Weakest area: {weakest.dimension} ({weakest.score:.0f}/100). {weakest.rationale}",
                0.85
            ))

    if isinstance(outputs, FeasibilityOutputs):
        insights.append(_insight(
            src, InsightType.BENCHMARK,
            f"Estimated: ${outputs.estimated_cost:,.0f} over {outputs.estimated_days} days.",
            0.8
        ))
        if outputs.recommendations:
            insights.append(_insight(
                src, InsightType.RECOMMENDATION, outputs.recommendations[0], 0.85
            ))

    return insights


# =============================================================================
# LOI
# =============================================================================

_TIER_DESCRIPTIONS = {
    "low": "cost-efficient",
    "standard": "standard pricing",
    "medium": "moderate premium",
    "high": "significant premium",
    "premium": "highest tier",
}


def loi_cost_insights(
    outputs: LOICostOutputs,
    inputs=None,
    tables: BenchmarkTables = DEFAULT_TABLES
) -> list[AIInsight]:
    src = CalculatorType.LOI
    insights = [_insight(
        src, InsightType.BENCHMARK,
        f"${outputs.cost_per_complete_min:.2f}-${outputs.cost_per_complete_max:.2f} per complete "
        f"({_TIER_DESCRIPTIONS.get(outputs.cost_tier, outputs.cost_tier)}, "
        f"{outputs.incidence_tier.replace('_', ' ')} incidence).",
        0.9
    )]

    if outputs.incidence_multiplier >= 2:
        insights.append(_insight(
            src, InsightType.WARNING,
            f"Low incidence multiplies the cost per complete by {outputs.incidence_multiplier:g}. "
            "Consider broadening criteria or a specialist panel.",
            0.85
        ))

    shorter = _previous_band(tables.loi_cost, outputs.cost_tier)
    if shorter is not None and outputs.loi_multiplier > 1:
        target = math.ceil(shorter.upper) - 1
        action = None
        if inputs is not None:
            action = InsightAction(f"Set LOI to {target} min", "loi_minutes", target)
        insights.append(_insight(
            src, InsightType.OPTIMIZATION,
            f"Cutting the interview to {target} min moves it to the {shorter.label} tier "
            f"(x{shorter.value:g} instead of x{outputs.loi_multiplier:g}).",
            0.8,
            action
        ))

    return insights


def interview_length_insights(
    outputs: QuestionnaireOutputs,
    inputs=None,
    tables: BenchmarkTables = DEFAULT_TABLES
) -> list[AIInsight]:
    src = CalculatorType.LOI
    insights = [_insight(
        src, InsightType.BENCHMARK,
        f"{outputs.estimated_loi} min survey = "
        f"{_TIER_DESCRIPTIONS.get(outputs.cost_tier, outputs.cost_tier)} "
        f"(~${outputs.cost_per_respondent:g}/respondent).",
        0.9
    )]

    if outputs.dropout_risk == "high":
        insights.append(_insight(
            src, InsightType.WARNING,
            "High dropout risk. Consider increasing incentive or reducing survey length.",
            0.9
        ))
    elif outputs.dropout_risk == "medium":
        insights.append(_insight(
            src, InsightType.WARNING,
            "Moderate dropout risk. Position engaging questions early to maintain attention.",
            0.85
        ))

    if 0 < outputs.fatigue_point < outputs.estimated_loi:
        insights.append(_insight(
            src, InsightType.WARNING,
            f"Quality may decline after {outputs.fatigue_point} min. "
            "Place critical questions before this point.",
            0.85
        ))

    if outputs.optimization_suggestions:
        insights.append(_insight(
            src, InsightType.OPTIMIZATION, outputs.optimization_suggestions[0], 0.8
        ))

    if inputs is not None:
        open_ends = inputs.open_end_short + inputs.open_end_long
        if open_ends > 3:
            insights.append(_insight(
                src, InsightType.OPTIMIZATION,
                f"{open_ends} open-ends may fatigue respondents. "
                "Consider limiting to 2-3 essential ones.",
                0.85
            ))

    if outputs.estimated_loi <= tables.standards["optimal_loi"]:
        insights.append(_insight(
            src, InsightType.RECOMMENDATION,
            "Survey length is optimal for data quality and respondent experience.",
            0.95
        ))

    return insights


_GENERATORS = (
    (SampleSizeOutputs, sample_size_insights),
    (MOEOutputs, moe_insights),
    (MaxDiffOutputs, maxdiff_insights),
    (DemographicsOutputs, demographics_insights),
    (FeasibilityScore, feasibility_insights),
    (LOICostOutputs, loi_cost_insights),
    (QuestionnaireOutputs, interview_length_insights),
)


def generate_insights(
    outputs,
    tables: Optional[BenchmarkTables] = None,
    inputs=None
) -> list[AIInsight]:
    """
    Insights for any calculator's outputs.

    inputs is optional; rules that need the original inputs (an offered
    change, a delta from the current sample) are skipped without it.
    A NoResult, Infeasible or NotFound outcome has no insights.
    """
    if not is_result(outputs):
        return []

    tables = tables or DEFAULT_TABLES
    for output_type, generator in _GENERATORS:
        if isinstance(outputs, output_type):
            insights = generator(outputs, inputs, tables)
            logger.debug(
                "insights.generated",
                outputs=output_type.__name__,
                count=len(insights)
            )
            return insights

    logger.debug("insights.unsupported_outputs", outputs=type(outputs).__name__)
    return []
