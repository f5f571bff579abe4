"""
Planning Recommendations

Works a study backwards from its constraints:
- Budget: the largest affordable sample and the precision it buys
- Timeline: samples that fit the fieldwork window for a method
- Subgroups: cell size and precision per breakout
- Benchmarks: where a value sits in the industry distribution

contextual_insights() adds study-type, budget and market aware insights
on top of the per-calculator rules in the generator.
"""

from dataclasses import dataclass
from enum import Enum
from statistics import NormalDist
from typing import Optional, Union
import math

import structlog

from ..calculators import (
    FeasibilityOutputs,
    MOEOutputs,
    QuestionnaireOutputs,
    SampleSizeOutputs,
)
from ..calculators.margin_of_error import margin_of_error
from ..extraction import CalculatorType
from ..reference import (
    INDUSTRY_STANDARDS,
    LOI_COST_TIERS,
    METHOD_COST_MULTIPLIERS,
    METHOD_DAILY_CAPACITY,
    METRIC_DISTRIBUTIONS,
    Methodology,
    lookup_band,
    panel_cost,
)
from ..results import Infeasible, NoResult, NotFound, is_result
from ..utils import round_count, round_half_up
from .generator import AIInsight, InsightAction, InsightType

logger = structlog.get_logger(__name__)

QUALITY_BUFFER_PERCENT = 15
SOFT_LAUNCH_DAYS = 2
DIRECTIONAL_CELL_SIZE = 50
COST_PER_COMPLETE_CEILING = 25
MAX_MARKETS_BEFORE_STAGGER = 3


def _floor(x: float) -> int:
    # Strip float noise so 0.7 * 6000 stays 4200
    return math.floor(round(x, 9))


# =============================================================================
# Budget
# =============================================================================

@dataclass
class BudgetRecommendation:
    """Sample a budget can buy, after a screening buffer."""
    budget: float = 0.0
    max_sample: int = 0
    recommended_sample: int = 0
    moe_at_recommended: float = 0.0  # percent at 95%
    cost_per_respondent: float = 0.0
    buffer_percentage: int = QUALITY_BUFFER_PERCENT


def budget_recommendation(
    budget: float,
    country: str = "Turkey",
    methodology: Methodology = Methodology.ONLINE,
    loi: float = 15.0
) -> Union[BudgetRecommendation, NoResult, Infeasible]:
    """
    Largest and recommended sample for a fieldwork budget.

    Cost per respondent is the market's panel cost times the LOI tier
    multiplier times the method multiplier. The recommended sample keeps
    a 15% buffer for quality screening.
    """
    if budget is None or budget <= 0:
        return NoResult("Budget must be positive")
    if loi is None or loi <= 0:
        return NoResult("Interview length must be positive")
    try:
        method = Methodology(methodology)
    except ValueError:
        return NoResult(f"Unknown methodology: {methodology}")

    tier = lookup_band(LOI_COST_TIERS, loi)
    cost = panel_cost(country) * tier.value * METHOD_COST_MULTIPLIERS[method]

    max_sample = _floor(budget / cost)
    recommended = _floor(max_sample * (100 - QUALITY_BUFFER_PERCENT) / 100)
    if recommended <= 0:
        logger.debug("recommendations.budget_too_small", budget=budget, cost=cost)
        return Infeasible(
            f"A budget of ${budget:,.0f} does not cover a usable sample "
            f"at ${cost:.2f} per respondent"
        )

    return BudgetRecommendation(
        budget=budget,
        max_sample=max_sample,
        recommended_sample=recommended,
        moe_at_recommended=round_half_up(margin_of_error(recommended, 95), 1),
        cost_per_respondent=round(cost, 2)
    )


# =============================================================================
# Timeline
# =============================================================================

@dataclass
class TimelineRecommendation:
    """Samples that fit a fieldwork window."""
    days: int = 0
    methodology: Methodology = Methodology.ONLINE
    comfortable_sample: int = 0
    aggressive_sample: int = 0
    risk_zone: int = 0
    daily_capacity: int = 0  # completes per day at the given incidence


def timeline_recommendation(
    days: int,
    methodology: Methodology = Methodology.ONLINE,
    incidence_rate: float = 100.0
) -> Union[TimelineRecommendation, NoResult]:
    """
    Comfortable, aggressive and risk-zone samples for a timeline.

    The first two days go to soft launch; at least one full day is always
    left for fieldwork.
    """
    if days is None or days <= 0:
        return NoResult("Timeline must be positive")
    if incidence_rate is None or not 0 < incidence_rate <= 100:
        return NoResult("Incidence rate must be in (0, 100]")
    try:
        method = Methodology(methodology)
    except ValueError:
        return NoResult(f"Unknown methodology: {methodology}")

    capacity = METHOD_DAILY_CAPACITY[method] * incidence_rate / 100
    completes = capacity * max(1, days - SOFT_LAUNCH_DAYS)

    return TimelineRecommendation(
        days=days,
        methodology=method,
        comfortable_sample=_floor(completes * 0.7),
        aggressive_sample=_floor(completes),
        risk_zone=_floor(completes * 1.3),
        daily_capacity=round_count(capacity)
    )


# =============================================================================
# Subgroups
# =============================================================================

@dataclass
class SubgroupRecommendation:
    """How well a sample supports a number of breakouts."""
    total_sample: int = 0
    subgroup_count: int = 0
    avg_cell_size: int = 0
    moe_per_cell: Optional[float] = None  # None when cells are empty
    is_reliable: bool = False
    recommended_sample: int = 0
    recommendation: str = ""


def subgroup_recommendation(
    total_sample: int,
    subgroup_count: int,
    min_cell_size: Optional[int] = None
) -> Union[SubgroupRecommendation, NoResult]:
    """Average cell size, its precision and the sample reliable cells need."""
    if min_cell_size is None:
        min_cell_size = INDUSTRY_STANDARDS["min_sample_for_subgroup"]
    if total_sample is None or total_sample <= 0:
        return NoResult("Sample size must be positive")
    if subgroup_count is None or subgroup_count <= 0:
        return NoResult("Subgroup count must be positive")
    if min_cell_size <= 0:
        return NoResult("Minimum cell size must be positive")

    cell = total_sample // subgroup_count
    moe = round_half_up(margin_of_error(cell, 95), 1) if cell > 0 else None
    recommended = min_cell_size * subgroup_count
    reliable = cell >= min_cell_size

    if reliable:
        text = (
            f"Current sample is sufficient for {subgroup_count} subgroups "
            f"with ±{moe:g}% precision per cell."
        )
    elif cell >= DIRECTIONAL_CELL_SIZE:
        text = (
            "Current sample provides directional insights per subgroup. "
            f"For reliable analysis, increase to n={recommended:,}."
        )
    else:
        text = (
            "Sample too small for meaningful subgroup analysis. Consider reducing "
            f"subgroups or increasing sample to n={recommended:,}."
        )

    return SubgroupRecommendation(
        total_sample=total_sample,
        subgroup_count=subgroup_count,
        avg_cell_size=cell,
        moe_per_cell=moe,
        is_reliable=reliable,
        recommended_sample=recommended,
        recommendation=text
    )


# =============================================================================
# Benchmark comparison
# =============================================================================

class BenchmarkRating(str, Enum):
    """Standing of a value against the industry."""
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    BELOW_AVERAGE = "below_average"


@dataclass
class BenchmarkComparison:
    """A value placed in its industry distribution."""
    metric: str
    value: float
    industry_average: float
    percentile: int  # share of studies with a lower value
    rating: BenchmarkRating


def compare_with_benchmark(value: float, metric: str) -> Union[BenchmarkComparison, NotFound]:
    """
    Percentile of value under a normal industry distribution.

    The rating reads the percentile from the favourable side, so a low
    margin of error or a short interview rates excellent.
    """
    distribution = METRIC_DISTRIBUTIONS.get(metric)
    if distribution is None:
        return NotFound(metric)

    cdf = NormalDist(distribution.mean, distribution.std_dev).cdf(value)
    percentile = round_count(cdf * 100)
    favourable = 100 - percentile if distribution.lower_is_better else percentile

    if favourable >= 75:
        rating = BenchmarkRating.EXCELLENT
    elif favourable >= 50:
        rating = BenchmarkRating.GOOD
    elif favourable < 25:
        rating = BenchmarkRating.BELOW_AVERAGE
    else:
        rating = BenchmarkRating.AVERAGE

    return BenchmarkComparison(
        metric=metric,
        value=value,
        industry_average=distribution.mean,
        percentile=percentile,
        rating=rating
    )


# =============================================================================
# Context-aware insights
# =============================================================================

@dataclass
class StudyContext:
    """What is known about the study around a calculation."""
    study_type: str = ""
    client: Optional[str] = None
    country: str = "Turkey"
    budget: Optional[float] = None
    timeline: Optional[int] = None


def _sample_context(outputs: SampleSizeOutputs, inputs, context: StudyContext) -> list[AIInsight]:
    src = CalculatorType.SAMPLE
    insights = []
    study = context.study_type.lower()
    n = outputs.recommended_sample

    if ("concept" in study or "pack" in study) and n > 400:
        insights.append(AIInsight(
            message=f"For concept testing, industry standard is 300-400 respondents. Your "
                    f"calculated sample of {n:,} provides extra precision for subgroup analysis.",
            source=src, type=InsightType.RECOMMENDATION, confidence=0.85
        ))

    if "track" in study and n < 500:
        insights.append(AIInsight(
            message="Brand tracking studies typically need n≥500 per wave for reliable trend analysis.",
            source=src, type=InsightType.WARNING, confidence=0.9,
            action=InsightAction("Increase to 500", "sample_size", 500)
        ))

    if context.budget:
        affordable = budget_recommendation(context.budget, context.country)
        if is_result(affordable) and n > affordable.recommended_sample:
            insights.append(AIInsight(
                message=f"With ${context.budget:,.0f} budget, maximum achievable sample is "
                        f"~{affordable.recommended_sample:,} respondents. Consider adjusting MOE target.",
                source=src, type=InsightType.WARNING, confidence=0.8,
                action=InsightAction(
                    "Adjust to budget", "margin_of_error", affordable.moe_at_recommended
                )
            ))

    if outputs.subgroup_capacity < 3 and inputs.margin_of_error <= 5:
        insights.append(AIInsight(
            message=f"Current sample supports {outputs.subgroup_capacity} subgroups with reliable "
                    "precision. For more demographic breakouts, consider increasing sample.",
            source=src, type=InsightType.BENCHMARK, confidence=0.75
        ))

    return insights


def _moe_context(outputs: MOEOutputs, inputs, context: StudyContext) -> list[AIInsight]:
    src = CalculatorType.MOE
    insights = []
    moe = outputs.margin_of_error
    to_3 = outputs.what_if.get("to_reach_3_percent")

    if moe > 5:
        insights.append(AIInsight(
            message=f"±{moe}% MOE means results within {moe}% of each other are statistically "
                    "tied. Consider this for interpreting close scores.",
            source=src, type=InsightType.RECOMMENDATION, confidence=0.95
        ))

    if moe > 3 and isinstance(to_3, int) and inputs.sample_size < to_3:
        insights.append(AIInsight(
            message=f"Adding {to_3 - inputs.sample_size:,} more respondents would achieve ±3% MOE, "
                    "significantly improving decision confidence.",
            source=src, type=InsightType.OPTIMIZATION, confidence=0.85,
            action=InsightAction(f"Increase to {to_3:,}", "sample_size", to_3)
        ))

    return insights


def _feasibility_context(outputs: FeasibilityOutputs, inputs, context: StudyContext) -> list[AIInsight]:
    src = CalculatorType.FEASIBILITY
    insights = []

    if outputs.estimated_days > inputs.timeline_days:
        overrun = outputs.estimated_days - inputs.timeline_days
        insights.append(AIInsight(
            message=f"Project needs {outputs.estimated_days} days but only {inputs.timeline_days} "
                    f"available. Risk of {overrun}-day overrun.",
            source=src, type=InsightType.WARNING, confidence=0.85
        ))

    completes = inputs.sample_size * len(inputs.countries)
    cost_per_complete = outputs.estimated_cost / completes
    if cost_per_complete > COST_PER_COMPLETE_CEILING:
        insights.append(AIInsight(
            message=f"Cost per complete (${cost_per_complete:.0f}) is above industry average. "
                    "Consider panel optimization or sample reduction.",
            source=src, type=InsightType.BENCHMARK, confidence=0.7
        ))

    if len(inputs.countries) > MAX_MARKETS_BEFORE_STAGGER:
        insights.append(AIInsight(
            message=f"With {len(inputs.countries)} markets, recommend staggered field start to "
                    "manage quality across regions.",
            source=src, type=InsightType.RECOMMENDATION, confidence=0.8
        ))

    return insights


def _questionnaire_context(outputs: QuestionnaireOutputs, inputs, context: StudyContext) -> list[AIInsight]:
    src = CalculatorType.LOI
    insights = []

    if outputs.dropout_risk == "high":
        insights.append(AIInsight(
            message=f"High dropout risk (>15%) expected. Budget {round_count(outputs.estimated_loi * 0.25)} "
                    "extra completes to compensate.",
            source=src, type=InsightType.WARNING, confidence=0.8
        ))

    if inputs.maxdiff_sets > 0 or inputs.conjoint_tasks > 0:
        insights.append(AIInsight(
            message="Place MaxDiff/Conjoint exercises in the first half of the survey for best data quality.",
            source=src, type=InsightType.RECOMMENDATION, confidence=0.85
        ))

    return insights


_CONTEXT_RULES = (
    (SampleSizeOutputs, _sample_context),
    (MOEOutputs, _moe_context),
    (FeasibilityOutputs, _feasibility_context),
    (QuestionnaireOutputs, _questionnaire_context),
)


def contextual_insights(
    outputs,
    inputs,
    context: Optional[StudyContext] = None
) -> list[AIInsight]:
    """Insights that depend on the inputs and the study around them."""
    if not is_result(outputs) or inputs is None:
        return []

    context = context or StudyContext()
    for output_type, rule in _CONTEXT_RULES:
        if isinstance(outputs, output_type):
            insights = rule(outputs, inputs, context)
            logger.debug(
                "recommendations.contextual",
                outputs=output_type.__name__,
                count=len(insights)
            )
            return insights
    return []
