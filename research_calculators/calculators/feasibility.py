"""
Feasibility Scoring Engine

Combines per-dimension scores into a verdict:
- Weighted average of dimension scores (weights normalised to 1)
- Verdict bands: feasible / at risk / infeasible, boundaries go up
- Risks raised per dimension below a floor, whatever the composite says

Dimension scorers turn a project brief (method, sample, markets,
timeline, incidence, LOI) into the scores the engine consumes.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Optional, Union
import math

import structlog

from ..config import FeasibilityConfig, get_settings
from ..reference import (
    INCIDENCE_BANDS,
    LOI_COST_TIERS,
    METHOD_BASE_COSTS,
    METHOD_DAILY_CAPACITY,
    Methodology,
    lookup_band,
    market_difficulty,
)
from ..results import NoResult

logger = structlog.get_logger(__name__)


class FeasibilityVerdict(Enum):
    """Overall verdict on a project."""
    FEASIBLE = "feasible"
    AT_RISK = "at_risk"
    INFEASIBLE = "infeasible"


class RiskSeverity(Enum):
    """Risk severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


SEVERITY_ORDER = {
    RiskSeverity.CRITICAL: 0,
    RiskSeverity.HIGH: 1,
    RiskSeverity.MEDIUM: 2,
    RiskSeverity.LOW: 3,
}


@dataclass
class DimensionScore:
    """Score of one feasibility dimension (0-100)."""
    dimension: str
    score: float
    weight: Optional[float] = None
    rationale: str = ""


@dataclass
class FeasibilityRisk:
    """A risk raised by a weak dimension."""
    severity: RiskSeverity = RiskSeverity.LOW
    description: str = ""
    dimension: str = ""
    mitigation: str = ""


@dataclass
class FeasibilityScore:
    """Composite score, verdict and ranked risks."""
    overall_score: float = 0.0
    verdict: FeasibilityVerdict = FeasibilityVerdict.INFEASIBLE
    dimensions: list = field(default_factory=list)
    risks: list = field(default_factory=list)


MITIGATIONS = MappingProxyType({
    "timeline": "Extend the timeline or reduce the sample size",
    "incidence": "Broaden target criteria or add a specialist panel",
    "sample_market": "Reduce the sample or widen the target market",
    "loi": "Shorten the questionnaire or raise incentives",
    "market_difficulty": "Add local fieldwork partners or drop the hardest markets",
})


def _severity(score: float, floor: float) -> RiskSeverity:
    deficit = (floor - score) / floor
    if deficit < 0.25:
        return RiskSeverity.LOW
    if deficit < 0.5:
        return RiskSeverity.MEDIUM
    if deficit < 0.75:
        return RiskSeverity.HIGH
    return RiskSeverity.CRITICAL


def verdict_for(score: float, config: Optional[FeasibilityConfig] = None) -> FeasibilityVerdict:
    """Verdict band for a composite score; a score on a boundary takes the upper band."""
    config = config or get_settings().feasibility
    if score >= config.feasible_threshold:
        return FeasibilityVerdict.FEASIBLE
    if score >= config.at_risk_threshold:
        return FeasibilityVerdict.AT_RISK
    return FeasibilityVerdict.INFEASIBLE


def score_feasibility(
    dimensions: list,
    weights: Optional[dict] = None,
    config: Optional[FeasibilityConfig] = None
) -> Union[FeasibilityScore, NoResult]:
    """
    Weighted composite of dimension scores with verdict and risks.

    Weight precedence: the DimensionScore's own weight, then weights[dimension],
    then the configured default; a dimension with none of these gets an equal
    share. Weights are normalised so they sum to 1.
    """
    config = config or get_settings().feasibility
    weights = weights or {}

    if not dimensions:
        return NoResult("No dimension scores to combine")

    resolved = []
    for dim in dimensions:
        if dim.score is None or not 0 <= dim.score <= 100:
            return NoResult(f"Score for {dim.dimension} must be within 0-100")

        weight = dim.weight
        if weight is None:
            weight = weights.get(dim.dimension, config.default_weights.get(dim.dimension))
        if weight is None:
            weight = 1 / len(dimensions)
        if weight < 0:
            return NoResult(f"Weight for {dim.dimension} cannot be negative")
        resolved.append((dim, weight))

    total_weight = sum(w for _, w in resolved)
    if total_weight <= 0:
        return NoResult("Dimension weights sum to zero")

    normalised = [
        DimensionScore(
            dimension=dim.dimension,
            score=dim.score,
            weight=w / total_weight,
            rationale=dim.rationale
        )
        for dim, w in resolved
    ]
    # Snap float drift from normalised weights so exact boundaries hold
    composite = round(sum(d.score * d.weight for d in normalised), 9)

    risks = []
    for dim in normalised:
        if dim.score < config.risk_floor:
            risks.append(FeasibilityRisk(
                severity=_severity(dim.score, config.risk_floor),
                description=(
                    f"{dim.dimension} scored {dim.score:.0f}/100, "
                    f"below the floor of {config.risk_floor:.0f}"
                    + (f": {dim.rationale}" if dim.rationale else "")
                ),
                dimension=dim.dimension,
                mitigation=MITIGATIONS.get(dim.dimension, "Review this dimension before proceeding")
            ))

    scores = {d.dimension: d.score for d in normalised}
    risks.sort(key=lambda r: (SEVERITY_ORDER[r.severity], scores[r.dimension]))

    return FeasibilityScore(
        overall_score=composite,
        verdict=verdict_for(composite, config),
        dimensions=normalised,
        risks=risks
    )


# =============================================================================
# Dimension scorers
# =============================================================================

INCIDENCE_SCORES = MappingProxyType({
    "very_low": 10,
    "low": 35,
    "moderate": 65,
    "healthy": 85,
    "broad": 100,
})

LOI_SCORES = MappingProxyType({
    "low": 100,
    "standard": 90,
    "medium": 70,
    "high": 45,
    "premium": 20,
})

# (max share of the market needed, score)
MARKET_SHARE_SCORES = (
    (0.01, 100),
    (0.05, 80),
    (0.10, 60),
    (0.25, 35),
    (0.50, 15),
)


def daily_capacity(methodology: Methodology, incidence_rate: float) -> int:
    """Completes per day for a method at a given incidence (at least 1)."""
    base = METHOD_DAILY_CAPACITY[Methodology(methodology)]
    return max(1, round(base * incidence_rate / 100))


def cost_per_respondent(methodology: Methodology, loi: float) -> float:
    """Fieldwork cost per complete for a method and interview length."""
    tier = lookup_band(LOI_COST_TIERS, loi)
    return round(METHOD_BASE_COSTS[Methodology(methodology)] * tier.value, 2)


def timeline_dimension(
    total_sample: int,
    timeline_days: int,
    methodology: Methodology,
    incidence_rate: float
) -> DimensionScore:
    required = math.ceil(total_sample / daily_capacity(methodology, incidence_rate))
    if required <= timeline_days:
        score = 100.0
        rationale = f"Needs {required} of {timeline_days} available days"
    else:
        score = max(0.0, 100 - (required - timeline_days) / timeline_days * 100)
        rationale = f"Needs {required} days vs {timeline_days} available"
    return DimensionScore("timeline", score, rationale=rationale)


def incidence_dimension(incidence_rate: float) -> DimensionScore:
    band = lookup_band(INCIDENCE_BANDS, incidence_rate)
    return DimensionScore(
        "incidence",
        float(INCIDENCE_SCORES[band.label]),
        rationale=f"{incidence_rate:g}% incidence ({band.label.replace('_', ' ')})"
    )


def sample_market_dimension(
    total_sample: int,
    incidence_rate: float,
    market_size: Optional[int] = None
) -> DimensionScore:
    if market_size:
        share = total_sample / market_size
        score = 0.0
        for max_share, band_score in MARKET_SHARE_SCORES:
            if share <= max_share:
                score = float(band_score)
                break
        return DimensionScore(
            "sample_market",
            score,
            rationale=f"Sample is {share:.1%} of a market of {market_size:,}"
        )

    # Without a market size, judge how many people must be screened
    screened = total_sample / (incidence_rate / 100)
    score = 100.0
    if screened > 10000:
        score -= 30
    elif screened > 5000:
        score -= 15
    return DimensionScore(
        "sample_market",
        score,
        rationale=f"{total_sample:,} completes means screening ~{screened:,.0f} people"
    )


def loi_dimension(loi: float) -> DimensionScore:
    tier = lookup_band(LOI_COST_TIERS, loi)
    return DimensionScore(
        "loi",
        float(LOI_SCORES[tier.label]),
        rationale=f"{loi:g} min interview ({tier.label} tier)"
    )


def market_difficulty_dimension(countries: list) -> DimensionScore:
    difficulties = [market_difficulty(c) for c in countries]
    average = sum(difficulties) / len(difficulties)
    score = min(100.0, max(0.0, 100 - average - 5 * (len(countries) - 1)))
    return DimensionScore(
        "market_difficulty",
        score,
        rationale=f"{len(countries)} market(s), average difficulty {average:.0f}/100"
    )


# =============================================================================
# Project assessment
# =============================================================================

@dataclass
class FeasibilityInputs:
    """A project brief to assess."""
    methodology: Methodology = Methodology.ONLINE
    sample_size: int = 0  # per market
    countries: list = field(default_factory=list)
    timeline_days: int = 14
    incidence_rate: float = 30.0
    loi: Optional[float] = None
    market_size: Optional[int] = None  # target population per market
    target_audience: str = ""


@dataclass
class FeasibilityOutputs(FeasibilityScore):
    """Project assessment: score plus cost, duration and recommendations."""
    estimated_cost: float = 0.0
    estimated_days: int = 0
    recommendations: list = field(default_factory=list)


DEFAULT_LOI = 10


def _recommendations(inputs: FeasibilityInputs, score: FeasibilityScore) -> list[str]:
    recommendations = []

    if any(r.severity in (RiskSeverity.HIGH, RiskSeverity.CRITICAL) for r in score.risks):
        recommendations.append("Address high-risk items before proceeding")

    weakest = min(score.dimensions, key=lambda d: d.score)
    if weakest.score < 70:
        recommendations.append(f"Focus on improving {weakest.dimension}: {weakest.rationale}")

    if inputs.incidence_rate < 20:
        recommendations.append("Consider panel blend for low-incidence audiences")

    if inputs.timeline_days < 14 and inputs.sample_size > 500:
        recommendations.append(
            "Short timeline with large sample - consider increasing team resources"
        )

    return recommendations


def assess_project(
    inputs: FeasibilityInputs,
    weights: Optional[dict] = None,
    config: Optional[FeasibilityConfig] = None
) -> Union[FeasibilityOutputs, NoResult]:
    """Score every dimension of a brief and combine them."""
    if not inputs.sample_size or inputs.sample_size <= 0:
        return NoResult("Sample size must be positive")
    if not inputs.countries:
        return NoResult("At least one market is required")
    if not inputs.timeline_days or inputs.timeline_days <= 0:
        return NoResult("Timeline must be positive")
    if inputs.incidence_rate is None or not 0 < inputs.incidence_rate <= 100:
        return NoResult("Incidence rate must be in (0, 100]")
    if inputs.loi is not None and inputs.loi <= 0:
        return NoResult("Interview length must be positive")
    if inputs.market_size is not None and inputs.market_size <= 0:
        return NoResult("Market size must be positive")

    try:
        methodology = Methodology(inputs.methodology)
    except ValueError:
        return NoResult(f"Unknown methodology: {inputs.methodology}")

    loi = inputs.loi or DEFAULT_LOI
    total_sample = inputs.sample_size * len(inputs.countries)

    dimensions = [
        timeline_dimension(total_sample, inputs.timeline_days, methodology, inputs.incidence_rate),
        incidence_dimension(inputs.incidence_rate),
        sample_market_dimension(inputs.sample_size, inputs.incidence_rate, inputs.market_size),
        loi_dimension(loi),
        market_difficulty_dimension(inputs.countries),
    ]

    score = score_feasibility(dimensions, weights, config)
    if isinstance(score, NoResult):
        return score

    logger.debug(
        "feasibility.assessed",
        overall_score=round(score.overall_score, 1),
        verdict=score.verdict.value,
        risks=len(score.risks)
    )

    return FeasibilityOutputs(
        overall_score=score.overall_score,
        verdict=score.verdict,
        dimensions=score.dimensions,
        risks=score.risks,
        estimated_cost=round(total_sample * cost_per_respondent(methodology, loi), 2),
        estimated_days=math.ceil(total_sample / daily_capacity(methodology, inputs.incidence_rate)),
        recommendations=_recommendations(inputs, score)
    )
