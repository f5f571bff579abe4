"""
Length of Interview (LOI) Calculator

Two related estimates:
- Fieldwork cost from interview length, incidence and sample size, using
  capped LOI and incidence tiers (never extrapolated past the last tier)
- Interview length from a questionnaire outline, with fatigue and dropout
  signals and suggestions for trimming
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional, Union

from ..reference import (
    BASE_COST_PER_COMPLETE,
    INCIDENCE_BANDS,
    INDUSTRY_STANDARDS,
    LOI_COST_TIERS,
    METHOD_BASE_COSTS,
    Methodology,
    lookup_band,
)
from ..results import NoResult
from ..utils import round_count


# =============================================================================
# Cost estimate
# =============================================================================

@dataclass
class LOICostInputs:
    """Inputs of the LOI cost estimator."""
    loi_minutes: float = 10.0
    incidence_rate: float = 100.0  # percent
    sample_size: int = 0


@dataclass
class LOICostOutputs:
    """Cost-per-complete and total cost ranges."""
    cost_tier: str = ""
    incidence_tier: str = ""
    loi_multiplier: float = 1.0
    incidence_multiplier: float = 1.0
    cost_per_complete_min: float = 0.0
    cost_per_complete_max: float = 0.0
    total_min: float = 0.0
    total_max: float = 0.0
    description: str = ""


def estimate_cost(inputs: LOICostInputs) -> Union[LOICostOutputs, NoResult]:
    """Cost range for a study of given length, incidence and size."""
    if inputs.loi_minutes is None or inputs.loi_minutes <= 0:
        return NoResult("Interview length must be positive")
    if inputs.incidence_rate is None or not 0 < inputs.incidence_rate <= 100:
        return NoResult("Incidence rate must be in (0, 100]")
    if inputs.sample_size is None or inputs.sample_size <= 0:
        return NoResult("Sample size must be positive")

    loi_band = lookup_band(LOI_COST_TIERS, inputs.loi_minutes)
    incidence_band = lookup_band(INCIDENCE_BANDS, inputs.incidence_rate)
    multiplier = loi_band.value * incidence_band.value

    low, high = BASE_COST_PER_COMPLETE
    cpc_min = round(low * multiplier, 2)
    cpc_max = round(high * multiplier, 2)

    return LOICostOutputs(
        cost_tier=loi_band.label,
        incidence_tier=incidence_band.label,
        loi_multiplier=loi_band.value,
        incidence_multiplier=incidence_band.value,
        cost_per_complete_min=cpc_min,
        cost_per_complete_max=cpc_max,
        total_min=round(cpc_min * inputs.sample_size, 2),
        total_max=round(cpc_max * inputs.sample_size, 2),
        description=f"{loi_band.description}; {incidence_band.description}"
    )


# =============================================================================
# Interview length estimate
# =============================================================================

# Seconds per question (or per item/stimulus) by type
QUESTION_SECONDS = MappingProxyType({
    "single_choice": 12,
    "multiple_choice": 18,
    "matrix_item": 5,
    "open_end_short": 45,
    "open_end_long": 90,
    "ranking": 25,
    "maxdiff_set": 20,
    "conjoint_task": 25,
    "image": 10,
    "video_overhead": 5,
    "intro_screen": 15,
})

NAVIGATION_BUFFER_SECONDS = 30


@dataclass
class QuestionnaireInputs:
    """Outline of a questionnaire by question type."""
    single_choice: int = 0
    multiple_choice: int = 0
    matrix_questions: int = 0
    matrix_items: int = 0
    open_end_short: int = 0
    open_end_long: int = 0
    ranking: int = 0
    maxdiff_sets: int = 0
    conjoint_tasks: int = 0
    images: int = 0
    videos: int = 0
    video_duration: int = 0  # average seconds per video
    intro_screens: int = 0


@dataclass
class QuestionnaireOutputs:
    """Estimated interview length and its consequences."""
    estimated_loi: int = 0
    min_loi: int = 0
    max_loi: int = 0
    cost_tier: str = "standard"
    fatigue_point: int = 0  # minutes, 0 when no fatigue expected
    dropout_risk: str = "low"
    speeding_risk: int = 0  # percent of respondents likely to speed
    cost_per_respondent: float = 0.0
    optimization_suggestions: list = field(default_factory=list)


def _questionnaire_seconds(q: QuestionnaireInputs) -> int:
    s = QUESTION_SECONDS
    return (
        q.single_choice * s["single_choice"]
        + q.multiple_choice * s["multiple_choice"]
        + q.matrix_questions * q.matrix_items * s["matrix_item"]
        + q.open_end_short * s["open_end_short"]
        + q.open_end_long * s["open_end_long"]
        + q.ranking * s["ranking"]
        + q.maxdiff_sets * s["maxdiff_set"]
        + q.conjoint_tasks * s["conjoint_task"]
        + q.images * s["image"]
        + q.videos * (q.video_duration + s["video_overhead"])
        + q.intro_screens * s["intro_screen"]
        + NAVIGATION_BUFFER_SECONDS
    )


def _optimizations(q: QuestionnaireInputs, loi: int) -> list[str]:
    suggestions = []

    if loi > INDUSTRY_STANDARDS["max_loi_before_fatigue"]:
        if q.matrix_items > 5:
            saved = round_count((q.matrix_items - 5) * QUESTION_SECONDS["matrix_item"] / 60)
            suggestions.append(
                f"Reduce matrix items from {q.matrix_items} to 5 (saves ~{saved} min)"
            )
        if q.open_end_long > 1:
            suggestions.append(
                f"Consider converting {q.open_end_long - 1} long open-ends to short format "
                f"(saves ~{(q.open_end_long - 1) * 0.75} min)"
            )
        if q.ranking > 2:
            suggestions.append("Limit ranking questions to essential attributes only")

    if q.videos > 2:
        suggestions.append("Consider reducing video stimuli to maintain engagement")

    return suggestions


def estimate_interview_length(
    inputs: QuestionnaireInputs,
    methodology: Optional[Methodology] = Methodology.ONLINE
) -> Union[QuestionnaireOutputs, NoResult]:
    """Estimate LOI from a questionnaire outline."""
    counts = vars(inputs)
    negative = [name for name, value in counts.items() if value is None or value < 0]
    if negative:
        return NoResult(f"Question counts cannot be negative: {', '.join(negative)}")

    loi = round_count(_questionnaire_seconds(inputs) / 60)
    tier = lookup_band(LOI_COST_TIERS, loi)

    if loi > 20:
        dropout = "high"
    elif loi > 15:
        dropout = "medium"
    else:
        dropout = "low"

    if loi > 15:
        speeding = 15
    elif loi > 10:
        speeding = 8
    else:
        speeding = 3

    base_cost = METHOD_BASE_COSTS[Methodology(methodology or Methodology.ONLINE)]

    return QuestionnaireOutputs(
        estimated_loi=loi,
        min_loi=max(1, round_count(loi * 0.8)),
        max_loi=round_count(loi * 1.3),
        cost_tier=tier.label,
        fatigue_point=0 if loi <= INDUSTRY_STANDARDS["optimal_loi"] else min(loi, 12),
        dropout_risk=dropout,
        speeding_risk=speeding,
        cost_per_respondent=round(tier.value * base_cost, 2),
        optimization_suggestions=_optimizations(inputs, loi)
    )
