"""
Margin of Error Calculator

Implements the precision side of simple random sampling:
- Margin of error for a given sample (worst-case p = 0.5 by default)
- The inverse: sample needed to reach a target margin
- Finite population correction when the universe is small
"""

from dataclasses import dataclass, field
from typing import Optional, Union
import math

import structlog

from ..reference import MOE_BENCHMARKS, QualityRating, lookup_band, z_score
from ..results import Infeasible, NoResult

logger = structlog.get_logger(__name__)


def _check_proportion(proportion: float) -> Optional[NoResult]:
    if not 0 < proportion < 1:
        return NoResult(f"Response distribution must be between 0 and 1, got {proportion}")
    return None


def margin_of_error(
    n: float,
    confidence: int,
    population: Optional[float] = None,
    proportion: float = 0.5
) -> Union[float, NoResult, Infeasible]:
    """
    Margin of error in percent for a sample of n.

    moe = z * sqrt(p(1-p)/n), multiplied by sqrt((N-n)/(N-1)) when a
    population N is given. A population no larger than the sample is
    reported as an infeasible oversample.
    """
    if n is None or n <= 0:
        return NoResult("Sample size must be positive")

    z = z_score(confidence)
    if z is None:
        return NoResult(f"Unsupported confidence level: {confidence}")

    bad_p = _check_proportion(proportion)
    if bad_p:
        return bad_p

    moe = z * math.sqrt(proportion * (1 - proportion) / n)

    if population is not None:
        if population <= 1:
            return NoResult("Population size must be greater than 1")
        if population <= n:
            return Infeasible(
                f"Sample of {n:g} covers the whole population of {population:g}"
            )
        moe *= math.sqrt((population - n) / (population - 1))

    return moe * 100


def required_sample_size(
    target_moe_percent: float,
    confidence: int,
    population: Optional[float] = None,
    proportion: float = 0.5
) -> Union[int, NoResult]:
    """
    Smallest sample reaching target_moe_percent.

    Uses n0 = z^2 p(1-p) / e^2 and, for a finite population N, the closed
    form n = n0 N / (N - 1 + n0). Always rounded up.
    """
    if target_moe_percent is None or not 0 < target_moe_percent <= 50:
        return NoResult("Target margin of error must be in (0, 50]")

    z = z_score(confidence)
    if z is None:
        return NoResult(f"Unsupported confidence level: {confidence}")

    bad_p = _check_proportion(proportion)
    if bad_p:
        return bad_p

    e = target_moe_percent / 100
    n = (z ** 2) * proportion * (1 - proportion) / (e ** 2)

    if population is not None:
        if population <= 0:
            return NoResult("Population size must be positive")
        n = n * population / (population - 1 + n)

    # Strip float noise so an exact integer is not bumped up by one
    return math.ceil(round(n, 9))


@dataclass
class MOEInputs:
    """Inputs of the margin of error calculator."""
    sample_size: int = 0
    confidence_level: int = 95
    population_size: Optional[int] = None


@dataclass
class MOEOutputs:
    """Result of the margin of error calculator."""
    margin_of_error: float = 0.0
    quality_rating: QualityRating = QualityRating.POOR
    interpretation: str = ""
    client_friendly: str = ""
    what_if: dict = field(default_factory=dict)  # to_reach_3_percent, to_reach_5_percent


_PROBABILITY_WORDING = {
    90: "9 out of 10",
    95: "19 out of 20",
    99: "99 out of 100",
}

_CLIENT_FRIENDLY = {
    QualityRating.EXCELLENT: (
        "With ±{moe}% margin of error, these results are highly reliable "
        "and suitable for critical business decisions."
    ),
    QualityRating.GOOD: (
        "With ±{moe}% margin of error, these results are solid and "
        "appropriate for most research applications."
    ),
    QualityRating.ACCEPTABLE: (
        "With ±{moe}% margin of error, these results provide directional "
        "insights suitable for exploratory research."
    ),
    QualityRating.POOR: (
        "With ±{moe}% margin of error, these results should be interpreted "
        "with caution and used for initial exploration only."
    ),
}


def rate_margin_of_error(moe_percent: float) -> QualityRating:
    """Quality rating of a margin of error."""
    return QualityRating(lookup_band(MOE_BENCHMARKS, moe_percent).label)


def compute_margin_of_error(inputs: MOEInputs) -> Union[MOEOutputs, NoResult, Infeasible]:
    """Margin of error with rating, wording and what-if samples."""
    moe = margin_of_error(
        inputs.sample_size,
        inputs.confidence_level,
        inputs.population_size
    )
    if isinstance(moe, (NoResult, Infeasible)):
        logger.debug("moe.no_result", reason=moe.reason, inputs=inputs)
        return moe

    rounded = round(moe, 2)
    rating = rate_margin_of_error(rounded)
    confidence = int(inputs.confidence_level)

    interpretation = (
        f"In {_PROBABILITY_WORDING[confidence]} surveys conducted the same way, "
        f"the results would fall within ±{rounded}% of this survey's results."
    )

    return MOEOutputs(
        margin_of_error=rounded,
        quality_rating=rating,
        interpretation=interpretation,
        client_friendly=_CLIENT_FRIENDLY[rating].format(moe=rounded),
        what_if={
            "to_reach_3_percent": required_sample_size(3, confidence, inputs.population_size),
            "to_reach_5_percent": required_sample_size(5, confidence, inputs.population_size),
        }
    )
