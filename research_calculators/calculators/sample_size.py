"""
Sample Size Calculator

Recommends a sample for a target margin of error and expected response
distribution, with a practical range, subgroup capacity and a rough
online cost.
"""

from dataclasses import dataclass
from typing import Optional, Union
import math

import structlog

from ..reference import (
    INDUSTRY_STANDARDS,
    SAMPLE_QUALITY_BANDS,
    QualityRating,
    lookup_band,
)
from ..results import NoResult
from .margin_of_error import required_sample_size

logger = structlog.get_logger(__name__)


@dataclass
class SampleSizeInputs:
    """Inputs of the sample size calculator."""
    confidence_level: int = 95
    margin_of_error: float = 5.0
    population_size: Optional[int] = None
    response_distribution: float = 50.0  # percent


@dataclass
class SampleSizeOutputs:
    """Result of the sample size calculator."""
    recommended_sample: int = 0
    minimum_sample: int = 0
    maximum_sample: int = 0
    subgroup_capacity: int = 0
    estimated_cost: float = 0.0
    quality_rating: QualityRating = QualityRating.POOR


def rate_sample_size(n: int) -> QualityRating:
    """Quality rating of a total sample size."""
    return QualityRating(lookup_band(SAMPLE_QUALITY_BANDS, n).label)


def compute_sample_size(inputs: SampleSizeInputs) -> Union[SampleSizeOutputs, NoResult]:
    """Recommended sample and its practical envelope."""
    n = required_sample_size(
        inputs.margin_of_error,
        inputs.confidence_level,
        inputs.population_size,
        proportion=inputs.response_distribution / 100
    )
    if isinstance(n, NoResult):
        logger.debug("sample_size.no_result", reason=n.reason, inputs=inputs)
        return n

    per_subgroup = INDUSTRY_STANDARDS["min_sample_for_subgroup"]

    return SampleSizeOutputs(
        recommended_sample=n,
        minimum_sample=math.ceil(n * 0.7),
        maximum_sample=math.ceil(n * 1.5),
        subgroup_capacity=n // per_subgroup,
        estimated_cost=n * INDUSTRY_STANDARDS["online_cost_per_respondent"],
        quality_rating=rate_sample_size(n)
    )
