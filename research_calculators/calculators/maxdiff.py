"""
MaxDiff Design Calculator

Derives the parameters of a best-worst scaling exercise:
- Items shown per set (4-5 by default, bounded by the item list)
- Number of sets so every item is seen often enough
- Respondents needed for the chosen reliability tier

A cyclic layout spreads items evenly over sets; it is a balanced
heuristic, not a full incomplete-block design solver.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional, Union
import math

import structlog

from ..config import MaxDiffConfig, ReliabilityTier, get_settings
from ..results import Infeasible, NoResult
from ..utils import round_count

logger = structlog.get_logger(__name__)

SECONDS_PER_SET = 25
MIN_UTILITY_SAMPLE = 200
UTILITY_SAMPLE_PER_ITEM = 15


@dataclass(frozen=True)
class ReliabilitySpec:
    """Design targets for a reliability tier."""
    min_appearances: int
    observations_per_set: int


RELIABILITY_TIERS = MappingProxyType({
    ReliabilityTier.LOW: ReliabilitySpec(min_appearances=2, observations_per_set=10),
    ReliabilityTier.MEDIUM: ReliabilitySpec(min_appearances=3, observations_per_set=15),
    ReliabilityTier.HIGH: ReliabilitySpec(min_appearances=4, observations_per_set=25),
})


@dataclass
class MaxDiffInputs:
    """Inputs of the MaxDiff calculator."""
    total_items: int = 0
    reliability: ReliabilityTier = ReliabilityTier.MEDIUM
    items_per_set: Optional[int] = None
    sample_size: Optional[int] = None


@dataclass
class MaxDiffOutputs:
    """Result of the MaxDiff calculator."""
    total_items: int = 0
    items_per_set: int = 0
    number_of_sets: int = 0
    minimum_respondents: int = 0
    min_appearances: int = 0
    times_each_item_shown: int = 0
    is_balanced_design: bool = False
    design: list = field(default_factory=list)  # one tuple of 1-based item numbers per set
    total_comparisons: int = 0
    estimated_duration: int = 0  # minutes
    minimum_sample_for_utilities: int = 0
    reliability_score: str = "low"


def choose_items_per_set(
    total_items: int,
    requested: Optional[int] = None,
    config: Optional[MaxDiffConfig] = None
) -> int:
    """Items per set from the heuristic or a request, clipped to [min, min(items, max)]."""
    config = config or get_settings().maxdiff
    if requested is None:
        requested = (
            config.items_per_set_small
            if total_items <= config.large_design_threshold
            else config.items_per_set_large
        )
    upper = min(total_items, config.max_items_per_set)
    return max(config.min_items_per_set, min(requested, upper))


def build_design(total_items: int, items_per_set: int, number_of_sets: int) -> list:
    """Cyclic layout: slot k of the design shows item (k mod total_items) + 1."""
    return [
        tuple(
            (s * items_per_set + j) % total_items + 1
            for j in range(items_per_set)
        )
        for s in range(number_of_sets)
    ]


def _reliability_score(times_shown: int, sample: int) -> str:
    if times_shown >= 3 and sample >= 200:
        return "high"
    if times_shown >= 2 and sample >= 100:
        return "medium"
    return "low"


def compute_maxdiff(
    inputs: MaxDiffInputs,
    config: Optional[MaxDiffConfig] = None
) -> Union[MaxDiffOutputs, NoResult, Infeasible]:
    """Derive a MaxDiff design for the item list and reliability tier."""
    items = inputs.total_items
    if items is None or items <= 0:
        return NoResult("Number of items must be positive")
    if inputs.items_per_set is not None and inputs.items_per_set <= 0:
        return NoResult("Items per set must be positive")

    try:
        spec = RELIABILITY_TIERS[ReliabilityTier(inputs.reliability)]
    except ValueError:
        return NoResult(f"Unknown reliability tier: {inputs.reliability}")

    per_set = choose_items_per_set(items, inputs.items_per_set, config)
    if items < per_set:
        logger.debug("maxdiff.infeasible", items=items, items_per_set=per_set)
        return Infeasible(
            f"{items} items cannot fill sets of {per_set}; add items or use a ranking question"
        )

    sets = math.ceil(spec.min_appearances * items / per_set)
    design = build_design(items, per_set, sets)

    appearances = [0] * items
    for shown in design:
        for item in shown:
            appearances[item - 1] += 1
    times_shown = min(appearances)

    minimum_respondents = sets * spec.observations_per_set
    planned = inputs.sample_size if inputs.sample_size is not None else minimum_respondents

    return MaxDiffOutputs(
        total_items=items,
        items_per_set=per_set,
        number_of_sets=sets,
        minimum_respondents=minimum_respondents,
        min_appearances=spec.min_appearances,
        times_each_item_shown=times_shown,
        is_balanced_design=max(appearances) == times_shown,
        design=design,
        total_comparisons=sets * (per_set - 1) * 2,
        estimated_duration=round_count(sets * SECONDS_PER_SET / 60),
        minimum_sample_for_utilities=max(MIN_UTILITY_SAMPLE, items * UTILITY_SAMPLE_PER_ITEM),
        reliability_score=_reliability_score(times_shown, planned)
    )
