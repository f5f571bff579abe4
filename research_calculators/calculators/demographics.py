"""
Demographics Distribution Calculator

Turns a quota breakdown into per-cell respondent counts:
- Explicit cells keep the count the researcher asked for
- Proportional cells share the rest of the sample by census weight
- Rounding drift is absorbed by the largest proportional cell so the
  cells always add up to the overall sample

The precision of the thinnest cell drives the quality rating.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

import structlog

from ..reference import (
    QualityRating,
    get_census,
    parse_age_range,
)
from ..results import Infeasible, NoResult, NotFound
from ..utils import round_count
from .margin_of_error import margin_of_error, rate_margin_of_error

logger = structlog.get_logger(__name__)

HARD_TO_REACH_SHARE = 0.05
MIN_ACHIEVABLE_INCIDENCE = 10.0
MAX_ACHIEVABLE_SAMPLE = 5000


@dataclass(frozen=True)
class QuotaCell:
    """A requested quota cell; proportional to census unless target is set."""
    key: str
    target: Optional[int] = None

    @property
    def is_explicit(self) -> bool:
        return self.target is not None


@dataclass
class QuotaAllocation:
    """Computed count for one cell."""
    key: str
    count: int = 0
    share: float = 0.0
    census_proportion: Optional[float] = None
    explicit: bool = False


@dataclass
class DemographicsInputs:
    """Inputs of the demographics calculator; cells=None means the full census."""
    country: str = "Turkey"
    overall_n: int = 0
    cells: Optional[list] = None


@dataclass
class DemographicsOutputs:
    """Result of the demographics calculator."""
    country: str = ""
    overall_n: int = 0
    allocations: list = field(default_factory=list)
    smallest_cell: int = 0
    smallest_cell_moe: Optional[float] = None
    quality_rating: QualityRating = QualityRating.POOR
    age_distribution: dict = field(default_factory=dict)
    gender_distribution: dict = field(default_factory=dict)
    incidence_rate: float = 0.0
    is_achievable: bool = False
    hard_to_reach: list = field(default_factory=list)
    data_source: str = ""
    last_updated: str = ""

    @property
    def counts(self) -> dict[str, int]:
        return {a.key: a.count for a in self.allocations}


def census_quota_cells(
    country: str,
    age_range: tuple = (18, 100),
    gender: str = "all"
) -> Union[list, NotFound]:
    """
    Proportional cells for the census age bands inside age_range.

    gender is "all", "male" or "female".
    """
    entry = get_census(country)
    if isinstance(entry, NotFound):
        return entry

    low, high = age_range
    ages = []
    for age in entry.age_ranges:
        age_min, age_max = parse_age_range(age)
        if age_min >= low and age_max <= high:
            ages.append(age)

    genders = entry.genders if gender == "all" else (gender.lower(),)
    return [
        QuotaCell(f"{g}:{age}")
        for g in genders
        for age in ages
        if f"{g}:{age}" in entry.cells
    ]


def _reconcile(counts: dict[str, int], keys: list, target_total: int) -> None:
    """Push the rounding remainder onto the largest cells, never below zero."""
    remainder = target_total - sum(counts.values())
    if remainder == 0 or not keys:
        return

    for key in sorted(keys, key=lambda k: -counts[k]):
        adjusted = max(0, counts[key] + remainder)
        remainder -= adjusted - counts[key]
        counts[key] = adjusted
        if remainder == 0:
            break


def _marginals(allocations: list) -> tuple[dict, dict]:
    ages: dict[str, int] = {}
    genders: dict[str, int] = {}
    for allocation in allocations:
        if ":" not in allocation.key:
            continue
        gender, age = allocation.key.split(":", 1)
        ages[age] = ages.get(age, 0) + allocation.count
        genders[gender] = genders.get(gender, 0) + allocation.count
    return ages, genders


def compute_demographics(
    inputs: DemographicsInputs
) -> Union[DemographicsOutputs, NoResult, Infeasible, NotFound]:
    """
    Per-cell quota counts for a country and overall sample.

    Proportional cells share the sample left after explicit cells in
    proportion to their census weight among the selected cells, so a subset
    of census cells is scaled up to fill the whole sample.
    """
    n = inputs.overall_n
    if n is None or n <= 0:
        return NoResult("Overall sample size must be positive")

    entry = get_census(inputs.country)
    if isinstance(entry, NotFound):
        logger.debug("demographics.unknown_country", country=inputs.country)
        return entry

    cells = inputs.cells
    if cells is None:
        cells = [QuotaCell(key) for key in entry.cells]
    if not cells:
        return NoResult("Quota breakdown has no cells")

    keys = [cell.key.strip().lower() for cell in cells]
    if len(set(keys)) != len(keys):
        return NoResult("Quota breakdown lists the same cell twice")

    proportions: dict[str, Optional[float]] = {}
    explicit_total = 0
    for key, cell in zip(keys, cells):
        proportions[key] = entry.cells.get(key)
        if cell.is_explicit:
            if cell.target < 0:
                return NoResult(f"Quota for {cell.key} cannot be negative")
            explicit_total += cell.target
        elif proportions[key] is None:
            logger.debug("demographics.unknown_cell", country=inputs.country, cell=cell.key)
            return NotFound(f"{inputs.country}/{cell.key}")

    if explicit_total > n:
        return Infeasible(
            f"Explicit quotas need {explicit_total} respondents but the sample is {n}"
        )

    proportional_keys = [k for k, c in zip(keys, cells) if not c.is_explicit]
    if not proportional_keys and explicit_total != n:
        return Infeasible(
            f"Explicit quotas add up to {explicit_total}, expected {n}"
        )

    counts: dict[str, int] = {}
    remaining = n - explicit_total
    weight_total = sum(proportions[k] for k in proportional_keys)
    for key, cell in zip(keys, cells):
        if cell.is_explicit:
            counts[key] = cell.target
        else:
            counts[key] = round_count(remaining * proportions[key] / weight_total)

    _reconcile(counts, proportional_keys, n)

    allocations = [
        QuotaAllocation(
            key=key,
            count=counts[key],
            share=counts[key] / n,
            census_proportion=proportions[key],
            explicit=cell.is_explicit
        )
        for key, cell in zip(keys, cells)
    ]

    smallest = min(a.count for a in allocations)
    smallest_moe = margin_of_error(smallest, 95) if smallest > 0 else None
    rating = (
        rate_margin_of_error(smallest_moe)
        if isinstance(smallest_moe, float)
        else QualityRating.POOR
    )

    incidence = sum(p for p in proportions.values() if p is not None) * 100
    ages, genders = _marginals(allocations)

    hard_to_reach = [
        f"{a.key} ({a.census_proportion:.1%} of adults) may require extended fieldwork"
        for a in allocations
        if a.census_proportion is not None and a.census_proportion < HARD_TO_REACH_SHARE
    ]

    return DemographicsOutputs(
        country=entry.country,
        overall_n=n,
        allocations=allocations,
        smallest_cell=smallest,
        smallest_cell_moe=round(smallest_moe, 2) if isinstance(smallest_moe, float) else None,
        quality_rating=rating,
        age_distribution=ages,
        gender_distribution=genders,
        incidence_rate=round(incidence, 1),
        is_achievable=incidence >= MIN_ACHIEVABLE_INCIDENCE and n <= MAX_ACHIEVABLE_SAMPLE,
        hard_to_reach=hard_to_reach,
        data_source=entry.source,
        last_updated=entry.last_updated
    )
