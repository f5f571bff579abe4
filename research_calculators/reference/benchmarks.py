"""
Benchmark Tables

Industry reference data used by every calculator:
- Z-scores per confidence level
- Margin of error and sample size quality bands
- Interview length (LOI) and incidence cost tiers
- Typical sample sizes by study type
- Fieldwork cost and capacity by data collection method
- Market difficulty by country

All tables are built once at import and never mutated.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Optional
import math

from .bands import Band, BandTable


class ConfidenceLevel(int, Enum):
    """Supported confidence levels (percent)."""
    NINETY = 90
    NINETY_FIVE = 95
    NINETY_NINE = 99


class QualityRating(str, Enum):
    """Qualitative precision label shared by all calculators."""
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"


class Methodology(str, Enum):
    """Data collection methods."""
    ONLINE = "online"
    CATI = "cati"
    F2F = "f2f"
    CLT = "clt"
    MIXED = "mixed"


Z_SCORES = MappingProxyType({
    ConfidenceLevel.NINETY: 1.645,
    ConfidenceLevel.NINETY_FIVE: 1.96,
    ConfidenceLevel.NINETY_NINE: 2.576,
})


def z_score(confidence) -> Optional[float]:
    """Z-score for a confidence level, or None if unsupported."""
    try:
        return Z_SCORES[ConfidenceLevel(confidence)]
    except ValueError:
        return None


# =============================================================================
# Quality bands
# =============================================================================

MOE_BENCHMARKS = BandTable("margin_of_error", [
    Band(0, 3, QualityRating.EXCELLENT.value,
         "High precision - suitable for critical business decisions"),
    Band(3, 5, QualityRating.GOOD.value,
         "Standard precision - appropriate for most research applications"),
    Band(5, 10, QualityRating.ACCEPTABLE.value,
         "Moderate precision - suitable for directional insights"),
    Band(10, math.inf, QualityRating.POOR.value,
         "Low precision - use for exploratory research only"),
])

SAMPLE_QUALITY_BANDS = BandTable("sample_quality", [
    Band(0, 200, QualityRating.POOR.value, "Too small for subgroup analysis"),
    Band(200, 500, QualityRating.ACCEPTABLE.value, "Supports total-level reads"),
    Band(500, 1000, QualityRating.GOOD.value, "Supports a handful of subgroups"),
    Band(1000, math.inf, QualityRating.EXCELLENT.value,
         "Supports detailed segmentation"),
])


# =============================================================================
# Cost tiers
# =============================================================================

# Bounds are in minutes; value is the cost multiplier.
LOI_COST_TIERS = BandTable("loi_cost", [
    Band(0, 6, "low", "Quick surveys - lower dropout, better data quality", 0.8),
    Band(6, 11, "standard", "Standard length - most common for quantitative research", 1.0),
    Band(11, 16, "medium", "Moderate length - detailed studies, some fatigue risk", 1.3),
    Band(16, 21, "high", "Long surveys - increased incentives needed", 1.6),
    Band(21, math.inf, "premium", "Very long - high dropout risk, premium incentives", 2.0),
])

# Bounds are incidence percent; value is the cost multiplier.
INCIDENCE_BANDS = BandTable("incidence", [
    Band(0, 5, "very_low", "Niche audience - specialist sourcing required", 3.0),
    Band(5, 15, "low", "Hard to find - expect heavy screening", 2.0),
    Band(15, 30, "moderate", "Targeted audience - some screening overhead", 1.4),
    Band(30, 60, "healthy", "Common audience - routine panel sourcing", 1.1),
    Band(60, math.inf, "broad", "General population - minimal screening", 1.0),
])

# Online cost per complete (USD) at standard LOI and broad incidence.
BASE_COST_PER_COMPLETE = (4.0, 6.0)


@dataclass(frozen=True)
class SampleSizeBenchmark:
    """Typical sample size for a study type."""
    methodology: str
    typical: int
    minimum: int
    description: str


SAMPLE_SIZE_BENCHMARKS = (
    SampleSizeBenchmark("Brand Tracking", 500, 300, "Quarterly or monthly tracking studies"),
    SampleSizeBenchmark("Concept Testing", 400, 200, "New product/concept evaluation"),
    SampleSizeBenchmark("Ad Testing", 300, 150, "Advertising effectiveness research"),
    SampleSizeBenchmark("U&A Study", 1000, 500, "Usage & Attitude comprehensive studies"),
    SampleSizeBenchmark("Price Testing", 500, 300, "Pricing and willingness-to-pay research"),
    SampleSizeBenchmark("NPS/Satisfaction", 400, 200, "Customer satisfaction tracking"),
    SampleSizeBenchmark("Segmentation", 1500, 800, "Market segmentation studies"),
    SampleSizeBenchmark("Qualitative", 30, 15, "In-depth interviews or focus groups"),
)


def get_sample_size_benchmark(methodology: str) -> Optional[SampleSizeBenchmark]:
    """Find a study-type benchmark by name (case-insensitive)."""
    wanted = methodology.lower()
    for benchmark in SAMPLE_SIZE_BENCHMARKS:
        if benchmark.methodology.lower() == wanted:
            return benchmark
    return None


INDUSTRY_STANDARDS = MappingProxyType({
    "min_sample_for_subgroup": 100,
    "optimal_moe": 3,
    "max_acceptable_moe": 5,
    "optimal_loi": 10,
    "max_loi_before_fatigue": 15,
    "min_online_sample": 200,
    "min_qual_sample": 15,
    "maxdiff_min_items": 8,
    "maxdiff_max_items": 20,
    "maxdiff_optimal_items_per_set": 4,
    "online_cost_per_respondent": 20,
})


# =============================================================================
# Fieldwork by method and market
# =============================================================================

# USD per respondent at LOI <= 10 minutes
METHOD_BASE_COSTS = MappingProxyType({
    Methodology.ONLINE: 15,
    Methodology.CATI: 25,
    Methodology.F2F: 50,
    Methodology.CLT: 40,
    Methodology.MIXED: 30,
})

# Completes per day at 100% incidence
METHOD_DAILY_CAPACITY = MappingProxyType({
    Methodology.ONLINE: 500,
    Methodology.CATI: 100,
    Methodology.F2F: 30,
    Methodology.CLT: 50,
    Methodology.MIXED: 200,
})

# 0 (easy) - 100 (very hard) recruitment difficulty per market
MARKET_DIFFICULTY = MappingProxyType({
    "usa": 10,
    "united states": 10,
    "uk": 10,
    "united kingdom": 10,
    "germany": 15,
    "france": 15,
    "netherlands": 15,
    "spain": 20,
    "italy": 20,
    "poland": 25,
    "turkey": 25,
})

UNKNOWN_MARKET_DIFFICULTY = 40


def market_difficulty(country: str) -> int:
    """Recruitment difficulty for a market; unknown markets rate as hard."""
    return MARKET_DIFFICULTY.get(country.strip().lower(), UNKNOWN_MARKET_DIFFICULTY)


# =============================================================================
# Budget and benchmark comparison
# =============================================================================

# Online panel cost per respondent (USD) before LOI and method multipliers
COUNTRY_PANEL_COSTS = MappingProxyType({
    "turkey": 10,
    "uk": 15,
    "united kingdom": 15,
    "germany": 14,
    "france": 14,
    "usa": 12,
    "united states": 12,
    "poland": 8,
    "netherlands": 15,
    "spain": 12,
    "italy": 13,
})

DEFAULT_PANEL_COST = 12

METHOD_COST_MULTIPLIERS = MappingProxyType({
    Methodology.ONLINE: 1.0,
    Methodology.CATI: 2.5,
    Methodology.F2F: 5.0,
    Methodology.CLT: 3.5,
    Methodology.MIXED: 2.0,
})


@dataclass(frozen=True)
class MetricDistribution:
    """Industry mean and spread of a study metric."""
    mean: float
    std_dev: float
    lower_is_better: bool = False


METRIC_DISTRIBUTIONS = MappingProxyType({
    "sample_concept_test": MetricDistribution(350, 100),
    "sample_tracker": MetricDistribution(750, 200),
    "sample_uat": MetricDistribution(1200, 400),
    "moe": MetricDistribution(4.5, 1.5, lower_is_better=True),
    "loi": MetricDistribution(15, 5, lower_is_better=True),
    "cost_per_complete": MetricDistribution(18, 8, lower_is_better=True),
})


def panel_cost(country: str) -> int:
    """Online cost per respondent for a market; unknown markets use the default."""
    return COUNTRY_PANEL_COSTS.get(country.strip().lower(), DEFAULT_PANEL_COST)
