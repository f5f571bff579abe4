"""
Reference Data Store

Immutable lookup tables shared by all calculators:
- Band tables (MOE quality, sample quality, LOI and incidence cost tiers)
- Z-scores per confidence level
- Census population structure per country
- Study-type sample benchmarks and fieldwork constants
"""

from .bands import Band, BandTable, lookup_band
from .benchmarks import (
    ConfidenceLevel,
    QualityRating,
    Methodology,
    Z_SCORES,
    z_score,
    MOE_BENCHMARKS,
    SAMPLE_QUALITY_BANDS,
    LOI_COST_TIERS,
    INCIDENCE_BANDS,
    BASE_COST_PER_COMPLETE,
    SAMPLE_SIZE_BENCHMARKS,
    SampleSizeBenchmark,
    get_sample_size_benchmark,
    INDUSTRY_STANDARDS,
    METHOD_BASE_COSTS,
    METHOD_DAILY_CAPACITY,
    market_difficulty,
    COUNTRY_PANEL_COSTS,
    DEFAULT_PANEL_COST,
    METHOD_COST_MULTIPLIERS,
    MetricDistribution,
    METRIC_DISTRIBUTIONS,
    panel_cost,
)
from .census import (
    CensusEntry,
    CENSUS_DATA,
    cell_key,
    parse_age_range,
    get_census,
    lookup_census,
    census_marginals,
    available_countries,
)

__all__ = [
    "Band",
    "BandTable",
    "lookup_band",
    "ConfidenceLevel",
    "QualityRating",
    "Methodology",
    "Z_SCORES",
    "z_score",
    "MOE_BENCHMARKS",
    "SAMPLE_QUALITY_BANDS",
    "LOI_COST_TIERS",
    "INCIDENCE_BANDS",
    "BASE_COST_PER_COMPLETE",
    "SAMPLE_SIZE_BENCHMARKS",
    "SampleSizeBenchmark",
    "get_sample_size_benchmark",
    "INDUSTRY_STANDARDS",
    "METHOD_BASE_COSTS",
    "METHOD_DAILY_CAPACITY",
    "market_difficulty",
    "COUNTRY_PANEL_COSTS",
    "DEFAULT_PANEL_COST",
    "METHOD_COST_MULTIPLIERS",
    "MetricDistribution",
    "METRIC_DISTRIBUTIONS",
    "panel_cost",
    "CensusEntry",
    "CENSUS_DATA",
    "cell_key",
    "parse_age_range",
    "get_census",
    "lookup_census",
    "census_marginals",
    "available_countries",
]
