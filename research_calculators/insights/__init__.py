"""
Insight Generator

Templated insights for calculator results, judged against the
benchmark tables, plus planning recommendations worked back from budget,
timeline and subgroup constraints.
"""

from .generator import (
    InsightType,
    InsightAction,
    AIInsight,
    BenchmarkTables,
    DEFAULT_TABLES,
    sample_size_insights,
    moe_insights,
    maxdiff_insights,
    demographics_insights,
    feasibility_insights,
    loi_cost_insights,
    interview_length_insights,
    generate_insights,
)
from .recommendations import (
    BudgetRecommendation,
    TimelineRecommendation,
    SubgroupRecommendation,
    BenchmarkRating,
    BenchmarkComparison,
    StudyContext,
    budget_recommendation,
    timeline_recommendation,
    subgroup_recommendation,
    compare_with_benchmark,
    contextual_insights,
)

__all__ = [
    "InsightType",
    "InsightAction",
    "AIInsight",
    "BenchmarkTables",
    "DEFAULT_TABLES",
    "sample_size_insights",
    "moe_insights",
    "maxdiff_insights",
    "demographics_insights",
    "feasibility_insights",
    "loi_cost_insights",
    "interview_length_insights",
    "generate_insights",
    "BudgetRecommendation",
    "TimelineRecommendation",
    "SubgroupRecommendation",
    "BenchmarkRating",
    "BenchmarkComparison",
    "StudyContext",
    "budget_recommendation",
    "timeline_recommendation",
    "subgroup_recommendation",
    "compare_with_benchmark",
    "contextual_insights",
]
