"""
Research Calculators

Each calculator takes a plain inputs dataclass and returns an outputs
dataclass, or a typed NoResult / Infeasible / NotFound outcome:
- Margin of error and sample size
- Demographic quota distribution
- MaxDiff design
- Interview length and fieldwork cost
- Feasibility scoring
"""

from .margin_of_error import (
    MOEInputs,
    MOEOutputs,
    margin_of_error,
    required_sample_size,
    rate_margin_of_error,
    compute_margin_of_error,
)
from .sample_size import (
    SampleSizeInputs,
    SampleSizeOutputs,
    rate_sample_size,
    compute_sample_size,
)
from .demographics import (
    QuotaCell,
    QuotaAllocation,
    DemographicsInputs,
    DemographicsOutputs,
    census_quota_cells,
    compute_demographics,
)
from .maxdiff import (
    MaxDiffInputs,
    MaxDiffOutputs,
    RELIABILITY_TIERS,
    choose_items_per_set,
    build_design,
    compute_maxdiff,
)
from .loi import (
    LOICostInputs,
    LOICostOutputs,
    QuestionnaireInputs,
    QuestionnaireOutputs,
    estimate_cost,
    estimate_interview_length,
)
from .feasibility import (
    FeasibilityVerdict,
    RiskSeverity,
    DimensionScore,
    FeasibilityRisk,
    FeasibilityScore,
    FeasibilityInputs,
    FeasibilityOutputs,
    verdict_for,
    score_feasibility,
    assess_project,
)

__all__ = [
    "MOEInputs",
    "MOEOutputs",
    "margin_of_error",
    "required_sample_size",
    "rate_margin_of_error",
    "compute_margin_of_error",
    "SampleSizeInputs",
    "SampleSizeOutputs",
    "rate_sample_size",
    "compute_sample_size",
    "QuotaCell",
    "QuotaAllocation",
    "DemographicsInputs",
    "DemographicsOutputs",
    "census_quota_cells",
    "compute_demographics",
    "MaxDiffInputs",
    "MaxDiffOutputs",
    "RELIABILITY_TIERS",
    "choose_items_per_set",
    "build_design",
    "compute_maxdiff",
    "LOICostInputs",
    "LOICostOutputs",
    "QuestionnaireInputs",
    "QuestionnaireOutputs",
    "estimate_cost",
    "estimate_interview_length",
    "FeasibilityVerdict",
    "RiskSeverity",
    "DimensionScore",
    "FeasibilityRisk",
    "FeasibilityScore",
    "FeasibilityInputs",
    "FeasibilityOutputs",
    "verdict_for",
    "score_feasibility",
    "assess_project",
]
