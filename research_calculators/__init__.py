"""
Research Calculators

Decision-support engine behind the proposal authoring tool's research
calculators: margin of error and sample size, demographic quotas, MaxDiff
design, interview length costing, feasibility scoring, entity auto-fill
from past proposals and the advisory insights shown next to each result.

Every calculator is a pure function over immutable reference tables.
"""

__version__ = "0.1.0"
