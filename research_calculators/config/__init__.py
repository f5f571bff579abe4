"""
Configuration Management

Centralized configuration for:
- Feasibility verdict thresholds and dimension weights
- MaxDiff items-per-set heuristic
- Calculator auto-fill defaults
- Logging
"""

from .settings import (
    Settings,
    FeasibilityConfig,
    MaxDiffConfig,
    AutoFillConfig,
    ReliabilityTier,
    get_settings
)

__all__ = [
    "Settings",
    "FeasibilityConfig",
    "MaxDiffConfig",
    "AutoFillConfig",
    "ReliabilityTier",
    "get_settings"
]
