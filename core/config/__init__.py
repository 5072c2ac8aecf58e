"""
Configuration Module
Centralized configuration for feed diversification
"""

from .diversification_config import (
    ConfigurationError,
    DiversificationConfig,
    InvalidWeightsError,
    ScoringWeights,
    WEIGHT_SUM_TOLERANCE,
)

__all__ = [
    "ConfigurationError",
    "DiversificationConfig",
    "InvalidWeightsError",
    "ScoringWeights",
    "WEIGHT_SUM_TOLERANCE",
]
