"""
Configuration Module for Feed Diversification
Named settings with documented defaults, environment variable support
and fail-fast validation at construction time
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

WEIGHT_SUM_TOLERANCE = 1e-6


class ConfigurationError(ValueError):
    """Fatal configuration problem detected at startup"""


class InvalidWeightsError(ConfigurationError):
    """Scoring weights do not form a valid weighted sum"""


@dataclass(frozen=True)
class ScoringWeights:
    """Composite scoring weights (must sum to 1.0)"""
    recency: float = 0.35    # How fresh is the article?
    diversity: float = 0.35  # Source diversity bonus
    quality: float = 0.20    # Content quality signals
    category: float = 0.10   # Category balance bonus

    def __post_init__(self):
        errors = self.errors()
        if errors:
            for error in errors:
                logger.error(f"Scoring weights validation error: {error}")
            raise InvalidWeightsError("; ".join(errors))

    @property
    def total(self) -> float:
        return self.recency + self.diversity + self.quality + self.category

    def errors(self) -> List[str]:
        """Return every problem with these weights (empty when valid)"""
        errors = []
        for name in ("recency", "diversity", "quality", "category"):
            value = getattr(self, name)
            if not (0.0 <= value <= 1.0):
                errors.append(f"{name} weight must be 0-1, got {value}")

        if abs(self.total - 1.0) > WEIGHT_SUM_TOLERANCE:
            errors.append(f"Scoring weights must sum to 1.0, got {self.total:.3f}")

        return errors

    def to_dict(self) -> Dict[str, float]:
        return {
            "recency": self.recency,
            "diversity": self.diversity,
            "quality": self.quality,
            "category": self.category,
        }


@dataclass(frozen=True)
class DiversificationConfig:
    """Configuration for the feed diversification engine"""

    # Category coverage
    min_articles_per_category: int = 1

    # Scoring weights
    weights: ScoringWeights = field(default_factory=ScoringWeights)

    # Recency decay: score = e^(-hours / half_life)
    recency_half_life_hours: float = 24.0

    # Source diversity: sigmoid over-representation penalty
    overrepresentation_midpoint: float = 0.3
    overrepresentation_steepness: float = 10.0

    # Source diversity: penalty per recent article from the same source
    consecutive_window: int = 2
    consecutive_penalty: float = 0.6

    # Category balance: 0.5 + gain * (expected share - actual share)
    category_balance_gain: float = 4.0

    # Re-score the remainder against every placement (O(n^2))
    progressive_rescoring: bool = False

    # Diagnostics
    debug_stats_window: int = 20
    debug_mode: bool = False

    def __post_init__(self):
        if not self.validate():
            raise ConfigurationError(
                "Invalid diversification configuration: " + "; ".join(self.errors())
            )

    @classmethod
    def from_env(cls) -> "DiversificationConfig":
        """Load configuration from environment variables"""
        defaults = cls()

        weights = ScoringWeights(
            recency=_parse_float(
                os.getenv("DIVERSIFY_RECENCY_WEIGHT"), defaults.weights.recency
            ),
            diversity=_parse_float(
                os.getenv("DIVERSIFY_DIVERSITY_WEIGHT"), defaults.weights.diversity
            ),
            quality=_parse_float(
                os.getenv("DIVERSIFY_QUALITY_WEIGHT"), defaults.weights.quality
            ),
            category=_parse_float(
                os.getenv("DIVERSIFY_CATEGORY_WEIGHT"), defaults.weights.category
            ),
        )

        config = cls(
            min_articles_per_category=_parse_int(
                os.getenv("DIVERSIFY_MIN_PER_CATEGORY"), defaults.min_articles_per_category
            ),
            weights=weights,
            recency_half_life_hours=_parse_float(
                os.getenv("DIVERSIFY_RECENCY_HALF_LIFE_HOURS"), defaults.recency_half_life_hours
            ),
            overrepresentation_midpoint=_parse_float(
                os.getenv("DIVERSIFY_OVERREP_MIDPOINT"), defaults.overrepresentation_midpoint
            ),
            overrepresentation_steepness=_parse_float(
                os.getenv("DIVERSIFY_OVERREP_STEEPNESS"), defaults.overrepresentation_steepness
            ),
            consecutive_window=_parse_int(
                os.getenv("DIVERSIFY_CONSECUTIVE_WINDOW"), defaults.consecutive_window
            ),
            consecutive_penalty=_parse_float(
                os.getenv("DIVERSIFY_CONSECUTIVE_PENALTY"), defaults.consecutive_penalty
            ),
            category_balance_gain=_parse_float(
                os.getenv("DIVERSIFY_CATEGORY_GAIN"), defaults.category_balance_gain
            ),
            progressive_rescoring=_parse_bool(
                os.getenv("DIVERSIFY_PROGRESSIVE"), defaults.progressive_rescoring
            ),
            debug_stats_window=_parse_int(
                os.getenv("DIVERSIFY_DEBUG_WINDOW"), defaults.debug_stats_window
            ),
            debug_mode=_parse_bool(
                os.getenv("DIVERSIFY_DEBUG"), defaults.debug_mode
            ),
        )

        logger.info(f"DiversificationConfig loaded from environment: "
                    f"min_per_category={config.min_articles_per_category}, "
                    f"weights={config.weights.to_dict()}, "
                    f"progressive={config.progressive_rescoring}")

        return config

    def errors(self) -> List[str]:
        """Collect configuration problems"""
        errors = []

        if self.min_articles_per_category < 0:
            errors.append(
                f"min_articles_per_category must be >= 0, got {self.min_articles_per_category}"
            )

        if self.recency_half_life_hours <= 0:
            errors.append(
                f"recency_half_life_hours must be > 0, got {self.recency_half_life_hours}"
            )

        if not (0.0 <= self.overrepresentation_midpoint <= 1.0):
            errors.append(
                f"overrepresentation_midpoint must be 0-1, got {self.overrepresentation_midpoint}"
            )

        if self.overrepresentation_steepness <= 0:
            errors.append(
                f"overrepresentation_steepness must be > 0, got {self.overrepresentation_steepness}"
            )

        if self.consecutive_window < 0:
            errors.append(f"consecutive_window must be >= 0, got {self.consecutive_window}")

        if not (0.0 < self.consecutive_penalty <= 1.0):
            errors.append(f"consecutive_penalty must be 0-1, got {self.consecutive_penalty}")

        if self.category_balance_gain < 0:
            errors.append(
                f"category_balance_gain must be >= 0, got {self.category_balance_gain}"
            )

        if self.debug_stats_window < 1:
            errors.append(f"debug_stats_window must be >= 1, got {self.debug_stats_window}")

        return errors

    def validate(self) -> bool:
        """Validate configuration values"""
        errors = self.errors()
        if errors:
            for error in errors:
                logger.error(f"Config validation error: {error}")
            return False

        return True

    def to_dict(self) -> dict:
        """Convert config to dictionary"""
        return {
            "coverage": {
                "min_articles_per_category": self.min_articles_per_category,
            },
            "scoring_weights": self.weights.to_dict(),
            "recency": {
                "half_life_hours": self.recency_half_life_hours,
            },
            "source_diversity": {
                "overrepresentation_midpoint": self.overrepresentation_midpoint,
                "overrepresentation_steepness": self.overrepresentation_steepness,
                "consecutive_window": self.consecutive_window,
                "consecutive_penalty": self.consecutive_penalty,
            },
            "category_balance": {
                "gain": self.category_balance_gain,
            },
            "ranking": {
                "progressive_rescoring": self.progressive_rescoring,
            },
            "diagnostics": {
                "debug_stats_window": self.debug_stats_window,
                "debug_mode": self.debug_mode,
            },
        }


# ==========================================================================
# HELPER FUNCTIONS
# ==========================================================================

def _parse_bool(value: Optional[str], default: bool) -> bool:
    """Parse boolean from environment variable"""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on", "enabled")


def _parse_int(value: Optional[str], default: int) -> int:
    """Parse integer from environment variable"""
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        logger.warning(f"Invalid integer value: {value}, using default {default}")
        return default


def _parse_float(value: Optional[str], default: float) -> float:
    """Parse float from environment variable"""
    if value is None:
        return default
    try:
        return float(value)
    except (ValueError, TypeError):
        logger.warning(f"Invalid float value: {value}, using default {default}")
        return default
