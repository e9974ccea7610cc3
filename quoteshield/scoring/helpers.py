"""
Scoring Helper Functions and Constants

Contains category weights, risk thresholds, rounding and clamping
utilities used across all scoring calculations.
"""

import math
from typing import Dict, Mapping
from enum import Enum


# ============================================================================
# CATEGORIES & WEIGHTS
# ============================================================================

# Evaluation order; explanations and category_scores follow it
CATEGORY_ORDER = ("payment", "timeline", "scope", "warranty", "pricing")

CATEGORY_WEIGHTS: Dict[str, float] = {
    "payment": 0.25,
    "timeline": 0.20,
    "scope": 0.20,
    "warranty": 0.20,
    "pricing": 0.15,
}

CATEGORY_LABELS: Dict[str, str] = {
    "payment": "payment structure",
    "timeline": "timeline and milestones",
    "scope": "scope and materials",
    "warranty": "warranty coverage",
    "pricing": "pricing breakdown",
}

# Divisor used by pricing ratios when the quote total is unknown
TOTAL_DIVISOR_PLACEHOLDER = 1.0


# ============================================================================
# RISK LEVELS
# ============================================================================

class RiskLevel(str, Enum):
    """Coarse risk classification derived from a 0-100 score."""
    LOW = "low"         # score >= 85
    MEDIUM = "medium"   # 65-84
    HIGH = "high"       # < 65


LOW_RISK_THRESHOLD = 85
MEDIUM_RISK_THRESHOLD = 65

RISK_RANK: Dict[RiskLevel, int] = {
    RiskLevel.HIGH: 3,
    RiskLevel.MEDIUM: 2,
    RiskLevel.LOW: 1,
}


def score_to_risk_level(score: float) -> RiskLevel:
    """
    Classify a 0-100 score into a risk level.

    Args:
        score: Final or category score (higher = safer)

    Returns:
        RiskLevel enum
    """
    if score >= LOW_RISK_THRESHOLD:
        return RiskLevel.LOW
    elif score >= MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.HIGH


# ============================================================================
# NUMERIC HELPERS
# ============================================================================

def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 always rounding up."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Clamp to [0, 100] and round half-up."""
    return round_half_up(max(0.0, min(100.0, value)))


def calculate_weighted_score(
    scores: Mapping[str, float],
    weights: Mapping[str, float] = CATEGORY_WEIGHTS
) -> int:
    """
    Fold category scores into a single 0-100 score.

    Args:
        scores: Category name -> score (0-100)
        weights: Category name -> weight (should sum to 1.0)

    Returns:
        Clamped, rounded weighted score. Categories missing from
        `scores` contribute zero.
    """
    weighted_sum = sum(
        scores.get(category, 0) * weight
        for category, weight in weights.items()
    )
    return clamp_score(weighted_sum)


def format_percent(value: float) -> str:
    """Render a percent value without a trailing .0 for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
