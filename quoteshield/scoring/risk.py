"""
Quote Risk Score Aggregator

Combines the five category scores into a final 0-100 score and a risk
level.

Formula:
    Final_Score = round(clamp(
        Payment × 0.25 +
        Timeline × 0.20 +
        Scope × 0.20 +
        Warranty × 0.20 +
        Pricing × 0.15
    , 0, 100))

Risk level: >= 85 low, >= 65 medium, otherwise high.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from .adapters import ReportSource, adapt_report
from .categories import CategoryScore, score_categories
from .helpers import (
    CATEGORY_ORDER,
    RiskLevel,
    calculate_weighted_score,
    score_to_risk_level,
)
from .report import ReportLike, normalize_report

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreResult:
    """Complete risk scoring result for a quote."""
    final_score: int
    risk_level: RiskLevel
    category_scores: Dict[str, int]
    explanations: Tuple[str, ...]

    # Per-category breakdown (detected signals)
    breakdown: Dict[str, Dict[str, Any]] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation (stable key and explanation order)."""
        return {
            "final_score": self.final_score,
            "risk_level": self.risk_level.value,
            "category_scores": {
                category: self.category_scores[category]
                for category in CATEGORY_ORDER
                if category in self.category_scores
            },
            "explanations": list(self.explanations),
        }


def aggregate_category_scores(category_scores: Mapping[str, float]) -> Tuple[int, RiskLevel]:
    """
    Fold category scores into the final score and risk level.

    Args:
        category_scores: Category name -> score (0-100)

    Returns:
        (final_score, risk_level)
    """
    final_score = calculate_weighted_score(category_scores)
    return final_score, score_to_risk_level(final_score)


def build_score_result(categories: Sequence[CategoryScore]) -> ScoreResult:
    """Aggregate scored categories into a ScoreResult, keeping their order."""
    category_scores = {c.category: c.score for c in categories}
    final_score, risk_level = aggregate_category_scores(category_scores)

    explanations: List[str] = []
    for category in categories:
        explanations.extend(category.explanations)

    return ScoreResult(
        final_score=final_score,
        risk_level=risk_level,
        category_scores=category_scores,
        explanations=tuple(explanations),
        breakdown={c.category: dict(c.details) for c in categories},
    )


def score_quote(report: ReportLike, source: ReportSource = ReportSource.REPORT) -> ScoreResult:
    """
    Calculate QuoteShield risk scores for an extracted quote report.

    Never raises: missing or malformed fields are treated as "no
    information" and score at their defaults.

    Args:
        report: report_json mapping, QuoteReport, or None
        source: Shape of the incoming report; non-default sources are
            mapped into the canonical report first

    Returns:
        ScoreResult with final score, risk level, category scores and
        explanations

    Example:
        >>> result = score_quote({"payment": {"deposit_percent": 15}})
        >>> result.category_scores["payment"]
        90
    """
    quote = adapt_report(report, source)
    normalized = normalize_report(quote)
    result = build_score_result(score_categories(normalized))

    logger.debug(
        f"Scored quote: final={result.final_score} risk={result.risk_level.value} "
        f"categories={result.category_scores}"
    )
    return result
