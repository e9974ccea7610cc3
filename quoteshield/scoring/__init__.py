"""
Scoring Module for QuoteShield

This module scores an AI-extracted contractor quote report:

1. **Category Scores** (0-100 each, higher = lower risk)
   Payment, Timeline, Scope, Warranty, Pricing

2. **Final Score** (0-100)
   Weighted blend: Payment 25%, Timeline 20%, Scope 20%,
   Warranty 20%, Pricing 15%

3. **Risk Level**
   low (>= 85), medium (>= 65), high (< 65)

Example Usage:
    from quoteshield.scoring import score_quote, generate_risk_findings

    report = {
        "payment": {"deposit_percent": 50, "payment_terms_text": "50% due at signing"},
        "timeline": {"timeline_present": True, "timeline_clarity": "basic"},
        "scope": {"present": ["shingles", "underlayment"], "missing_or_unclear": ["permit"]},
        "costs": {"line_items": [{"name": "Roof replacement", "total": 14500}]},
        "summary": {"total": 14500},
    }

    result = score_quote(report)
    print(f"Final Score: {result.final_score} ({result.risk_level.value} risk)")
    for explanation in result.explanations:
        print(f"- {explanation}")
"""

# Helper utilities and constants
from .helpers import (
    CATEGORY_ORDER,
    CATEGORY_WEIGHTS,
    CATEGORY_LABELS,
    RiskLevel,
    score_to_risk_level,
    round_half_up,
    clamp_score,
    calculate_weighted_score,
)

# Report normalization
from .report import (
    LineItem,
    HighCostFlag,
    QuoteReport,
    NormalizedReport,
    normalize_report,
)

# Category scorers
from .categories import (
    CategoryScore,
    score_payment,
    score_timeline,
    score_scope,
    score_warranty,
    score_pricing,
    score_categories,
)

# Input adapters
from .adapters import (
    ReportSource,
    adapt_report,
    adapt_signals_report,
    adapt_extracted_report,
    find_checklist_items,
    quality_to_confidence,
    to_submission_columns,
    ROOFING_SCOPE_CHECKLIST,
)

# Aggregation
from .risk import (
    ScoreResult,
    aggregate_category_scores,
    build_score_result,
    score_quote,
)

# Findings
from .findings import (
    FindingSeverity,
    RiskFinding,
    RiskFindings,
    CategoryRisk,
    PreviewSeverity,
    PreviewFinding,
    generate_risk_findings,
    get_primary_risk_category,
    deposit_finding,
    build_preview_findings,
)

# Negotiation
from .negotiation import (
    NegotiationSuggestion,
    generate_negotiation_suggestions,
)

__all__ = [
    # Helpers
    "CATEGORY_ORDER",
    "CATEGORY_WEIGHTS",
    "CATEGORY_LABELS",
    "RiskLevel",
    "score_to_risk_level",
    "round_half_up",
    "clamp_score",
    "calculate_weighted_score",

    # Report
    "LineItem",
    "HighCostFlag",
    "QuoteReport",
    "NormalizedReport",
    "normalize_report",

    # Categories
    "CategoryScore",
    "score_payment",
    "score_timeline",
    "score_scope",
    "score_warranty",
    "score_pricing",
    "score_categories",

    # Adapters
    "ReportSource",
    "adapt_report",
    "adapt_signals_report",
    "adapt_extracted_report",
    "find_checklist_items",
    "quality_to_confidence",
    "to_submission_columns",
    "ROOFING_SCOPE_CHECKLIST",

    # Aggregation
    "ScoreResult",
    "aggregate_category_scores",
    "build_score_result",
    "score_quote",

    # Findings
    "FindingSeverity",
    "RiskFinding",
    "RiskFindings",
    "CategoryRisk",
    "PreviewSeverity",
    "PreviewFinding",
    "generate_risk_findings",
    "get_primary_risk_category",
    "deposit_finding",
    "build_preview_findings",

    # Negotiation
    "NegotiationSuggestion",
    "generate_negotiation_suggestions",
]
