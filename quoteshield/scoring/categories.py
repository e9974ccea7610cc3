"""
Category Scorers

Five independent heuristics, each mapping normalized report fields to a
0-100 score (higher = lower risk) plus explanation strings:

1. Payment  - deposit size, milestone and final-inspection language
2. Timeline - presence, clarity and schedule keywords
3. Scope    - share of scope items that are clearly defined
4. Warranty - warranty and labor/workmanship warranty mentions
5. Pricing  - itemization depth and single-line concentration

Threshold ladders are ordered decision lists: later rules overwrite the
working score even when earlier rules also matched.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .detection import (
    has_milestone_payments,
    has_final_inspection_payment,
    has_timeline_keywords,
    mentions_warranty,
    mentions_labor_warranty,
    notes_mention_warranty,
    has_large_single_line,
    pricing_divisor,
)
from .helpers import clamp_score, format_percent
from .report import LineItem, NormalizedReport


@dataclass(frozen=True)
class CategoryScore:
    """Score and explanations for one risk category."""
    category: str
    score: int
    explanations: List[str] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)


# ============================================================================
# PAYMENT
# ============================================================================

PAYMENT_UNKNOWN_DEPOSIT_SCORE = 70

# (max deposit percent, score); first matching row wins
DEPOSIT_SCORE_LADDER = (
    (20, 90),
    (30, 75),
    (50, 55),
)
DEPOSIT_OVER_50_SCORE = 35

MILESTONE_BONUS = 10
FINAL_INSPECTION_BONUS = 5

TYPICAL_DEPOSIT_MAX = 30
REASONABLE_DEPOSIT_MAX = 20


def _deposit_score(deposit_percent: Optional[float]) -> int:
    if deposit_percent is None:
        return PAYMENT_UNKNOWN_DEPOSIT_SCORE
    for max_percent, score in DEPOSIT_SCORE_LADDER:
        if deposit_percent <= max_percent:
            return score
    return DEPOSIT_OVER_50_SCORE


def score_payment(
    deposit_percent: Optional[float],
    terms_text: str,
    schedule_example_count: int
) -> CategoryScore:
    """
    Score payment terms. Lower deposits and staged payments = lower risk.

    Args:
        deposit_percent: Upfront deposit as a percent of total (None if unknown)
        terms_text: Lower-cased payment terms text
        schedule_example_count: Number of steps in the recommended schedule

    Returns:
        CategoryScore for "payment"
    """
    milestone = has_milestone_payments(terms_text, schedule_example_count)
    final_inspection = has_final_inspection_payment(terms_text)

    score = _deposit_score(deposit_percent)
    if milestone:
        score = min(100, score + MILESTONE_BONUS)
    if final_inspection:
        score = min(100, score + FINAL_INSPECTION_BONUS)

    explanations = []
    if deposit_percent is not None:
        percent = format_percent(deposit_percent)
        if deposit_percent > TYPICAL_DEPOSIT_MAX:
            explanations.append(
                f"Deposit is {percent}% (typical range 10–30%), which increases payment risk."
            )
        elif deposit_percent <= REASONABLE_DEPOSIT_MAX:
            explanations.append(f"Deposit of {percent}% is within a reasonable range.")
    if milestone:
        explanations.append("Quote references milestone- or phase-based payments.")
    if final_inspection:
        explanations.append("Final payment is tied to inspection or completion.")
    if not milestone and not final_inspection and (terms_text or deposit_percent is not None):
        explanations.append(
            "Consider requesting milestone-based payments and final payment after inspection."
        )

    return CategoryScore(
        category="payment",
        score=clamp_score(score),
        explanations=explanations,
        details={
            "deposit_percent": deposit_percent,
            "milestone_language": milestone,
            "final_inspection_payment": final_inspection,
        },
    )


# ============================================================================
# TIMELINE
# ============================================================================

TIMELINE_BASE_SCORE = 40
TIMELINE_PRESENT_SCORE = 70
TIMELINE_CLARITY_SCORES = {
    "clear": 90,
    "basic": 65,
}
TIMELINE_KEYWORD_BONUS = 15


def score_timeline(
    timeline_present: bool,
    timeline_clarity: str,
    timeline_text: str
) -> CategoryScore:
    """
    Score timeline clarity.

    Args:
        timeline_present: Whether a written timeline exists
        timeline_clarity: "clear", "basic" or "missing"
        timeline_text: Lower-cased timeline text

    Returns:
        CategoryScore for "timeline"
    """
    keywords = has_timeline_keywords(timeline_text)

    score = TIMELINE_BASE_SCORE
    if timeline_present:
        score = TIMELINE_PRESENT_SCORE
    if timeline_clarity in TIMELINE_CLARITY_SCORES:
        score = TIMELINE_CLARITY_SCORES[timeline_clarity]
    if keywords:
        score = min(100, score + TIMELINE_KEYWORD_BONUS)

    explanations = []
    if timeline_clarity == "missing" or not timeline_present:
        explanations.append("No written timeline or milestones were provided in the quote.")
    elif timeline_clarity == "clear" or keywords:
        explanations.append("Quote includes timeline or milestone information.")

    return CategoryScore(
        category="timeline",
        score=clamp_score(score),
        explanations=explanations,
        details={
            "timeline_present": timeline_present,
            "timeline_clarity": timeline_clarity,
            "schedule_keywords": keywords,
        },
    )


# ============================================================================
# SCOPE
# ============================================================================

def score_scope(present: Sequence[str], missing_or_unclear: Sequence[str]) -> CategoryScore:
    """Score the share of scope items that are clearly defined."""
    defined_count = len(present)
    missing_count = len(missing_or_unclear)
    total_items = defined_count + missing_count
    ratio = defined_count / total_items if total_items > 0 else 0.0

    if total_items > 0:
        explanation = (
            f"{defined_count} of {total_items} scope items are clearly defined; "
            f"{missing_count} are missing or unclear."
        )
    else:
        explanation = (
            "Scope detail is limited; key items (materials, permit, cleanup) may need clarification."
        )

    return CategoryScore(
        category="scope",
        score=clamp_score(ratio * 100),
        explanations=[explanation],
        details={
            "defined_items": defined_count,
            "missing_items": missing_count,
            "ratio": round(ratio, 3),
        },
    )


# ============================================================================
# WARRANTY
# ============================================================================

WARRANTY_BASE_SCORE = 30
WARRANTY_MENTION_SCORE = 65
WARRANTY_LABOR_OR_CONFIRMED_SCORE = 85
WARRANTY_FULL_SCORE = 95


def score_warranty(present: Sequence[str], notes_text: str) -> CategoryScore:
    """
    Score warranty coverage from scope items and quote notes.

    Args:
        present: Scope items present in the quote (any case)
        notes_text: Joined, lower-cased notes

    Returns:
        CategoryScore for "warranty"
    """
    present_lower = [item.lower() for item in present]
    mention = mentions_warranty(present_lower)
    labor = mentions_labor_warranty(present_lower)
    notes_warranty = notes_mention_warranty(notes_text)

    # Decision list; evaluated in order, last match wins
    score = WARRANTY_BASE_SCORE
    if mention:
        score = WARRANTY_MENTION_SCORE
    if labor or (mention and notes_warranty):
        score = WARRANTY_LABOR_OR_CONFIRMED_SCORE
    if mention and labor:
        score = WARRANTY_FULL_SCORE

    if not mention and not notes_warranty:
        explanation = "Warranty coverage is not clearly stated in the quote."
    elif labor:
        explanation = "Labor or workmanship warranty is mentioned."
    else:
        # Also reached for notes-only mentions (score stays at base)
        explanation = "Warranty is mentioned; confirm labor and materials coverage."

    return CategoryScore(
        category="warranty",
        score=clamp_score(score),
        explanations=[explanation],
        details={
            "warranty_mentioned": mention,
            "labor_warranty": labor,
            "notes_warranty": notes_warranty,
        },
    )


# ============================================================================
# PRICING
# ============================================================================

PRICING_BASE_SCORE = 60
ITEMIZED_SCORE = 80
DETAILED_ITEMIZED_SCORE = 90
MIN_ITEMIZED_COUNT = 3
MIN_DETAILED_ITEMIZED_COUNT = 5
LARGE_LINE_PENALTY = 25


def score_pricing(
    line_items: Sequence[LineItem],
    high_cost_flag_count: int,
    quote_total: Optional[float]
) -> CategoryScore:
    """
    Score pricing transparency.

    Args:
        line_items: Extracted line items
        high_cost_flag_count: Number of upstream high-cost flags (recorded only)
        quote_total: Quote total, None when unknown

    Returns:
        CategoryScore for "pricing"
    """
    itemized_count = len(line_items)
    large_single_line = has_large_single_line(line_items, pricing_divisor(quote_total))

    score = PRICING_BASE_SCORE
    if itemized_count >= MIN_ITEMIZED_COUNT:
        score = ITEMIZED_SCORE
    if itemized_count >= MIN_DETAILED_ITEMIZED_COUNT:
        score = DETAILED_ITEMIZED_SCORE
    if large_single_line:
        score = max(0, score - LARGE_LINE_PENALTY)

    explanations = []
    if itemized_count == 0:
        explanations.append(
            "Quote does not show itemized line items; request a breakdown of labor, "
            "materials, and other costs."
        )
    elif itemized_count >= MIN_ITEMIZED_COUNT:
        explanations.append(
            f"Quote includes {itemized_count} line items, which helps verify pricing."
        )
    if large_single_line:
        explanations.append(
            "A single line item represents more than half of the total; ask for more "
            "detail on that cost."
        )

    return CategoryScore(
        category="pricing",
        score=clamp_score(score),
        explanations=explanations,
        details={
            "itemized_count": itemized_count,
            "large_single_line": large_single_line,
            "high_cost_flags": high_cost_flag_count,
        },
    )


# ============================================================================
# ALL CATEGORIES
# ============================================================================

def score_categories(report: NormalizedReport) -> List[CategoryScore]:
    """Run all five scorers in evaluation order."""
    return [
        score_payment(
            report.deposit_percent,
            report.payment_terms_text,
            report.schedule_example_count,
        ),
        score_timeline(
            report.timeline_present,
            report.timeline_clarity,
            report.timeline_text,
        ),
        score_scope(report.scope_present, report.scope_missing),
        score_warranty(report.scope_present, report.notes_text),
        score_pricing(
            report.line_items,
            report.high_cost_flag_count,
            report.quote_total,
        ),
    ]
