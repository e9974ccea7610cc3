"""
Quote Language Detection

Keyword and phrase detectors shared by the category scorers, the risk
findings and the negotiation suggestions. All inputs are expected to be
lower-cased already; the patterns are case-insensitive regardless.
"""

import re
from typing import Iterable, Optional, Sequence

from .helpers import TOTAL_DIVISOR_PLACEHOLDER
from .report import LineItem


MILESTONE_PAYMENT_PATTERN = re.compile(
    r"\b(milestone|phase|stage|upon completion|after (tear-?off|inspection|delivery)|%\s*(at|upon|due))\b",
    re.IGNORECASE,
)

FINAL_INSPECTION_PATTERNS = (
    re.compile(r"\b(final|inspection|sign-?off|completion)\s*(payment|due|%\s*)\b", re.IGNORECASE),
    re.compile(r"\b(payment|%\s*)\s*(after|upon)\s*(final|inspection)\b", re.IGNORECASE),
)

TIMELINE_KEYWORD_PATTERN = re.compile(
    r"\b(milestone|start date|completion|schedule|timeline|week|day)\b",
    re.IGNORECASE,
)

WARRANTY_PATTERN = re.compile(r"warrant", re.IGNORECASE)
LABOR_WARRANTY_PATTERN = re.compile(r"labor.*warrant|workmanship|work\s*warrant", re.IGNORECASE)

# Schedules with at least this many steps count as milestone-based
MIN_SCHEDULE_STEPS = 2

# A line item above this share of the total is flagged
LARGE_LINE_SHARE = 0.5


def has_milestone_payments(terms_text: str, schedule_example_count: int = 0) -> bool:
    """Payment terms reference milestones/phases, or a multi-step schedule exists."""
    return (
        bool(MILESTONE_PAYMENT_PATTERN.search(terms_text))
        or schedule_example_count >= MIN_SCHEDULE_STEPS
    )


def has_final_inspection_payment(terms_text: str) -> bool:
    """Final payment is tied to inspection, sign-off or completion."""
    return any(pattern.search(terms_text) for pattern in FINAL_INSPECTION_PATTERNS)


def has_timeline_keywords(timeline_text: str) -> bool:
    return bool(TIMELINE_KEYWORD_PATTERN.search(timeline_text))


def mentions_warranty(items: Iterable[str]) -> bool:
    return any(WARRANTY_PATTERN.search(item) for item in items)


def mentions_labor_warranty(items: Iterable[str]) -> bool:
    return any(LABOR_WARRANTY_PATTERN.search(item) for item in items)


def notes_mention_warranty(notes_text: str) -> bool:
    return bool(WARRANTY_PATTERN.search(notes_text))


def has_large_single_line(
    line_items: Sequence[LineItem],
    total_divisor: float,
    share: float = LARGE_LINE_SHARE
) -> bool:
    """
    Check whether one line item exceeds `share` of the quote total.

    Line items without a total are skipped; they never count as zero.

    Args:
        line_items: Extracted line items
        total_divisor: Quote total, or the placeholder when unknown
        share: Fraction of the total that triggers the flag

    Returns:
        True if any present line total exceeds share * total
    """
    if total_divisor <= 0 or not line_items:
        return False
    line_totals = [item.total for item in line_items if item.total is not None]
    if not line_totals:
        return False
    return max(line_totals) > total_divisor * share


def pricing_divisor(quote_total: Optional[float]) -> float:
    """Quote total for ratio math, with the placeholder for unknown totals."""
    if quote_total is None or quote_total <= 0:
        return TOTAL_DIVISOR_PLACEHOLDER
    return quote_total
