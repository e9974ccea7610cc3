"""
Input Adapters

Earlier versions of the extraction pipeline produced two other report
shapes, each with its own scorer. Both are now mapped into the canonical
QuoteReport and scored by the same five-category engine:

- SIGNALS:    signal counts (pricing_outliers, missing_scope, ...) plus
              extraction quality estimates, with little or no report body
- EXTRACTION: raw line items and scope lists without payment/timeline text

Adapters only fill sections the report does not already carry; explicit
report data always wins.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING, Union

from .helpers import CATEGORY_ORDER, round_half_up
from .report import HighCostFlag, QuoteReport, ReportLike

if TYPE_CHECKING:
    from .risk import ScoreResult

logger = logging.getLogger(__name__)


class ReportSource(str, Enum):
    """Shape of an incoming report."""
    REPORT = "report"            # Canonical report_json
    SIGNALS = "signals"          # Signal counts + quality estimates
    EXTRACTION = "extraction"    # Raw line items + scope lists


# ============================================================================
# SIGNALS ADAPTER
# ============================================================================

# Upper bounds applied to signal counts
MAX_SCOPE_SIGNALS = 10
MAX_PRICING_SIGNALS = 10
MAX_TIMELINE_SIGNALS = 5

# Defaults when the quality section is partially filled
DEFAULT_DOC_QUALITY = 0.55
DEFAULT_LINE_ITEM_CLARITY = 0.5

HIGH_CONFIDENCE_QUALITY = 0.8
MEDIUM_CONFIDENCE_QUALITY = 0.55


def _signal_count(value: Optional[float], upper: int) -> Optional[int]:
    if value is None:
        return None
    return max(0, min(upper, round_half_up(value)))


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def quality_to_confidence(doc_quality: Optional[float], line_item_clarity: Optional[float]) -> str:
    """
    Map extraction quality estimates to a confidence label.

    Args:
        doc_quality: Document quality (0..1), None for default
        line_item_clarity: Line item clarity (0..1), None for default

    Returns:
        "high", "medium" or "low"
    """
    doc = _clamp01(DEFAULT_DOC_QUALITY if doc_quality is None else doc_quality)
    clarity = _clamp01(DEFAULT_LINE_ITEM_CLARITY if line_item_clarity is None else line_item_clarity)
    average = (doc + clarity) / 2
    if average >= HIGH_CONFIDENCE_QUALITY:
        return "high"
    if average >= MEDIUM_CONFIDENCE_QUALITY:
        return "medium"
    return "low"


def adapt_signals_report(quote: QuoteReport) -> QuoteReport:
    """
    Map signal counts and quality estimates into report sections.

    - missing_scope N      -> N unnamed missing scope items
    - pricing_outliers N   -> N unnamed high-cost flags
    - timeline_red_flags   -> >= 1: no timeline; 0: basic timeline present
    - quality              -> summary confidence

    warranty_red_flags has no canonical counterpart; warranty is scored
    from scope items and notes only.

    Args:
        quote: Report carrying `signals` and/or `quality`

    Returns:
        New QuoteReport; the input is not modified
    """
    signals = quote.signals
    quality = quote.quality
    if signals is None and quality is None:
        logger.debug("Signals adapter: report has no signals or quality section")
        return quote

    update: Dict[str, Any] = {}

    if signals is not None:
        missing_scope = _signal_count(signals.missing_scope, MAX_SCOPE_SIGNALS)
        scope = quote.scope
        if missing_scope and not scope.present and not scope.missing_or_unclear:
            update["scope"] = scope.model_copy(
                update={"missing_or_unclear": [""] * missing_scope}
            )

        pricing_outliers = _signal_count(signals.pricing_outliers, MAX_PRICING_SIGNALS)
        costs = quote.costs
        if pricing_outliers and not costs.high_cost_flags:
            update["costs"] = costs.model_copy(
                update={"high_cost_flags": [HighCostFlag() for _ in range(pricing_outliers)]}
            )

        timeline_flags = _signal_count(signals.timeline_red_flags, MAX_TIMELINE_SIGNALS)
        timeline = quote.timeline
        timeline_empty = (
            timeline.timeline_present is None
            and timeline.timeline_clarity is None
            and not timeline.timeline_text
        )
        if timeline_flags is not None and timeline_empty:
            if timeline_flags >= 1:
                timeline_update = {"timeline_present": False, "timeline_clarity": "missing"}
            else:
                timeline_update = {"timeline_present": True, "timeline_clarity": "basic"}
            update["timeline"] = timeline.model_copy(update=timeline_update)

    if quality is not None and quote.summary.confidence is None:
        confidence = quality_to_confidence(quality.doc_quality, quality.line_item_clarity)
        update["summary"] = quote.summary.model_copy(update={"confidence": confidence})

    if update:
        logger.debug(f"Signals adapter filled sections: {sorted(update)}")
    return quote.model_copy(update=update)


# ============================================================================
# EXTRACTION ADAPTER
# ============================================================================

# Roofing scope checklist (expand per trade)
ROOFING_SCOPE_CHECKLIST = (
    "shingles",
    "underlayment",
    "ice and water",
    "drip edge",
    "flashing",
    "ventilation",
    "deck",
    "inspection",
    "permit",
    "cleanup",
    "disposal",
    "warranty",
)


def _mentions_item(item: str, text: str) -> bool:
    return item in text or item.replace(" ", "") in text


def find_checklist_items(
    line_item_names: List[str],
    present: List[str],
    checklist: Sequence[str] = ROOFING_SCOPE_CHECKLIST
) -> List[str]:
    """
    Checklist items mentioned by line item names but not listed in scope.

    Args:
        line_item_names: Names of extracted line items
        present: Scope items already marked present
        checklist: Scope checklist for the trade

    Returns:
        Checklist items to add, in checklist order
    """
    names_text = " ".join(line_item_names).lower()
    present_text = " ".join(present).lower()
    return [
        item for item in checklist
        if _mentions_item(item, names_text) and not _mentions_item(item, present_text)
    ]


def adapt_extracted_report(quote: QuoteReport) -> QuoteReport:
    """
    Enrich a raw extraction (line items + scope lists) for scoring.

    Checklist items evidenced by line item names are added to
    scope.present, and the quote total is derived from line item totals
    when the summary carries none.

    Args:
        quote: Report with costs.line_items and scope lists

    Returns:
        New QuoteReport; the input is not modified
    """
    update: Dict[str, Any] = {}
    line_items = quote.costs.line_items

    found = find_checklist_items([li.name for li in line_items], quote.scope.present)
    if found:
        update["scope"] = quote.scope.model_copy(
            update={"present": list(quote.scope.present) + found}
        )

    if quote.summary.total is None:
        line_totals = [li.total for li in line_items if li.total is not None]
        derived_total = sum(line_totals)
        if line_totals and derived_total > 0:
            update["summary"] = quote.summary.model_copy(update={"total": derived_total})

    if update:
        logger.debug(f"Extraction adapter filled sections: {sorted(update)}")
    return quote.model_copy(update=update)


# ============================================================================
# DISPATCH
# ============================================================================

_ADAPTERS = {
    ReportSource.SIGNALS: adapt_signals_report,
    ReportSource.EXTRACTION: adapt_extracted_report,
}


def adapt_report(report: ReportLike, source: Union[ReportSource, str] = ReportSource.REPORT) -> QuoteReport:
    """
    Parse a report-like value and map it into the canonical shape.

    Args:
        report: None, a report_json mapping, or a QuoteReport
        source: ReportSource or its string value

    Returns:
        Canonical QuoteReport

    Raises:
        ValueError: If `source` is not a known ReportSource
    """
    source = ReportSource(source)
    quote = QuoteReport.from_raw(report)
    adapter = _ADAPTERS.get(source)
    if adapter is None:
        return quote
    return adapter(quote)


# ============================================================================
# STORED COLUMNS
# ============================================================================

def to_submission_columns(result: "ScoreResult") -> Dict[str, Any]:
    """
    Project a ScoreResult onto the stored submission columns.

    scope_score and price_score map to the scope and pricing categories;
    clarity_score is the mean of timeline and warranty.

    Args:
        result: Canonical score result

    Returns:
        Column name -> value
    """
    scores = result.category_scores
    clarity = round_half_up((scores.get("timeline", 0) + scores.get("warranty", 0)) / 2)
    return {
        "scope_score": scores.get("scope"),
        "price_score": scores.get("pricing"),
        "clarity_score": clarity,
        "risk_level": result.risk_level.value,
        "final_score": result.final_score,
        "category_scores": {c: scores[c] for c in CATEGORY_ORDER if c in scores},
    }
