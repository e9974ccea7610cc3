"""
Negotiation Suggestions

Collaborative "ask" scripts the homeowner can send to the contractor,
one per category at most, prioritized:

    Payment > Timeline > Warranty > Scope > Pricing
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .adapters import ReportSource, adapt_report
from .detection import (
    has_milestone_payments,
    mentions_warranty,
    mentions_labor_warranty,
    notes_mention_warranty,
    has_large_single_line,
    pricing_divisor,
)
from .report import ReportLike, normalize_report
from .risk import ScoreResult
from ..utils.config import get_settings

logger = logging.getLogger(__name__)


CATEGORY_PRIORITY: Dict[str, int] = {
    "payment": 0,
    "timeline": 1,
    "warranty": 2,
    "scope": 3,
    "pricing": 4,
}

CONFIDENCE_ORDER: Dict[str, int] = {"high": 0, "medium": 1, "low": 2}


@dataclass(frozen=True)
class NegotiationSuggestion:
    """One suggested ask."""
    category: str
    ask_script: str
    why_it_matters: str
    confidence: str  # "low" | "medium" | "high"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "ask_script": self.ask_script,
            "why_it_matters": self.why_it_matters,
            "confidence": self.confidence,
        }


def score_to_confidence(score: int) -> str:
    """Lower category scores make the ask more pressing."""
    if score < 50:
        return "high"
    if score < 70:
        return "medium"
    return "low"


def generate_negotiation_suggestions(
    report: ReportLike,
    result: ScoreResult,
    source: ReportSource = ReportSource.REPORT,
    max_items: Optional[int] = None
) -> List[NegotiationSuggestion]:
    """
    Generate negotiation suggestions for a scored quote.

    Args:
        report: The report that produced `result`
        result: ScoreResult from score_quote
        source: Shape of `report` (same value passed to score_quote)
        max_items: Maximum suggestions (default: MAX_NEGOTIATION_SUGGESTIONS)

    Returns:
        Suggestions in category priority order, at most one per category
    """
    if max_items is None:
        max_items = get_settings().MAX_NEGOTIATION_SUGGESTIONS

    r = normalize_report(adapt_report(report, source))
    scores = result.category_scores
    suggestions: List[NegotiationSuggestion] = []

    # --- PAYMENT ---
    deposit = r.deposit_percent
    milestone = has_milestone_payments(r.payment_terms_text, r.schedule_example_count)
    if deposit is not None and deposit > 30:
        suggestions.append(NegotiationSuggestion(
            category="payment",
            ask_script=(
                "Would you be open to tying payments to milestones? For example, 20% to start, "
                "40% after tear-off and deck inspection, and 40% after final inspection and my sign-off?"
            ),
            why_it_matters=(
                "Milestone-based payments align your payments with completed work and can reduce "
                "risk if there are delays or disputes."
            ),
            confidence="high" if deposit > 50 else "medium",
        ))
    elif not milestone and (r.payment_terms_text or deposit is not None):
        suggestions.append(NegotiationSuggestion(
            category="payment",
            ask_script=(
                "Could we add a payment schedule that ties each payment to a specific milestone or "
                "inspection? That would help me plan and know we're both aligned on progress."
            ),
            why_it_matters=(
                "Clear payment milestones make it easier to track progress and ensure payments "
                "match completed work."
            ),
            confidence=score_to_confidence(scores.get("payment", 100)),
        ))

    # --- TIMELINE ---
    if not r.timeline_present or r.timeline_clarity == "missing":
        both_missing = r.timeline_clarity == "missing" and not r.timeline_present
        suggestions.append(NegotiationSuggestion(
            category="timeline",
            ask_script=(
                "Would you be able to provide a written timeline with an approximate start date, "
                "key milestones (like materials delivery and tear-off complete), and expected completion?"
            ),
            why_it_matters=(
                "A shared timeline helps both of us plan and sets clear expectations, so we can "
                "address any delays early."
            ),
            confidence="high" if both_missing else "medium",
        ))

    # --- WARRANTY ---
    present_lower = [item.lower() for item in r.scope_present]
    warranty = mentions_warranty(present_lower) or notes_mention_warranty(r.notes_text)
    labor = mentions_labor_warranty(present_lower)
    if not warranty:
        suggestions.append(NegotiationSuggestion(
            category="warranty",
            ask_script=(
                "Could we add a line to the quote that spells out the manufacturer warranty on "
                "materials and your labor or workmanship warranty, including how long each lasts?"
            ),
            why_it_matters=(
                "Having warranty details in writing gives you both a clear reference if any issues "
                "come up after the job is done."
            ),
            confidence="high",
        ))
    elif not labor:
        suggestions.append(NegotiationSuggestion(
            category="warranty",
            ask_script=(
                "Can we clarify in the quote what labor or workmanship warranty is included and for how long?"
            ),
            why_it_matters=(
                "Labor warranty covers installation quality and can protect you if something needs "
                "to be corrected later."
            ),
            confidence="medium",
        ))

    # --- SCOPE ---
    missing_count = len(r.scope_missing)
    if missing_count > 0:
        examples = [item for item in r.scope_missing[:3] if item]
        if examples:
            ask = (
                "Would you be able to add a bit more detail to the quote so we're aligned on what's "
                f"included? I'd like to see {', '.join(examples)} clearly called out."
            )
        else:
            ask = (
                "Would you be able to add a bit more detail to the quote so we're aligned on what's "
                "included? I'd like to see materials, labor, permits, and cleanup clearly listed."
            )
        if missing_count >= 4:
            confidence = "high"
        elif missing_count >= 2:
            confidence = "medium"
        else:
            confidence = "low"
        suggestions.append(NegotiationSuggestion(
            category="scope",
            ask_script=ask,
            why_it_matters=(
                "When scope is written down, both sides know what's covered and it can prevent "
                "misunderstandings or surprise charges later."
            ),
            confidence=confidence,
        ))

    # --- PRICING ---
    if not r.line_items:
        suggestions.append(NegotiationSuggestion(
            category="pricing",
            ask_script=(
                "Could we add a simple breakdown showing labor, materials, and any other major cost "
                "categories? It would help me understand how the total is made up."
            ),
            why_it_matters=(
                "An itemized breakdown makes it easier to compare quotes and confirm that all "
                "expected items are included."
            ),
            confidence=score_to_confidence(scores.get("pricing", 100)),
        ))
    elif has_large_single_line(r.line_items, pricing_divisor(r.quote_total)):
        suggestions.append(NegotiationSuggestion(
            category="pricing",
            ask_script=(
                "One line item makes up a large portion of the total. Would you be able to break "
                "that out into a few sub-items so I can see how it's calculated?"
            ),
            why_it_matters=(
                "Seeing the components of a large line item helps you verify the cost and compare "
                "with other quotes."
            ),
            confidence="medium",
        ))

    # High-cost flags only when no other pricing ask exists
    if r.high_cost_flags and not any(s.category == "pricing" for s in suggestions):
        flag = r.high_cost_flags[0]
        subject = flag.name or "the flagged cost"
        suggestions.append(NegotiationSuggestion(
            category="pricing",
            ask_script=(
                f"Could you walk me through how {subject} is calculated, or add a short note in "
                "the quote? I want to make sure I understand what's included."
            ),
            why_it_matters=(
                flag.reason
                or "Clarifying how specific costs are determined helps you budget and compare options."
            ),
            confidence="medium",
        ))

    suggestions.sort(key=lambda s: (
        CATEGORY_PRIORITY.get(s.category, 99),
        CONFIDENCE_ORDER.get(s.confidence, 99),
    ))

    # Keep the first suggestion per category
    by_category: Dict[str, NegotiationSuggestion] = {}
    for suggestion in suggestions:
        by_category.setdefault(suggestion.category, suggestion)

    selected = list(by_category.values())[:max_items]
    logger.debug(f"Generated {len(selected)} negotiation suggestions")
    return selected
