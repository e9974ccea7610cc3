"""
Risk Findings

Turns a scored quote into homeowner-facing findings:

1. Risk findings - structured observation/impact/recommendation per
   category with a severity, plus a one-paragraph summary statement
2. Primary risk category - the category driving the overall risk
3. Preview findings - short, severity-tagged lines for the free scan

Plain English, no accusations against the contractor.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .adapters import ReportSource, adapt_report
from .detection import (
    has_milestone_payments,
    mentions_warranty,
    mentions_labor_warranty,
    notes_mention_warranty,
    has_large_single_line,
    pricing_divisor,
)
from .helpers import (
    CATEGORY_LABELS,
    CATEGORY_ORDER,
    RISK_RANK,
    RiskLevel,
    format_percent,
    score_to_risk_level,
)
from .report import ReportLike, normalize_report
from .risk import ScoreResult
from ..utils.config import get_settings

logger = logging.getLogger(__name__)


class FindingSeverity(str, Enum):
    """Severity of a risk finding."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


SEVERITY_ORDER: Dict[FindingSeverity, int] = {
    FindingSeverity.HIGH: 0,
    FindingSeverity.MEDIUM: 1,
    FindingSeverity.LOW: 2,
}


@dataclass(frozen=True)
class RiskFinding:
    """One observation about the quote."""
    category: str
    severity: FindingSeverity
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "severity": self.severity.value, "text": self.text}


@dataclass(frozen=True)
class RiskFindings:
    """Top findings and the summary statement."""
    findings: List[RiskFinding] = field(default_factory=list)
    summary_statement: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "explanations": [f.to_dict() for f in self.findings],
            "summary_statement": self.summary_statement,
        }


def _finding(category: str, severity: FindingSeverity, *sentences: str) -> RiskFinding:
    return RiskFinding(category=category, severity=severity, text=" ".join(sentences))


# ============================================================================
# RISK FINDINGS
# ============================================================================

def generate_risk_findings(
    report: ReportLike,
    result: ScoreResult,
    source: ReportSource = ReportSource.REPORT,
    max_items: Optional[int] = None
) -> RiskFindings:
    """
    Generate structured risk findings and a summary statement.

    Args:
        report: The report that produced `result`
        result: ScoreResult from score_quote
        source: Shape of `report` (same value passed to score_quote)
        max_items: Maximum findings (default: MAX_RISK_FINDINGS setting)

    Returns:
        RiskFindings, highest severity first
    """
    if max_items is None:
        max_items = get_settings().MAX_RISK_FINDINGS

    r = normalize_report(adapt_report(report, source))
    items: List[RiskFinding] = []

    # --- PAYMENT ---
    deposit = r.deposit_percent
    milestone = has_milestone_payments(r.payment_terms_text, r.schedule_example_count)
    if deposit is not None and deposit > 30:
        items.append(_finding(
            "payment",
            FindingSeverity.HIGH if deposit > 50 else FindingSeverity.MEDIUM,
            f"Observation: The quote requests a {format_percent(deposit)}% deposit upfront.",
            "Impact: Large upfront deposits can increase your financial risk if the project is "
            "delayed or a dispute arises.",
            "Recommendation: Consider asking for a milestone-based schedule (for example, 20% to "
            "start, 40% at mid-project, 40% after final inspection and your sign-off).",
        ))
    elif not milestone and (r.payment_terms_text or deposit is not None):
        items.append(_finding(
            "payment",
            FindingSeverity.LOW,
            "Observation: The quote does not clearly tie payments to completed milestones or a "
            "final inspection.",
            "Impact: Paying in large lumps without checkpoints can make it harder to resolve "
            "issues if something goes wrong.",
            "Recommendation: Request a payment schedule that links each payment to a specific "
            "milestone or inspection.",
        ))

    # --- TIMELINE ---
    if not r.timeline_present or r.timeline_clarity == "missing":
        both_missing = r.timeline_clarity == "missing" and not r.timeline_present
        items.append(_finding(
            "timeline",
            FindingSeverity.HIGH if both_missing else FindingSeverity.MEDIUM,
            "Observation: The quote does not include a written timeline, start date, or "
            "completion timeframe.",
            "Impact: Without agreed dates, it can be difficult to plan around the work or "
            "address delays.",
            "Recommendation: Ask for a written timeline with approximate start and completion "
            "dates, and key milestones (e.g., materials delivered, tear-off complete, final "
            "inspection).",
        ))

    # --- SCOPE ---
    missing_count = len(r.scope_missing)
    if missing_count > 0:
        examples = " and ".join(item for item in r.scope_missing[:2] if item)
        if missing_count >= 4:
            severity = FindingSeverity.HIGH
        elif missing_count >= 2:
            severity = FindingSeverity.MEDIUM
        else:
            severity = FindingSeverity.LOW
        observation = f"Observation: {missing_count} scope item(s) are missing or unclear in the quote"
        observation += f" (e.g., {examples})." if examples else "."
        items.append(_finding(
            "scope",
            severity,
            observation,
            "Impact: Gaps in scope can lead to surprise charges or disagreements later about "
            "what was included.",
            "Recommendation: Request that the quote clearly list all materials, labor, permits, "
            "and cleanup so you know exactly what is covered.",
        ))

    # --- WARRANTY ---
    present_lower = [item.lower() for item in r.scope_present]
    warranty = mentions_warranty(present_lower) or notes_mention_warranty(r.notes_text)
    labor = mentions_labor_warranty(present_lower)
    if not warranty:
        items.append(_finding(
            "warranty",
            FindingSeverity.MEDIUM,
            "Observation: Warranty coverage is not clearly stated in the quote.",
            "Impact: You may be unsure what is covered if materials or workmanship fail after "
            "the job is done.",
            "Recommendation: Ask for written details on both manufacturer (materials) and "
            "contractor (labor) warranty before signing.",
        ))
    elif not labor:
        items.append(_finding(
            "warranty",
            FindingSeverity.LOW,
            "Observation: Warranty is mentioned, but labor or workmanship coverage is not "
            "clearly spelled out.",
            "Impact: Labor warranty can protect you if installation issues appear later.",
            "Recommendation: Confirm in writing what labor or workmanship warranty is included "
            "and for how long.",
        ))

    # --- PRICING ---
    if not r.line_items:
        items.append(_finding(
            "pricing",
            FindingSeverity.MEDIUM,
            "Observation: The quote does not show a line-item breakdown of costs.",
            "Impact: It can be hard to verify that labor, materials, and other charges are fair "
            "and complete.",
            "Recommendation: Request an itemized breakdown (labor, materials, disposal, permits, "
            "etc.) so you can review and compare.",
        ))
    elif has_large_single_line(r.line_items, pricing_divisor(r.quote_total)):
        items.append(_finding(
            "pricing",
            FindingSeverity.MEDIUM,
            "Observation: One line item makes up more than half of the total cost.",
            "Impact: A single large line can make it difficult to understand what you are paying "
            "for and to compare with other quotes.",
            "Recommendation: Ask for that cost to be broken down into specific items or phases so "
            "you can see how it was calculated.",
        ))

    # Severity first, then the weakest category
    items.sort(key=lambda f: (
        SEVERITY_ORDER[f.severity],
        result.category_scores.get(f.category, 100),
    ))
    top = items[:max_items]
    logger.debug(f"Generated {len(top)} of {len(items)} risk findings")

    return RiskFindings(
        findings=top,
        summary_statement=_summary_statement(result.risk_level, top),
    )


def _summary_statement(risk_level: RiskLevel, findings: List[RiskFinding]) -> str:
    if risk_level == RiskLevel.HIGH:
        parts = ["This quote has several areas that would benefit from clarification before you sign."]
    elif risk_level == RiskLevel.MEDIUM:
        parts = ["This quote has a mix of clear and unclear areas; a few details could strengthen your position."]
    else:
        parts = ["This quote appears reasonably clear overall."]

    categories: List[str] = []
    for finding in findings:
        if finding.severity in (FindingSeverity.HIGH, FindingSeverity.MEDIUM):
            if finding.category not in categories:
                categories.append(finding.category)

    if categories:
        labels = [CATEGORY_LABELS.get(c, c) for c in categories]
        parts.append(f"Before moving forward, consider getting written clarity on {', '.join(labels)}.")
    elif findings:
        parts.append("Review the suggestions below to make sure you have the details you need.")

    return " ".join(parts)


# ============================================================================
# PRIMARY RISK CATEGORY
# ============================================================================

@dataclass(frozen=True)
class CategoryRisk:
    """A category score with its risk classification."""
    name: str
    score: int
    risk: RiskLevel


def get_primary_risk_category(category_scores: Optional[Mapping[str, int]]) -> Optional[CategoryRisk]:
    """
    Find the category driving overall risk.

    Args:
        category_scores: Category name -> score

    Returns:
        First category (in evaluation order) with the worst risk level,
        or None when there are no scores
    """
    if not category_scores:
        return None

    ordered = [c for c in CATEGORY_ORDER if c in category_scores]
    ordered += [c for c in category_scores if c not in CATEGORY_ORDER]

    risks = [
        CategoryRisk(name=c, score=category_scores[c], risk=score_to_risk_level(category_scores[c]))
        for c in ordered
    ]
    return max(risks, key=lambda cr: RISK_RANK[cr.risk])


# ============================================================================
# PREVIEW FINDINGS
# ============================================================================

class PreviewSeverity(str, Enum):
    """Severity tag shown on free-scan preview lines."""
    POSITIVE = "positive"
    WARNING = "warning"
    RISK = "risk"


@dataclass(frozen=True)
class PreviewFinding:
    text: str
    severity: PreviewSeverity

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "severity": self.severity.value}


RISK_KEYWORDS = re.compile(
    r"deposit|upfront|missing\s+scope|scope\s+gap|warranty\s+gap|limited\s+warranty"
    r"|timeline\s+unclear|no\s+timeline|payment\s+risk",
    re.IGNORECASE,
)

MIN_FINDING_LENGTH = 10

FALLBACK_PREVIEW = PreviewFinding(
    text="This snapshot highlights areas to double-check before signing.",
    severity=PreviewSeverity.WARNING,
)


def classify_finding_severity(text: str) -> PreviewSeverity:
    """Risk topics always carry caution language; unknown text is a warning, never positive."""
    if RISK_KEYWORDS.search(text):
        return PreviewSeverity.RISK
    return PreviewSeverity.WARNING


def deposit_finding(deposit_percent: Optional[float]) -> Optional[PreviewFinding]:
    """
    Preview line for the deposit size.

    >= 40: risk; 30-39: warning; < 30: positive.
    """
    if deposit_percent is None:
        return None
    if deposit_percent >= 40:
        return PreviewFinding(
            text="The required deposit appears higher than typical industry ranges.",
            severity=PreviewSeverity.RISK,
        )
    if deposit_percent >= 30:
        return PreviewFinding(
            text="The deposit is slightly above common industry ranges.",
            severity=PreviewSeverity.WARNING,
        )
    return PreviewFinding(
        text="Deposit amount appears within common industry ranges.",
        severity=PreviewSeverity.POSITIVE,
    )


def to_severity_findings(raw: Iterable[Any], max_items: int) -> List[PreviewFinding]:
    """Tag raw finding strings with a severity, dropping fragments."""
    texts = [
        s.strip() for s in raw
        if isinstance(s, str) and len(s.strip()) >= MIN_FINDING_LENGTH
    ]
    return [
        PreviewFinding(text=text, severity=classify_finding_severity(text))
        for text in texts[:max(0, max_items)]
    ]


def build_preview_findings(
    deposit_percent: Optional[float],
    ai_findings: Iterable[Any],
    score_findings: Iterable[Any],
    max_items: Optional[int] = None
) -> List[PreviewFinding]:
    """
    Build free-scan preview lines: deposit first, then AI findings, then
    score explanations. Duplicates are dropped.

    Args:
        deposit_percent: Deposit percent (None if unknown)
        ai_findings: Finding strings from the AI extraction
        score_findings: Explanations from ScoreResult
        max_items: Maximum lines (default: MAX_PREVIEW_FINDINGS setting)

    Returns:
        Between 1 and max_items preview findings
    """
    if max_items is None:
        max_items = get_settings().MAX_PREVIEW_FINDINGS

    out: List[PreviewFinding] = []
    seen = set()

    deposit = deposit_finding(deposit_percent)
    if deposit:
        out.append(deposit)
        seen.add(deposit.text)

    for source in (ai_findings, score_findings):
        for finding in to_severity_findings(source, max_items - len(out)):
            if finding.text not in seen and len(out) < max_items:
                out.append(finding)
                seen.add(finding.text)

    if not out:
        out.append(FALLBACK_PREVIEW)

    return out[:max_items]
