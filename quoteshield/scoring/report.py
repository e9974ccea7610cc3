"""
Quote Report Models and Normalizer

The upstream AI extraction step produces a loosely-typed JSON report.
This module defines the tolerant input contract (pydantic models) and
reduces it to a NormalizedReport with a safe default for every field
the category scorers read.

Nothing here raises on malformed input: unparseable values become
None/empty and are treated as "no information".
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


TIMELINE_CLARITY_VALUES = ("clear", "basic", "missing")
CONFIDENCE_VALUES = ("high", "medium", "low")


# ============================================================================
# COERCION HELPERS
# ============================================================================

def coerce_number(value: Any) -> Optional[float]:
    """Finite int/float or numeric string -> float; anything else -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # JSON integers beyond float range
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip().rstrip("%"))
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    return None


def coerce_item_text(value: Any) -> Optional[str]:
    """
    Reduce a scope/flag entry to text.

    Upstream sends either plain strings or objects such as
    {"item": "permit", "severity": "warn", "why": "..."}.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        for key in ("item", "name", "title"):
            text = value.get(key)
            if isinstance(text, str):
                return text
        return ""
    return None


def coerce_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


# ============================================================================
# INPUT MODELS
# ============================================================================

class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore")


class LineItem(_Section):
    """Single priced line of a quote. Absent numbers stay None."""
    name: str = ""
    qty: Optional[float] = None
    unit_price: Optional[float] = None
    total: Optional[float] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator("qty", "unit_price", "total", mode="before")
    @classmethod
    def _numbers(cls, v: Any) -> Optional[float]:
        return coerce_number(v)


class HighCostFlag(_Section):
    """Upstream benchmark flag on an anomalously expensive cost line."""
    name: str = ""
    reason: str = ""

    @field_validator("name", "reason", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""


class PaymentSection(_Section):
    deposit_percent: Optional[float] = None
    payment_terms_text: Optional[str] = None
    recommended_schedule_example: List[str] = Field(default_factory=list)

    @field_validator("deposit_percent", mode="before")
    @classmethod
    def _deposit(cls, v: Any) -> Optional[float]:
        return coerce_number(v)

    @field_validator("payment_terms_text", mode="before")
    @classmethod
    def _terms(cls, v: Any) -> Optional[str]:
        return coerce_text(v)

    @field_validator("recommended_schedule_example", mode="before")
    @classmethod
    def _schedule(cls, v: Any) -> List[str]:
        return [str(step) for step in coerce_list(v) if step is not None]


class TimelineSection(_Section):
    timeline_present: Optional[bool] = None
    timeline_clarity: Optional[str] = None
    timeline_text: Optional[str] = None

    @field_validator("timeline_present", mode="before")
    @classmethod
    def _present(cls, v: Any) -> Optional[bool]:
        return v if isinstance(v, bool) else None

    @field_validator("timeline_clarity", mode="before")
    @classmethod
    def _clarity(cls, v: Any) -> Optional[str]:
        if isinstance(v, str) and v.strip().lower() in TIMELINE_CLARITY_VALUES:
            return v.strip().lower()
        return None

    @field_validator("timeline_text", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Optional[str]:
        return coerce_text(v)


class ScopeSection(_Section):
    present: List[str] = Field(default_factory=list)
    missing_or_unclear: List[str] = Field(default_factory=list)

    @field_validator("present", "missing_or_unclear", mode="before")
    @classmethod
    def _items(cls, v: Any) -> List[str]:
        items = (coerce_item_text(entry) for entry in coerce_list(v))
        return [item for item in items if item is not None]


class CostsSection(_Section):
    line_items: List[LineItem] = Field(default_factory=list)
    high_cost_flags: List[HighCostFlag] = Field(default_factory=list)

    @field_validator("line_items", mode="before")
    @classmethod
    def _line_items(cls, v: Any) -> List[Any]:
        items = []
        for entry in coerce_list(v):
            if isinstance(entry, (Mapping, LineItem)):
                items.append(entry)
            elif isinstance(entry, str):
                items.append({"name": entry})
        return items

    @field_validator("high_cost_flags", mode="before")
    @classmethod
    def _flags(cls, v: Any) -> List[Any]:
        # Every entry counts as a signal, whatever its shape
        flags = []
        for entry in coerce_list(v):
            if isinstance(entry, (Mapping, HighCostFlag)):
                flags.append(entry)
            else:
                flags.append({"name": "" if entry is None else str(entry)})
        return flags


class SummarySection(_Section):
    total: Optional[float] = None
    confidence: Optional[str] = None

    @field_validator("total", mode="before")
    @classmethod
    def _total(cls, v: Any) -> Optional[float]:
        return coerce_number(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, v: Any) -> Optional[str]:
        if isinstance(v, str) and v.strip().lower() in CONFIDENCE_VALUES:
            return v.strip().lower()
        return None


class SignalsSection(_Section):
    """Signal counts from the older AI extraction schema."""
    pricing_outliers: Optional[float] = None
    missing_scope: Optional[float] = None
    warranty_red_flags: Optional[float] = None
    timeline_red_flags: Optional[float] = None

    @field_validator("*", mode="before")
    @classmethod
    def _numbers(cls, v: Any) -> Optional[float]:
        return coerce_number(v)


class QualitySection(_Section):
    """Extraction quality estimates in 0..1."""
    doc_quality: Optional[float] = None
    line_item_clarity: Optional[float] = None

    @field_validator("*", mode="before")
    @classmethod
    def _numbers(cls, v: Any) -> Optional[float]:
        return coerce_number(v)


class QuoteReport(_Section):
    """Structured quote report as produced by the AI extraction step."""
    payment: PaymentSection = Field(default_factory=PaymentSection)
    timeline: TimelineSection = Field(default_factory=TimelineSection)
    scope: ScopeSection = Field(default_factory=ScopeSection)
    costs: CostsSection = Field(default_factory=CostsSection)
    summary: SummarySection = Field(default_factory=SummarySection)
    notes: List[str] = Field(default_factory=list)
    signals: Optional[SignalsSection] = None
    quality: Optional[QualitySection] = None

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, v: Any) -> List[str]:
        return [note for note in coerce_list(v) if isinstance(note, str)]

    @classmethod
    def from_raw(cls, raw: Any) -> "QuoteReport":
        """
        Build a QuoteReport from any report-like value.

        Each section is validated on its own; a section that cannot be
        validated is logged and replaced with its empty default rather
        than failing the whole report.

        Args:
            raw: None, a mapping (report_json), or a QuoteReport

        Returns:
            QuoteReport (never raises)
        """
        if isinstance(raw, QuoteReport):
            return raw
        if not isinstance(raw, Mapping):
            if raw is not None:
                logger.warning(f"Ignoring non-mapping report of type {type(raw).__name__}")
            return cls()

        summary = raw.get("summary")
        if summary is None:
            summary = raw.get("quote_overview")
        if isinstance(summary, Mapping) and summary.get("total") is None:
            summary = {**summary, "total": summary.get("quote_total")}

        sections: Dict[str, Any] = {
            "payment": (PaymentSection, raw.get("payment")),
            "timeline": (TimelineSection, raw.get("timeline")),
            "scope": (ScopeSection, raw.get("scope")),
            "costs": (CostsSection, raw.get("costs")),
            "summary": (SummarySection, summary),
            "signals": (SignalsSection, raw.get("signals")),
            "quality": (QualitySection, raw.get("quality")),
        }

        values: Dict[str, Any] = {"notes": raw.get("notes")}
        for key, (model, data) in sections.items():
            if data is None:
                continue
            if not isinstance(data, Mapping):
                logger.warning(f"Report section '{key}' is not an object; treating as empty")
                continue
            try:
                values[key] = model.model_validate(dict(data))
            except ValidationError as e:
                logger.warning(f"Report section '{key}' failed validation; treating as empty: {e}")

        return cls.model_validate(values)


# ============================================================================
# NORMALIZED VIEW
# ============================================================================

@dataclass(frozen=True)
class NormalizedReport:
    """Canonical, fully-defaulted view consumed by the category scorers."""
    deposit_percent: Optional[float]
    payment_terms_text: str          # lower-cased
    schedule_example_count: int
    timeline_present: bool
    timeline_clarity: str            # "clear" | "basic" | "missing"
    timeline_text: str               # lower-cased
    scope_present: Tuple[str, ...]
    scope_missing: Tuple[str, ...]
    line_items: Tuple[LineItem, ...]
    high_cost_flags: Tuple[HighCostFlag, ...]
    quote_total: Optional[float]     # None when absent or <= 0
    notes_text: str                  # joined, lower-cased
    confidence: Optional[str]

    @property
    def high_cost_flag_count(self) -> int:
        return len(self.high_cost_flags)


ReportLike = Union[None, Mapping[str, Any], QuoteReport]


def normalize_report(report: ReportLike) -> NormalizedReport:
    """
    Normalize a report-like value for scoring.

    Args:
        report: None, a report_json mapping, or a QuoteReport

    Returns:
        NormalizedReport with defaults for every scorer input
    """
    quote = QuoteReport.from_raw(report)

    total = quote.summary.total
    if total is not None and total <= 0:
        total = None

    return NormalizedReport(
        deposit_percent=quote.payment.deposit_percent,
        payment_terms_text=(quote.payment.payment_terms_text or "").lower(),
        schedule_example_count=len(quote.payment.recommended_schedule_example),
        timeline_present=quote.timeline.timeline_present is True,
        timeline_clarity=quote.timeline.timeline_clarity or "missing",
        timeline_text=(quote.timeline.timeline_text or "").lower(),
        scope_present=tuple(quote.scope.present),
        scope_missing=tuple(quote.scope.missing_or_unclear),
        line_items=tuple(quote.costs.line_items),
        high_cost_flags=tuple(quote.costs.high_cost_flags),
        quote_total=total,
        notes_text=" ".join(quote.notes).lower(),
        confidence=quote.summary.confidence,
    )
