"""
Test Suite for Report Normalization

Tests that loosely-typed, partial or malformed report_json values reduce
to a fully-defaulted NormalizedReport without raising.
"""

import logging

import pytest
from quoteshield.scoring.report import (
    LineItem,
    QuoteReport,
    NormalizedReport,
    coerce_number,
    normalize_report,
)
from quoteshield.scoring.risk import score_quote


class TestEmptyReports:
    """Absent data means "no information", never failure."""

    @pytest.mark.parametrize("report", [None, {}, QuoteReport()])
    def test_defaults(self, report):
        normalized = normalize_report(report)

        assert isinstance(normalized, NormalizedReport)
        assert normalized.deposit_percent is None
        assert normalized.payment_terms_text == ""
        assert normalized.schedule_example_count == 0
        assert normalized.timeline_present is False
        assert normalized.timeline_clarity == "missing"
        assert normalized.timeline_text == ""
        assert normalized.scope_present == ()
        assert normalized.scope_missing == ()
        assert normalized.line_items == ()
        assert normalized.high_cost_flag_count == 0
        assert normalized.quote_total is None
        assert normalized.notes_text == ""

    def test_non_mapping_report(self, caplog):
        """A report that is not an object is treated as empty."""
        with caplog.at_level(logging.WARNING):
            normalized = normalize_report(["not", "a", "report"])

        assert normalized.line_items == ()
        assert "non-mapping report" in caplog.text

    def test_non_mapping_section(self, caplog):
        """A malformed section degrades to empty; the rest survives."""
        with caplog.at_level(logging.WARNING):
            normalized = normalize_report({
                "payment": "50% upfront",
                "scope": {"present": ["permit"]},
            })

        assert normalized.deposit_percent is None
        assert normalized.payment_terms_text == ""
        assert normalized.scope_present == ("permit",)
        assert "'payment'" in caplog.text


class TestNumericFields:
    """Numbers are coerced once; absence stays distinct from zero."""

    @pytest.mark.parametrize("value,expected", [
        (30, 30.0),
        (12.5, 12.5),
        ("30", 30.0),
        (" 40% ", 40.0),
        (0, 0.0),
        (True, None),
        ("abc", None),
        (float("nan"), None),
        (float("inf"), None),
        ([30], None),
        (None, None),
    ])
    def test_coerce_number(self, value, expected):
        assert coerce_number(value) == expected

    @pytest.mark.parametrize("report", [
        {"payment": {"deposit_percent": 10 ** 400}},
        {"costs": {"line_items": [{"name": "Labor", "total": 10 ** 400}]}},
        {"summary": {"total": -(10 ** 400)}},
    ])
    def test_integer_beyond_float_range(self, report):
        """JSON integers too large for a float are "no information"."""
        normalized = normalize_report(report)

        assert normalized.deposit_percent is None
        assert normalized.quote_total is None
        assert all(item.total is None for item in normalized.line_items)
        assert 0 <= score_quote(report).final_score <= 100

    def test_zero_deposit_is_known(self):
        """A 0% deposit is information, not absence."""
        normalized = normalize_report({"payment": {"deposit_percent": 0}})
        assert normalized.deposit_percent == 0.0

    def test_line_item_numbers_stay_absent(self):
        normalized = normalize_report({
            "costs": {"line_items": [{"name": "Labor", "qty": None, "total": "n/a"}]},
        })

        item = normalized.line_items[0]
        assert item.name == "Labor"
        assert item.qty is None
        assert item.unit_price is None
        assert item.total is None


class TestTotals:
    """The quote total is None unless positive."""

    @pytest.mark.parametrize("total", [0, -250, None, "unknown"])
    def test_non_positive_total(self, total):
        normalized = normalize_report({"summary": {"total": total}})
        assert normalized.quote_total is None

    def test_positive_total(self):
        assert normalize_report({"summary": {"total": 9800}}).quote_total == 9800.0

    def test_quote_overview_alias(self):
        """Older reports carry quote_overview.quote_total."""
        normalized = normalize_report({"quote_overview": {"quote_total": 15000, "confidence": "Low"}})

        assert normalized.quote_total == 15000.0
        assert normalized.confidence == "low"

    def test_summary_takes_precedence(self):
        normalized = normalize_report({
            "summary": {"total": 8000},
            "quote_overview": {"total": 1},
        })
        assert normalized.quote_total == 8000.0


class TestTextFields:
    """Text used for keyword matching is lower-cased once."""

    def test_lower_cased(self):
        normalized = normalize_report({
            "payment": {"payment_terms_text": "50% DUE At Signing"},
            "timeline": {"timeline_text": "Start Date: MAY 4"},
            "notes": ["Includes WARRANTY", 5, None, "Other"],
        })

        assert normalized.payment_terms_text == "50% due at signing"
        assert normalized.timeline_text == "start date: may 4"
        assert normalized.notes_text == "includes warranty other"

    def test_non_string_text(self):
        normalized = normalize_report({"payment": {"payment_terms_text": 50}})
        assert normalized.payment_terms_text == ""


class TestTimelineFields:

    @pytest.mark.parametrize("present,expected", [
        (True, True),
        (False, False),
        ("yes", False),
        (1, False),
        (None, False),
    ])
    def test_timeline_present_strict(self, present, expected):
        normalized = normalize_report({"timeline": {"timeline_present": present}})
        assert normalized.timeline_present is expected

    @pytest.mark.parametrize("clarity,expected", [
        ("clear", "clear"),
        ("Basic", "basic"),
        ("missing", "missing"),
        ("vague", "missing"),
        (None, "missing"),
    ])
    def test_timeline_clarity(self, clarity, expected):
        normalized = normalize_report({"timeline": {"timeline_clarity": clarity}})
        assert normalized.timeline_clarity == expected


class TestListFields:

    def test_scope_objects_reduced_to_text(self, roofing_report):
        normalized = normalize_report(roofing_report)

        assert normalized.scope_missing == ("permit", "ventilation")
        assert len(normalized.scope_present) == 5

    def test_scope_object_without_item_still_counts(self):
        normalized = normalize_report({"scope": {"missing_or_unclear": [{"severity": "warn"}, 7]}})
        assert normalized.scope_missing == ("",)

    def test_line_items_shapes(self):
        normalized = normalize_report({
            "costs": {"line_items": ["Labor", 42, {"name": "Shingles", "total": 1200}]},
        })

        assert [li.name for li in normalized.line_items] == ["Labor", "Shingles"]
        assert isinstance(normalized.line_items[0], LineItem)

    def test_high_cost_flags_all_count(self):
        normalized = normalize_report({
            "costs": {"high_cost_flags": [
                "ridge vent",
                None,
                {"name": "Skylight", "reason": "Above regional benchmark"},
            ]},
        })

        assert normalized.high_cost_flag_count == 3
        assert normalized.high_cost_flags[2].reason == "Above regional benchmark"

    def test_schedule_count(self, roofing_report):
        assert normalize_report(roofing_report).schedule_example_count == 3

    def test_list_field_not_a_list(self):
        normalized = normalize_report({"scope": {"present": "shingles"}})
        assert normalized.scope_present == ()


class TestQuoteReportModel:

    def test_from_raw_returns_same_instance(self):
        quote = QuoteReport()
        assert QuoteReport.from_raw(quote) is quote

    def test_signals_and_quality_parsed(self, signals_report):
        quote = QuoteReport.from_raw(signals_report)

        assert quote.signals.missing_scope == 3.0
        assert quote.quality.doc_quality == 0.9

    def test_absent_signals_stay_none(self):
        quote = QuoteReport.from_raw({})
        assert quote.signals is None
        assert quote.quality is None

    def test_extra_fields_ignored(self):
        quote = QuoteReport.from_raw({"red_flags": [{"title": "x"}], "payment": {"payment_risk": "high"}})
        assert quote.payment.deposit_percent is None
