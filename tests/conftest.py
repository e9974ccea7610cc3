"""
Pytest Configuration and Shared Fixtures

Provides common report fixtures and configuration for all test modules.
"""

import pytest
from typing import Dict, Any

from quoteshield.utils.config import get_settings


# ============================================================================
# Settings
# ============================================================================

@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; reset around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ============================================================================
# Report Fixtures
# ============================================================================

@pytest.fixture
def empty_report() -> Dict[str, Any]:
    """Report with no extracted data at all."""
    return {}


@pytest.fixture
def roofing_report() -> Dict[str, Any]:
    """
    Detailed roof replacement quote.

    Expected scores: payment 90, timeline 100, scope 71, warranty 95,
    pricing 80 -> final 88 (low risk).
    """
    return {
        "summary": {
            "total": 12400,
            "contractor_name": "Summit Roofing LLC",
            "project_type": "Roof replacement",
            "confidence": "high",
        },
        "payment": {
            "deposit_percent": 25,
            "payment_terms_text": (
                "25% deposit, 50% upon tear-off completion, final payment due after inspection"
            ),
            "recommended_schedule_example": [
                "25% deposit",
                "50% after tear-off",
                "25% after final inspection",
            ],
        },
        "timeline": {
            "timeline_present": True,
            "timeline_clarity": "clear",
            "timeline_text": "Start date within 2 weeks of signing; completion in 3 days.",
        },
        "scope": {
            "present": [
                "Architectural shingles",
                "Synthetic underlayment",
                "Drip edge",
                "Cleanup and disposal",
                "10-year workmanship warranty",
            ],
            "missing_or_unclear": [
                "permit",
                {"item": "ventilation", "severity": "warn", "why": "No ridge vent listed"},
            ],
        },
        "costs": {
            "line_items": [
                {"name": "Tear-off", "qty": 24, "unit_price": 104.17, "total": 2500},
                {"name": "Architectural shingles", "qty": 24, "unit_price": 241.67, "total": 5800},
                {"name": "Synthetic underlayment", "qty": None, "unit_price": None, "total": 1200},
                {"name": "Disposal", "total": 900},
            ],
            "high_cost_flags": [],
        },
        "notes": ["Manufacturer warranty registered by contractor."],
    }


@pytest.fixture
def signals_report() -> Dict[str, Any]:
    """Older extraction output carrying only signal counts and quality."""
    return {
        "signals": {
            "pricing_outliers": 2,
            "missing_scope": 3,
            "warranty_red_flags": 1,
            "timeline_red_flags": 1,
        },
        "quality": {
            "doc_quality": 0.9,
            "line_item_clarity": 0.8,
        },
    }


@pytest.fixture
def extracted_report() -> Dict[str, Any]:
    """Raw extraction: line items and scope lists, no payment or timeline text."""
    return {
        "scope": {
            "present": ["permit"],
            "missing_or_unclear": [],
        },
        "costs": {
            "line_items": [
                {"name": "Tear-off and disposal", "total": 1000},
                {"name": "Architectural shingles", "total": 2000},
                {"name": "Ice and water shield", "qty": 3, "unit_price": 150, "total": None},
                {"name": "Dripedge install", "total": None},
            ],
        },
    }
