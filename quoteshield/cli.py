"""
Quote Scoring Runner

Scores an extracted quote report (report_json) from a file or stdin and
prints the result as JSON.

Usage:
    quoteshield-score report.json

    # Older signal-based extraction, with findings and suggestions:
    quoteshield-score report.json --source signals --findings --negotiation

    # Read from stdin, emit the stored submission columns:
    cat report.json | quoteshield-score - --columns
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .scoring import (
    ReportSource,
    generate_negotiation_suggestions,
    generate_risk_findings,
    get_primary_risk_category,
    score_quote,
    to_submission_columns,
)
from .utils.config import get_settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quoteshield-score",
        description="Score a contractor quote report for risk.",
    )
    parser.add_argument("report", help="Path to report JSON, or '-' for stdin")
    parser.add_argument(
        "--source",
        choices=[s.value for s in ReportSource],
        default=ReportSource.REPORT.value,
        help="Shape of the report (default: report)",
    )
    parser.add_argument("--findings", action="store_true", help="Include structured risk findings")
    parser.add_argument("--negotiation", action="store_true", help="Include negotiation suggestions")
    parser.add_argument("--columns", action="store_true", help="Emit stored submission columns instead")
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    return parser


def load_report(path: str) -> Any:
    """Read report JSON from a path or stdin ('-')."""
    if path == "-":
        return json.load(sys.stdin)
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        report = load_report(args.report)
    except FileNotFoundError:
        print(f"ERROR: Report file not found: {args.report}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"ERROR: Could not read report {args.report}: {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"ERROR: Report is not valid JSON: {e}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        print(f"ERROR: Report is not valid UTF-8 text: {e}", file=sys.stderr)
        return 1

    source = ReportSource(args.source)
    result = score_quote(report, source=source)
    logger.info(f"Scored report {args.report}: {result.final_score} ({result.risk_level.value})")

    if args.columns:
        output: Dict[str, Any] = to_submission_columns(result)
    else:
        output = result.to_dict()
        primary = get_primary_risk_category(result.category_scores)
        output["primary_risk_category"] = primary.name if primary else None

    if args.findings:
        output["risk_findings"] = generate_risk_findings(report, result, source=source).to_dict()
    if args.negotiation:
        output["negotiation_suggestions"] = [
            s.to_dict() for s in generate_negotiation_suggestions(report, result, source=source)
        ]

    print(json.dumps(output, indent=args.indent, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
