"""
Test Suite for the quoteshield-score command
"""

import io
import json

import pytest
from quoteshield.cli import build_parser, main


@pytest.fixture
def report_file(tmp_path, roofing_report):
    path = tmp_path / "report.json"
    path.write_text(json.dumps(roofing_report), encoding="utf-8")
    return path


def _run(capsys, argv):
    code = main(argv)
    captured = capsys.readouterr()
    return code, captured


class TestScoreCommand:

    def test_scores_file(self, capsys, report_file):
        code, captured = _run(capsys, [str(report_file)])
        output = json.loads(captured.out)

        assert code == 0
        assert output["final_score"] == 88
        assert output["risk_level"] == "low"
        assert output["primary_risk_category"] == "scope"
        assert "risk_findings" not in output

    def test_reads_stdin(self, capsys, monkeypatch, empty_report):
        monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(empty_report)))
        code, captured = _run(capsys, ["-"])
        output = json.loads(captured.out)

        assert code == 0
        assert output["final_score"] == 41
        assert output["primary_risk_category"] == "timeline"

    def test_columns(self, capsys, report_file):
        code, captured = _run(capsys, [str(report_file), "--columns"])
        output = json.loads(captured.out)

        assert code == 0
        assert output["clarity_score"] == 98
        assert "explanations" not in output

    def test_findings_and_negotiation(self, capsys, report_file):
        code, captured = _run(capsys, [str(report_file), "--findings", "--negotiation"])
        output = json.loads(captured.out)

        assert code == 0
        assert output["risk_findings"]["explanations"][0]["category"] == "scope"
        assert [s["category"] for s in output["negotiation_suggestions"]] == ["scope"]

    def test_signals_source(self, capsys, tmp_path, signals_report):
        path = tmp_path / "signals.json"
        path.write_text(json.dumps(signals_report), encoding="utf-8")

        code, captured = _run(capsys, [str(path), "--source", "signals"])
        output = json.loads(captured.out)

        assert code == 0
        assert output["category_scores"]["scope"] == 0

    def test_missing_file(self, capsys, tmp_path):
        code, captured = _run(capsys, [str(tmp_path / "absent.json")])

        assert code == 1
        assert "Report file not found" in captured.err
        assert captured.out == ""

    def test_invalid_json(self, capsys, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        code, captured = _run(capsys, [str(path)])

        assert code == 1
        assert "not valid JSON" in captured.err

    def test_directory_path(self, capsys, tmp_path):
        code, captured = _run(capsys, [str(tmp_path)])

        assert code == 1
        assert captured.err.startswith("ERROR: Could not read report")
        assert captured.out == ""

    def test_non_utf8_file(self, capsys, tmp_path):
        path = tmp_path / "binary.json"
        path.write_bytes(b"\xff\xfe{}")

        code, captured = _run(capsys, [str(path)])

        assert code == 1
        assert "not valid UTF-8" in captured.err

    def test_unknown_source_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["report.json", "--source", "pdf"])
