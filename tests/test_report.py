"""Tests for report rendering and serialization."""

import json

from rich.console import Console

from compliance_metrics.compliance import analyze_codebase
from compliance_metrics.models import ComplianceReport, RuleKind, Violation, WorstFile
from compliance_metrics.report import (
    compliance_style,
    format_violations,
    render_report,
    report_to_dict,
    report_to_json,
)


def _report():
    violations = [
        Violation("src/b.ts", RuleKind.MAGIC_NUMBER, 4, "Magic number 42 should be a named constant"),
        Violation("src/a.ts", RuleKind.MAX_PARAMS, 1, "Function 'f' has 4 parameters (max: 3)"),
    ]
    return ComplianceReport(
        files_analyzed=2,
        total_lines=40,
        violations=violations,
        compliance_by_rule={rule: 100 for rule in RuleKind} | {RuleKind.MAGIC_NUMBER: 50, RuleKind.MAX_PARAMS: 50},
        overall_compliance=80,
        worst_files=[WorstFile("src/b.ts", 1), WorstFile("src/a.ts", 1)],
    )


# --- compliance_style ---

def test_compliance_style_thresholds():
    assert compliance_style(100) == "green"
    assert compliance_style(90) == "green"
    assert compliance_style(89) == "yellow"
    assert compliance_style(70) == "yellow"
    assert compliance_style(69) == "red"


# --- serialization ---

def test_report_to_dict_uses_rule_names():
    data = report_to_dict(_report())
    assert data["filesAnalyzed"] == 2
    assert data["totalLines"] == 40
    assert data["overallCompliance"] == 80
    assert data["complianceByRule"]["magic-number"] == 50
    assert set(data["complianceByRule"]) == {rule.value for rule in RuleKind}
    assert data["violations"][0] == {
        "filePath": "src/b.ts",
        "rule": "magic-number",
        "line": 4,
        "message": "Magic number 42 should be a named constant",
    }
    assert data["worstFiles"] == [{"path": "src/b.ts", "count": 1}, {"path": "src/a.ts", "count": 1}]


def test_report_to_json_is_parseable():
    assert json.loads(report_to_json(_report()))["overallCompliance"] == 80


def test_empty_report_serializes():
    report = analyze_codebase([], lambda path: "")
    data = report_to_dict(report)
    assert data["violations"] == []
    assert data["worstFiles"] == []
    assert all(pct == 100 for pct in data["complianceByRule"].values())


# --- format_violations ---

def test_format_violations_sorted_by_file_and_line():
    lines = format_violations(_report().violations)
    assert lines[0].startswith("- src/a.ts:1 [max-params]")
    assert lines[1].startswith("- src/b.ts:4 [magic-number]")


def test_format_violations_caps_output():
    violations = [Violation("a.ts", RuleKind.MAGIC_NUMBER, i, "m") for i in range(1, 6)]
    lines = format_violations(violations, max_violations=2)
    assert len(lines) == 3
    assert "3 more violations omitted" in lines[-1]


def test_format_violations_empty():
    assert format_violations([]) == ["No violations found."]


# --- render_report ---

def test_render_report_prints_tables():
    console = Console(record=True, width=120)
    render_report(_report(), console, details=5)
    text = console.export_text()
    assert "Compliance by rule" in text
    assert "cyclomatic-complexity" in text
    assert "Worst files" in text
    assert "src/b.ts:4 [magic-number]" in text
