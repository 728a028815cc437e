"""Report rendering: rich tables for the terminal, JSON for machines."""

import json

from rich.console import Console
from rich.table import Table

from compliance_metrics.models import ComplianceReport, RuleKind, Violation

MAX_VIOLATIONS_LISTED = 20


def compliance_style(percentage: int) -> str:
    """Color for a compliance percentage: green >= 90, yellow >= 70, else red."""
    if percentage >= 90:
        return "green"
    if percentage >= 70:
        return "yellow"
    return "red"


def _styled_percentage(percentage: int) -> str:
    style = compliance_style(percentage)
    return f"[{style}]{percentage}%[/{style}]"


def report_to_dict(report: ComplianceReport) -> dict:
    """Serialize a report using the rule names as keys."""
    return {
        "filesAnalyzed": report.files_analyzed,
        "totalLines": report.total_lines,
        "violations": [
            {
                "filePath": v.file_path,
                "rule": v.rule.value,
                "line": v.line,
                "message": v.message,
            }
            for v in report.violations
        ],
        "complianceByRule": {rule.value: pct for rule, pct in report.compliance_by_rule.items()},
        "overallCompliance": report.overall_compliance,
        "worstFiles": [{"path": w.path, "count": w.count} for w in report.worst_files],
    }


def report_to_json(report: ComplianceReport) -> str:
    return json.dumps(report_to_dict(report), indent=2)


def format_violations(violations: list[Violation], max_violations: int = MAX_VIOLATIONS_LISTED) -> list[str]:
    """Format violations one per line, sorted by file and line, capped."""
    if not violations:
        return ["No violations found."]
    ordered = sorted(violations, key=lambda v: (v.file_path, v.line))
    lines = [f"- {v.file_path}:{v.line} [{v.rule.value}] {v.message}" for v in ordered[:max_violations]]
    if len(ordered) > max_violations:
        lines.append(f"- ... and {len(ordered) - max_violations} more violations omitted")
    return lines


def render_report(report: ComplianceReport, console: Console, details: int = 0) -> None:
    """Print the per-rule table, the worst files and optionally a violation list."""
    console.print(
        f"Files analyzed: [bold]{report.files_analyzed}[/bold]   "
        f"Total lines: [bold]{report.total_lines}[/bold]   "
        f"Violations: [bold]{len(report.violations)}[/bold]"
    )

    counts = {rule: 0 for rule in RuleKind}
    for v in report.violations:
        counts[v.rule] += 1

    rules = Table(title="Compliance by rule")
    rules.add_column("Rule")
    rules.add_column("Violations", justify="right")
    rules.add_column("Compliance", justify="right")
    for rule in RuleKind:
        pct = report.compliance_by_rule.get(rule, 100)
        rules.add_row(rule.value, str(counts[rule]), _styled_percentage(pct))
    rules.add_row("[bold]overall[/bold]", str(len(report.violations)), _styled_percentage(report.overall_compliance))
    console.print(rules)

    if report.worst_files:
        worst = Table(title="Worst files")
        worst.add_column("File")
        worst.add_column("Violations", justify="right")
        for entry in report.worst_files:
            worst.add_row(entry.path, str(entry.count))
        console.print(worst)

    if details > 0:
        for line in format_violations(report.violations, details):
            console.print(line, markup=False)
