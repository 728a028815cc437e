"""Heuristic code analysis for JavaScript/TypeScript source files.

Estimates structural quality metrics without building a syntax tree:
cyclomatic complexity by counting decision constructs, magic numbers by
scanning for unnamed numeric literals, and function length/parameter count
from the spans produced by extraction.py.

analyze_file() is a pure function of one file's text and returns every
violation for that file. It never raises on unusual input; the worst case is
under- or over-counting.
"""

import re

from compliance_metrics.config import ALLOWED_MAGIC_NUMBERS, DEFAULT_THRESHOLDS, Thresholds
from compliance_metrics.extraction import Extractor, extract_functions
from compliance_metrics.models import RuleKind, SourceFile, Violation


# ---------------------------------------------------------------------------
# Cyclomatic complexity
# ---------------------------------------------------------------------------

# Each occurrence adds one decision point. "else if (" also matches "if (".
DECISION_PATTERNS = [
    re.compile(r"\bif\s*\("),
    re.compile(r"\belse\s+if\s*\("),
    re.compile(r"\bcase\s+"),
    re.compile(r"\bfor\s*\("),
    re.compile(r"\bwhile\s*\("),
    re.compile(r"\bdo\s*\{"),
    re.compile(r"\bcatch\s*\("),
    re.compile(r"&&"),
    re.compile(r"\|\|"),
    re.compile(r"\?\?"),
    # Rough ternary: "?" then ":" with no "?" or ":" between, which skips "x?: T"
    re.compile(r"\?[^:?]+:"),
]


def measure_complexity(code: str) -> int:
    """Approximate cyclomatic complexity: 1 + number of decision points."""
    complexity = 1
    for pattern in DECISION_PATTERNS:
        complexity += len(pattern.findall(code))
    return complexity


# ---------------------------------------------------------------------------
# Magic numbers
# ---------------------------------------------------------------------------

_DECLARATION_RE = re.compile(r"^\s*(?:export\s+)?(?:const|let|var)\s+\w+\s*[:=]")

# Sub-patterns removed before looking for literals
_SAFE_PATTERNS = [
    re.compile(r"\[\d+\]"),                  # index access
    re.compile(r"\.length\s*[<>=]+\s*\d+"),  # length comparisons
    re.compile(r":\s*number"),               # type annotations
    re.compile(r"[<>=]+\s*0(?![\w.])"),      # comparisons with 0, not 0.75
    re.compile(r"\+\+|--"),                  # increment/decrement
]

# Decimal literal (numeric separators allowed), optionally negative, or a
# prefixed hex/octal/binary one.
# Digits inside identifiers (utf8, h1) are not literals.
_NUMBER_RE = re.compile(
    r"(?<![\w.$])-?(?:0[xXoObB][0-9a-fA-F_]+|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?)(?![\w.])"
)

_PREFIXED_RE = re.compile(r"^-?0[xXoObB]")


def _is_exempt_line(line: str) -> bool:
    stripped = line.strip()
    if _DECLARATION_RE.match(line):
        return True
    if stripped.startswith("import "):
        return True
    return stripped.startswith(("//", "/*", "*"))


def _strip_safe_patterns(line: str) -> str:
    for pattern in _SAFE_PATTERNS:
        line = pattern.sub("", line)
    return line


def _inside_string(line: str, literal: str) -> bool:
    """Rough check: the literal directly follows a string delimiter on the line."""
    return any(f"{quote}{literal}" in line for quote in ("\"", "'", "`"))


def find_magic_numbers(source: str, filepath: str) -> list[Violation]:
    """Return one magic-number violation per unnamed literal occurrence."""
    violations: list[Violation] = []
    for i, line in enumerate(source.split("\n")):
        if _is_exempt_line(line):
            continue
        for literal in _NUMBER_RE.findall(_strip_safe_patterns(line)):
            if literal in ALLOWED_MAGIC_NUMBERS:
                continue
            if _PREFIXED_RE.match(literal):
                continue
            if _inside_string(line, literal):
                continue
            violations.append(
                Violation(
                    file_path=filepath,
                    rule=RuleKind.MAGIC_NUMBER,
                    line=i + 1,
                    message=f"Magic number {literal} should be a named constant",
                )
            )
    return violations


# ---------------------------------------------------------------------------
# File-level analysis
# ---------------------------------------------------------------------------

# How each measured rule describes its value in a message
_MEASURE_FORMATS = {
    RuleKind.FILE_LENGTH: "{} lines",
    RuleKind.FUNCTION_LENGTH: "{} lines",
    RuleKind.MAX_PARAMS: "{} parameters",
    RuleKind.CYCLOMATIC_COMPLEXITY: "complexity {}",
}


def _check_limit(
    path: str,
    rule: RuleKind,
    thresholds: Thresholds,
    value: int,
    line: int,
    subject: str,
) -> Violation | None:
    """Return a violation if *value* is above the rule's threshold."""
    limit = thresholds.for_rule(rule)
    if limit is None or value <= limit:
        return None
    measure = _MEASURE_FORMATS[rule].format(value)
    return Violation(
        file_path=path,
        rule=rule,
        line=line,
        message=f"{subject} has {measure} (max: {limit})",
    )


def analyze_file(
    source_file: SourceFile,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    extractor: Extractor = extract_functions,
) -> list[Violation]:
    """Return all rule violations for one file.

    File length is checked once at line 1, then each extracted function is
    checked for length, parameter count and complexity, and finally the
    whole text is scanned for magic numbers.
    """
    path = source_file.path
    checks = [_check_limit(path, RuleKind.FILE_LENGTH, thresholds, source_file.line_count, 1, "File")]

    for fn in extractor(source_file.text):
        subject = f"Function '{fn.name}'"
        checks.append(_check_limit(path, RuleKind.FUNCTION_LENGTH, thresholds, fn.length, fn.start_line, subject))
        checks.append(_check_limit(path, RuleKind.MAX_PARAMS, thresholds, fn.param_count, fn.start_line, subject))
        complexity = measure_complexity(fn.body_text)
        checks.append(
            _check_limit(path, RuleKind.CYCLOMATIC_COMPLEXITY, thresholds, complexity, fn.start_line, subject)
        )

    violations = [v for v in checks if v is not None]
    violations.extend(find_magic_numbers(source_file.text, path))
    return violations
