"""Data types shared by the extractors, the file analyzer and the aggregator.

All values are plain dataclasses. Extractors only produce FunctionSpan;
rule evaluation only consumes it.
"""

from dataclasses import dataclass, field
from enum import Enum


class RuleKind(str, Enum):
    """The five code quality rules, keyed by their report names."""

    FILE_LENGTH = "file-length"
    FUNCTION_LENGTH = "function-length"
    MAX_PARAMS = "max-params"
    CYCLOMATIC_COMPLEXITY = "cyclomatic-complexity"
    MAGIC_NUMBER = "magic-number"


@dataclass(frozen=True)
class SourceFile:
    """A repository-relative path and its UTF-8 text."""

    path: str
    text: str

    @property
    def line_count(self) -> int:
        return self.text.count("\n") + 1


@dataclass(frozen=True)
class FunctionSpan:
    """A heuristically detected function. Line numbers are 1-indexed."""

    name: str
    start_line: int
    end_line: int
    param_count: int
    body_text: str

    @property
    def length(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True)
class Violation:
    """A single rule violation."""

    file_path: str
    rule: RuleKind
    line: int
    message: str


@dataclass(frozen=True)
class WorstFile:
    path: str
    count: int


@dataclass
class ComplianceReport:
    """Repo-wide compliance summary built by compliance.build_report()."""

    files_analyzed: int
    total_lines: int
    violations: list[Violation] = field(default_factory=list)
    compliance_by_rule: dict[RuleKind, int] = field(default_factory=dict)
    overall_compliance: int = 100
    worst_files: list[WorstFile] = field(default_factory=list)
