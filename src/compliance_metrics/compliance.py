"""Repo-wide compliance aggregation.

analyze_codebase() splits the paths into contiguous shards, maps each path
to a FileResult (read + analyze_file), summarizes every shard as a Tally,
folds the shard tallies with merge_tallies(), and only then builds the
ComplianceReport. Unreadable files are skipped silently. Per-file work
shares no state, so shards can run on worker threads; tallies are always
merged in path order, so the report does not depend on the worker count.

The 50-100% scaling used for the four non-file-length rules is a scoring
heuristic kept for parity with existing reports, not a statistical model.
"""

import math
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import reduce

from compliance_metrics.code_analysis import analyze_file
from compliance_metrics.config import DEFAULT_THRESHOLDS, WORST_FILES_LIMIT, Thresholds
from compliance_metrics.extraction import extractor_for
from compliance_metrics.models import (
    ComplianceReport,
    RuleKind,
    SourceFile,
    Violation,
    WorstFile,
)

ReadFile = Callable[[str], str]


@dataclass(frozen=True)
class FileResult:
    """Analysis outcome for one successfully read file."""

    path: str
    line_count: int
    violations: tuple[Violation, ...]


@dataclass(frozen=True)
class Tally:
    """Associative summary of any number of FileResults."""

    files: int = 0
    lines: int = 0
    violations: tuple[Violation, ...] = ()
    by_rule: dict[RuleKind, int] = field(default_factory=dict)
    by_file: dict[str, int] = field(default_factory=dict)


EMPTY_TALLY = Tally()


def tally_results(results: list[FileResult]) -> Tally:
    """Summarize a shard of file results in one pass."""
    by_rule: dict[RuleKind, int] = {}
    by_file: dict[str, int] = {}
    violations: list[Violation] = []
    lines = 0
    for result in results:
        lines += result.line_count
        violations.extend(result.violations)
        for v in result.violations:
            by_rule[v.rule] = by_rule.get(v.rule, 0) + 1
        if result.violations:
            by_file[result.path] = by_file.get(result.path, 0) + len(result.violations)
    return Tally(
        files=len(results),
        lines=lines,
        violations=tuple(violations),
        by_rule=by_rule,
        by_file=by_file,
    )


def merge_tallies(left: Tally, right: Tally) -> Tally:
    """Combine two tallies. Associative, with EMPTY_TALLY as identity."""
    by_rule = dict(left.by_rule)
    for rule, count in right.by_rule.items():
        by_rule[rule] = by_rule.get(rule, 0) + count
    by_file = dict(left.by_file)
    for path, count in right.by_file.items():
        by_file[path] = by_file.get(path, 0) + count
    return Tally(
        files=left.files + right.files,
        lines=left.lines + right.lines,
        violations=left.violations + right.violations,
        by_rule=by_rule,
        by_file=by_file,
    )


# ---------------------------------------------------------------------------
# Scoring (pure functions)
# ---------------------------------------------------------------------------


def _round_half_up(value: float) -> int:
    """Round .5 upward, unlike Python's banker's rounding."""
    return math.floor(value + 0.5)


def file_length_compliance(files_total: int, violations: int) -> int:
    """Percentage of files within the file-length threshold."""
    if files_total == 0:
        return 100
    return _round_half_up((files_total - violations) / files_total * 100)


def scaled_rule_compliance(files_total: int, violations: int) -> int:
    """Score a per-function rule on a 50-100 scale.

    About one violation per five files is tolerated before the score
    bottoms out at 50.
    """
    if files_total == 0:
        return 100
    expected_max = max(1, files_total // 5)
    ratio = min(1, violations / expected_max)
    return _round_half_up((1 - ratio * 0.5) * 100)


def rank_worst_files(by_file: dict[str, int], limit: int = WORST_FILES_LIMIT) -> list[WorstFile]:
    """Files by violation count, descending; ties keep first-seen order."""
    ranked = sorted(by_file.items(), key=lambda item: item[1], reverse=True)
    return [WorstFile(path=path, count=count) for path, count in ranked[:limit]]


def build_report(tally: Tally) -> ComplianceReport:
    """Turn a final tally into a ComplianceReport."""
    compliance_by_rule = {}
    for rule in RuleKind:
        count = tally.by_rule.get(rule, 0)
        if rule is RuleKind.FILE_LENGTH:
            compliance_by_rule[rule] = file_length_compliance(tally.files, count)
        else:
            compliance_by_rule[rule] = scaled_rule_compliance(tally.files, count)
    overall = _round_half_up(sum(compliance_by_rule.values()) / len(compliance_by_rule))
    return ComplianceReport(
        files_analyzed=tally.files,
        total_lines=tally.lines,
        violations=list(tally.violations),
        compliance_by_rule=compliance_by_rule,
        overall_compliance=overall,
        worst_files=rank_worst_files(tally.by_file),
    )


# ---------------------------------------------------------------------------
# File mapping and the aggregation entry point
# ---------------------------------------------------------------------------


def _noop(message: str) -> None:
    pass


def analyze_path(
    path: str,
    read_file: ReadFile,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    parser: str = "heuristic",
    log: Callable[[str], None] = _noop,
) -> FileResult | None:
    """Read and analyze one file. Returns None if it cannot be read."""
    try:
        text = read_file(path)
    except (OSError, UnicodeDecodeError) as exc:
        log(f"Skipping unreadable file {path}: {exc}")
        return None
    source_file = SourceFile(path=path, text=text)
    violations = analyze_file(source_file, thresholds, extractor_for(path, parser))
    return FileResult(path=path, line_count=source_file.line_count, violations=tuple(violations))


def shard_paths(paths: list[str], workers: int) -> list[list[str]]:
    """Split paths into at most *workers* contiguous, order-preserving shards."""
    if not paths:
        return []
    count = max(1, min(workers, len(paths)))
    size = math.ceil(len(paths) / count)
    return [paths[i:i + size] for i in range(0, len(paths), size)]


class _StopCheck:
    """Decides whether remaining files should be skipped."""

    def __init__(self, cancel: threading.Event | None, budget_seconds: float | None):
        self.cancel = cancel
        self.deadline = None if budget_seconds is None else time.monotonic() + budget_seconds

    def reason(self) -> str | None:
        if self.cancel is not None and self.cancel.is_set():
            return "cancelled"
        if self.deadline is not None and time.monotonic() >= self.deadline:
            return "time budget exceeded"
        return None


def analyze_codebase(
    paths: list[str],
    read_file: ReadFile,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    *,
    parser: str = "heuristic",
    workers: int = 1,
    cancel: threading.Event | None = None,
    budget_seconds: float | None = None,
    log: Callable[[str], None] = _noop,
) -> ComplianceReport:
    """Analyze every path and build the repo-wide compliance report.

    Cancellation and the soft time budget are checked before each file read;
    files not read by then are left out of the report and logged.
    """
    stop = _StopCheck(cancel, budget_seconds)
    skipped = 0
    skipped_lock = threading.Lock()

    def _analyze_shard(shard: list[str]) -> Tally:
        nonlocal skipped
        results = []
        for path in shard:
            if stop.reason() is not None:
                with skipped_lock:
                    skipped += 1
                continue
            result = analyze_path(path, read_file, thresholds, parser, log)
            if result is not None:
                results.append(result)
        return tally_results(results)

    shards = shard_paths(paths, workers)
    if len(shards) > 1:
        with ThreadPoolExecutor(max_workers=len(shards)) as pool:
            tallies = list(pool.map(_analyze_shard, shards))
    else:
        tallies = [_analyze_shard(shard) for shard in shards]

    if skipped:
        log(f"Stopped early ({stop.reason()}): {skipped} file(s) not analyzed")

    return build_report(reduce(merge_tallies, tallies, EMPTY_TALLY))
