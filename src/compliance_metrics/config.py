"""Configuration for the compliance analyzer.

Rule thresholds are an explicit Thresholds value handed to the analyzer
rather than globals, so each project can tune them and tests stay
deterministic. The tree-sitter language configurations map file extensions
to the grammar module and node types used by extraction.TreeSitterExtractor.
"""

import json
import os
from dataclasses import dataclass, fields, replace

from compliance_metrics.models import RuleKind


class ConfigError(ValueError):
    """Raised when a threshold config file is malformed."""


# ---------------------------------------------------------------------------
# Rule thresholds (a value above the threshold is a violation)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Thresholds:
    file_length: int = 300
    function_length: int = 30
    max_params: int = 3
    cyclomatic_complexity: int = 10

    def for_rule(self, rule: RuleKind) -> int | None:
        """Return the threshold for a rule, or None for magic-number."""
        if rule is RuleKind.MAGIC_NUMBER:
            return None
        return getattr(self, rule.value.replace("-", "_"))


DEFAULT_THRESHOLDS = Thresholds()

CONFIG_FILE_NAME = ".compliance-metrics.json"


def load_thresholds(path: str, base: Thresholds = DEFAULT_THRESHOLDS) -> Thresholds:
    """Read rule thresholds from a JSON object keyed by rule name.

    A missing file returns *base* unchanged. Keys must be rule names
    ("file-length", "max-params", ...); values must be non-negative integers.
    """
    if not os.path.isfile(path):
        return base
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read threshold config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Threshold config {path} must be a JSON object")

    known = {f.name.replace("_", "-"): f.name for f in fields(Thresholds)}
    overrides = {}
    for key, value in data.items():
        if key not in known:
            allowed = ", ".join(sorted(known))
            raise ConfigError(f"Unknown rule '{key}' in {path}. Allowed rules: {allowed}")
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigError(f"Threshold for '{key}' must be a non-negative integer, got {value!r}")
        overrides[known[key]] = value
    return replace(base, **overrides)


# ---------------------------------------------------------------------------
# Source file selection
# ---------------------------------------------------------------------------

SOURCE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")

# Substrings that mark vendored, generated or minified paths
EXCLUDED_PATH_MARKERS = ("node_modules", "dist/", "build/", ".min.")

EXCLUDED_SUFFIXES = (".d.ts",)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

# Literals common enough that naming them adds nothing
ALLOWED_MAGIC_NUMBERS = frozenset({"0", "1", "-1", "2", "100", "1000", "0.5", "0.1"})

WORST_FILES_LIMIT = 10

DEFAULT_CI_THRESHOLD = 70


# ---------------------------------------------------------------------------
# Node type mappings per language (grammar-based extraction)
# ---------------------------------------------------------------------------

_ECMASCRIPT_FUNCTION_TYPES = {
    "function_declaration",
    "generator_function_declaration",
    "arrow_function",
    "method_definition",
    "function_expression",
}

JAVASCRIPT_CONFIG = {
    "grammar_module": "tree_sitter_javascript",
    "language_func": "language",
    "file_extensions": {".js", ".jsx", ".mjs", ".cjs"},
    "function_types": _ECMASCRIPT_FUNCTION_TYPES,
    "parameter_node": "formal_parameters",
}

TYPESCRIPT_CONFIG = {
    "grammar_module": "tree_sitter_typescript",
    "language_func": "language_typescript",
    "file_extensions": {".ts", ".mts", ".cts"},
    "function_types": _ECMASCRIPT_FUNCTION_TYPES,
    "parameter_node": "formal_parameters",
}

TSX_CONFIG = {
    "grammar_module": "tree_sitter_typescript",
    "language_func": "language_tsx",
    "file_extensions": {".tsx"},
    "function_types": _ECMASCRIPT_FUNCTION_TYPES,
    "parameter_node": "formal_parameters",
}

LANGUAGE_CONFIGS = {
    "javascript": JAVASCRIPT_CONFIG,
    "typescript": TYPESCRIPT_CONFIG,
    "tsx": TSX_CONFIG,
}

PARSERS = ("heuristic", "tree-sitter")
