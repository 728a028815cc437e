"""Function span extraction.

Two interchangeable extractors produce the same FunctionSpan values:

- extract_functions(): the default heuristic. Matches signature shapes line
  by line with regexes and finds each body's end by brace-depth counting.
  It can misfire on template literals, JSX and deeply nested generics, and
  nested functions are reported separately (so their lines count twice).
- TreeSitterExtractor: a grammar-based extractor for JavaScript/TypeScript
  built on tree-sitter.

Rule evaluation in code_analysis.py only ever sees FunctionSpan values.
count_parameters() lives here because the heuristic extractor owns the raw
parameter text.
"""

import importlib
import os
import re
from collections.abc import Callable

from tree_sitter import Language, Parser

from compliance_metrics.config import LANGUAGE_CONFIGS
from compliance_metrics.models import FunctionSpan

Extractor = Callable[[str], list[FunctionSpan]]


# ---------------------------------------------------------------------------
# Parameter counting
# ---------------------------------------------------------------------------

_OPENERS = "({[<"
_CLOSERS = ")}]>"


def count_parameters(params: str) -> int:
    """Count the top-level parameters in the text between a function's parens.

    Commas nested inside destructuring, defaults or generics are not
    separators. A trailing comma counts as one more parameter.
    """
    trimmed = params.strip()
    if not trimmed:
        return 0
    depth = 0
    count = 1
    for char in trimmed:
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
        elif char == "," and depth == 0:
            count += 1
    return count


# ---------------------------------------------------------------------------
# Heuristic extraction
# ---------------------------------------------------------------------------

# Tried in order; the first shape that matches a line wins.
SIGNATURE_PATTERNS = [
    # function name(params), optionally exported and/or async
    re.compile(r"^\s*(?:export\s+)?(?:async\s+)?function\s+(\w+)\s*\(([^)]*)\)"),
    # const name = [async] (params) [: ReturnType] =>
    re.compile(
        r"^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?"
        r"\(([^)]*)\)\s*(?::\s*[^=]+)?\s*=>"
    ),
    # const name = [async] function(params)
    re.compile(
        r"^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?function\s*\(([^)]*)\)"
    ),
    # [async] name(params) [: ReturnType] {
    re.compile(r"^\s*(?:async\s+)?(\w+)\s*\(([^)]*)\)\s*(?::\s*[^{]+)?\s*\{"),
]

# Keywords that look like a call followed by a block
RESERVED_NAMES = frozenset({"if", "for", "while", "switch", "catch", "constructor"})


def match_signature(line: str) -> tuple[str, str] | None:
    """Return (name, raw parameter list) if the line opens a function."""
    for pattern in SIGNATURE_PATTERNS:
        match = pattern.match(line)
        if match and match.group(1) not in RESERVED_NAMES:
            return match.group(1), match.group(2)
    return None


def find_function_end(lines: list[str], start: int) -> int:
    """Return the 0-indexed line where the brace opened at or after *start* closes.

    Falls back to *start* when no brace is opened or it never closes.
    """
    depth = 0
    opened = False
    for i in range(start, len(lines)):
        for char in lines[i]:
            if char == "{":
                depth += 1
                opened = True
            elif char == "}":
                depth -= 1
                if opened and depth == 0:
                    return i
    return start


def extract_functions(source: str) -> list[FunctionSpan]:
    """Find function-like constructs in source text, in file order."""
    lines = source.split("\n")
    spans: list[FunctionSpan] = []
    for i, line in enumerate(lines):
        signature = match_signature(line)
        if signature is None:
            continue
        name, params = signature
        end = find_function_end(lines, i)
        spans.append(
            FunctionSpan(
                name=name,
                start_line=i + 1,
                end_line=end + 1,
                param_count=count_parameters(params),
                body_text="\n".join(lines[i:end + 1]),
            )
        )
    return spans


# ---------------------------------------------------------------------------
# Grammar-based extraction
# ---------------------------------------------------------------------------

_parser_cache: dict = {}


def _get_parser(config: dict) -> Parser | None:
    """Get or create a tree-sitter parser for a language config.

    Returns None if the grammar package is not installed.
    """
    cache_key = (config["grammar_module"], config["language_func"])
    if cache_key in _parser_cache:
        return _parser_cache[cache_key]
    try:
        mod = importlib.import_module(config["grammar_module"])
        lang_func = getattr(mod, config["language_func"])
        parser = Parser(Language(lang_func()))
    except (ImportError, AttributeError, TypeError, OSError):
        parser = None
    _parser_cache[cache_key] = parser
    return parser


def config_for_file(filepath: str) -> dict | None:
    """Return the language config matching a file's extension, or None."""
    ext = os.path.splitext(filepath)[1].lower()
    for config in LANGUAGE_CONFIGS.values():
        if ext in config["file_extensions"]:
            return config
    return None


def _node_text(node) -> str:
    return node.text.decode("utf8", errors="replace")


def get_function_name(node) -> str:
    """Name a function node, looking through to the variable it is assigned to."""
    name_node = node.child_by_field_name("name")
    if name_node:
        return _node_text(name_node)
    parent = node.parent
    if parent is not None and parent.type in (
        "variable_declarator",
        "assignment_expression",
        "pair",
        "public_field_definition",
    ):
        name_child = parent.child_by_field_name("name")
        if name_child is None:
            name_child = parent.child_by_field_name("left")
        if name_child is None:
            name_child = parent.child_by_field_name("key")
        if name_child:
            return _node_text(name_child)
    return "<anonymous>"


def count_node_parameters(func_node, param_node_type: str) -> int:
    """Count the named children of a function's parameter list node."""
    for child in func_node.children:
        if child.type == param_node_type:
            return len(child.named_children)
    # Single bare arrow parameter: x => x
    if func_node.child_by_field_name("parameter") is not None:
        return 1
    return 0


def find_function_nodes(root_node, function_types: set[str]) -> list:
    """Collect all function nodes from a syntax tree in document order."""
    results = []

    def _walk(node):
        # Keywords such as "function" are anonymous tokens, never spans
        if node.is_named and node.type in function_types:
            results.append(node)
        for child in node.children:
            _walk(child)

    _walk(root_node)
    return results


class TreeSitterExtractor:
    """Extract FunctionSpan values from a tree-sitter syntax tree."""

    def __init__(self, config: dict):
        self.config = config

    def __call__(self, source: str) -> list[FunctionSpan]:
        parser = _get_parser(self.config)
        if parser is None:
            return []
        tree = parser.parse(bytes(source, "utf8"))
        spans = []
        for node in find_function_nodes(tree.root_node, self.config["function_types"]):
            spans.append(
                FunctionSpan(
                    name=get_function_name(node),
                    start_line=node.start_point[0] + 1,
                    end_line=node.end_point[0] + 1,
                    param_count=count_node_parameters(node, self.config["parameter_node"]),
                    body_text=_node_text(node),
                )
            )
        return spans


def extractor_for(filepath: str, parser: str = "heuristic") -> Extractor:
    """Pick the extractor for one file.

    The tree-sitter extractor is used only when requested and the file's
    extension has a language config; everything else gets the heuristic.
    """
    if parser == "tree-sitter":
        config = config_for_file(filepath)
        if config is not None:
            return TreeSitterExtractor(config)
    return extract_functions
