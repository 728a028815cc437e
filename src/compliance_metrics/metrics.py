"""Code command: analyze a git repository and report rule compliance."""

import os
from dataclasses import replace
from typing import Annotated

import typer

from compliance_metrics.compliance import analyze_codebase
from compliance_metrics.config import (
    CONFIG_FILE_NAME,
    DEFAULT_CI_THRESHOLD,
    DEFAULT_THRESHOLDS,
    PARSERS,
    ConfigError,
    Thresholds,
    load_thresholds,
)
from compliance_metrics.file_selection import FileSelectionError, list_tracked_files, read_source
from compliance_metrics.report import render_report, report_to_json
from compliance_metrics.utils import console, log

OUTPUT_FORMATS = ("table", "json")


def resolve_thresholds(repo_dir: str, config_file: str = "", overrides: dict | None = None) -> Thresholds:
    """Build thresholds from defaults, the config file, then explicit overrides.

    Without *config_file*, the repo's .compliance-metrics.json is used if it
    exists. Overrides with a None value are ignored.
    """
    path = config_file or os.path.join(repo_dir, CONFIG_FILE_NAME)
    if config_file and not os.path.isfile(config_file):
        raise ConfigError(f"Config file not found: {config_file}")
    thresholds = load_thresholds(path, DEFAULT_THRESHOLDS)
    explicit = {k: v for k, v in (overrides or {}).items() if v is not None}
    return replace(thresholds, **explicit)


def meets_threshold(overall_compliance: int, threshold: int) -> bool:
    return overall_compliance >= threshold


def register(app: typer.Typer) -> None:
    """Register the code command on the shared app."""
    app.command()(code)


def code(
    path: Annotated[str, typer.Argument(help="Path to the git repository to analyze")] = ".",
    output_format: Annotated[
        str, typer.Option("--format", help="Output format: table or json")
    ] = "table",
    ci: Annotated[
        bool, typer.Option(help="Exit 1 when overall compliance is below --threshold")
    ] = False,
    threshold: Annotated[
        int, typer.Option(help="Minimum overall compliance percentage for --ci")
    ] = DEFAULT_CI_THRESHOLD,
    config_file: Annotated[
        str, typer.Option("--config", help=f"Threshold config file (default: <repo>/{CONFIG_FILE_NAME})")
    ] = "",
    max_file_lines: Annotated[int | None, typer.Option(help="Override the file-length threshold")] = None,
    max_function_lines: Annotated[
        int | None, typer.Option(help="Override the function-length threshold")
    ] = None,
    max_params: Annotated[int | None, typer.Option(help="Override the max-params threshold")] = None,
    max_complexity: Annotated[
        int | None, typer.Option(help="Override the cyclomatic-complexity threshold")
    ] = None,
    workers: Annotated[int, typer.Option(min=1, help="Worker threads for file analysis")] = 1,
    budget: Annotated[
        float | None, typer.Option(help="Soft time budget in seconds; later files are skipped")
    ] = None,
    parser: Annotated[
        str, typer.Option(help="Function extractor: heuristic or tree-sitter")
    ] = "heuristic",
    details: Annotated[int, typer.Option(min=0, help="List up to N violations")] = 0,
    verbose: Annotated[bool, typer.Option("--verbose", help="Log what is being analyzed")] = False,
) -> None:
    """Estimate code quality compliance for the tracked source files of a repository.

    Checks file length, function length, parameter count, cyclomatic
    complexity and magic numbers, then prints per-rule compliance and the
    files with the most violations.
    """
    if output_format not in OUTPUT_FORMATS:
        raise typer.BadParameter(f"must be one of: {', '.join(OUTPUT_FORMATS)}", param_hint="--format")
    if parser not in PARSERS:
        raise typer.BadParameter(f"must be one of: {', '.join(PARSERS)}", param_hint="--parser")

    repo_dir = os.path.abspath(os.path.expanduser(path))

    try:
        thresholds = resolve_thresholds(
            repo_dir,
            config_file,
            {
                "file_length": max_file_lines,
                "function_length": max_function_lines,
                "max_params": max_params,
                "cyclomatic_complexity": max_complexity,
            },
        )
    except ConfigError as exc:
        log(f"ERROR: {exc}", style="bold red")
        raise typer.Exit(code=2)

    try:
        paths = list_tracked_files(repo_dir)
    except FileSelectionError as exc:
        log(f"ERROR: {exc}", style="bold red")
        raise typer.Exit(code=2)

    if verbose:
        log(f"Analyzing {len(paths)} tracked source file(s) in {repo_dir}", style="dim")
        log(f"Thresholds: {thresholds}", style="dim")

    report = analyze_codebase(
        paths,
        lambda rel_path: read_source(repo_dir, rel_path),
        thresholds,
        parser=parser,
        workers=workers,
        budget_seconds=budget,
        log=lambda message: log(message, style="yellow"),
    )

    if output_format == "json":
        typer.echo(report_to_json(report))
    else:
        render_report(report, console, details=details)

    if ci and not meets_threshold(report.overall_compliance, threshold):
        log(
            f"Overall compliance {report.overall_compliance}% is below the threshold of {threshold}%",
            style="bold red",
        )
        raise typer.Exit(code=1)
