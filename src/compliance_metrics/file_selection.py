"""Default file-selection and file-read providers.

The analyzer itself only accepts a list of paths and a read function. These
are the git-backed defaults the CLI plugs in.
"""

import os
import subprocess

from compliance_metrics.config import EXCLUDED_PATH_MARKERS, EXCLUDED_SUFFIXES, SOURCE_EXTENSIONS


class FileSelectionError(RuntimeError):
    """The list of tracked files could not be produced at all."""


def is_analyzable(path: str) -> bool:
    """Check whether a tracked path is a first-party source file.

    Pure function: rejects vendored, build output, minified and declaration
    files, and anything without a source extension.
    """
    if not path.endswith(SOURCE_EXTENSIONS):
        return False
    if path.endswith(EXCLUDED_SUFFIXES):
        return False
    return not any(marker in path for marker in EXCLUDED_PATH_MARKERS)


def list_tracked_files(repo_dir: str) -> list[str]:
    """Return repository-relative source paths tracked by git, in git's order.

    Raises FileSelectionError when git is unavailable or the directory is not
    a repository. Without a file list there is no report to build.
    """
    pathspecs = [f"*{ext}" for ext in SOURCE_EXTENSIONS]
    try:
        result = subprocess.run(
            ["git", "ls-files", *pathspecs],
            cwd=repo_dir,
            capture_output=True,
            text=True,
            timeout=60,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        raise FileSelectionError(f"Could not run git ls-files in {repo_dir}: {exc}") from exc
    if result.returncode != 0:
        detail = result.stderr.strip() or f"exit code {result.returncode}"
        raise FileSelectionError(f"git ls-files failed in {repo_dir}: {detail}")
    return [
        f.strip() for f in result.stdout.split("\n")
        if f.strip() and is_analyzable(f.strip())
    ]


def read_source(repo_dir: str, path: str) -> str:
    """Read a repository-relative file as UTF-8.

    Raises OSError or UnicodeDecodeError; the aggregator treats either as
    "skip this file".
    """
    with open(os.path.join(repo_dir, path), "r", encoding="utf-8") as f:
        return f.read()
