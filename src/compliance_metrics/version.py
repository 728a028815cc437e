"""Package version, plus the commit hash when running from a source checkout."""

import os
import subprocess

PACKAGE_VERSION = "0.1.0"

_SOURCE_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _checkout_commit(source_root: str = _SOURCE_ROOT) -> str | None:
    """Short HEAD hash of the checkout holding this package, or None.

    Installed wheels have no .git next to them, so git is never invoked there.
    """
    if not os.path.exists(os.path.join(source_root, ".git")):
        return None
    try:
        result = subprocess.run(
            ["git", "-C", source_root, "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.TimeoutExpired):
        return None
    commit = result.stdout.strip()
    return commit if result.returncode == 0 and commit else None


def get_version() -> str:
    """Return '0.1.0' or, from a checkout, '0.1.0 (g3a7f2c1)'."""
    commit = _checkout_commit()
    if commit is None:
        return PACKAGE_VERSION
    return f"{PACKAGE_VERSION} (g{commit})"
