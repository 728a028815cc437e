"""Shared console and logging helpers."""

import os
from datetime import datetime

from rich.console import Console

console = Console()

# Diagnostics go to stderr so machine-readable output on stdout stays clean
err_console = Console(stderr=True)

LOG_FILE_ENV = "COMPLIANCE_METRICS_LOG"


def _append_to_log_file(message: str) -> None:
    """Append a timestamped line to the file named by COMPLIANCE_METRICS_LOG, if set.

    Write failures are ignored; analysis never fails over logging.
    """
    log_file = os.environ.get(LOG_FILE_ENV, "")
    if not log_file:
        return
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    try:
        with open(log_file, "a", encoding="utf-8") as f:
            f.write(f"[{timestamp}] {message}\n")
    except OSError:
        pass


def log(message: str, style: str = "") -> None:
    """Write a message to stderr (with optional style) and to the log file."""
    # Paths such as src/[id].ts must not be read as markup
    err_console.print(message, style=style or None, markup=False)
    _append_to_log_file(message)
