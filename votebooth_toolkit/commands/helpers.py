"""Error reporting for CLI commands."""

import json
import sys

from rich import print as rprint

from votebooth_toolkit.shared.exceptions import (
    NonRetryableException,
    ProofMismatch,
)
from votebooth_toolkit.shared.logging import get_logger

_logger = get_logger(__name__)


def handle_command_error(error: Exception) -> None:
    """
    Print a one-line diagnosis for a failed command and exit with status 1.

    Toolkit errors are labelled with their class name, bad input files and
    arguments get a short hint, anything else is logged with its traceback.
    """
    if isinstance(error, ProofMismatch):
        rprint(f"[red]{type(error).__name__}:[/red] {error.message}")
        if error.computed_root:
            rprint(f"  expected 0x{error.expected_root.hex()}")
            rprint(f"  computed 0x{error.computed_root.hex()}")
    elif isinstance(error, NonRetryableException):
        rprint(f"[red]{type(error).__name__}:[/red] {error.message}")
    elif isinstance(error, FileNotFoundError):
        rprint(f"[red]File not found:[/red] {error.filename}")
    elif isinstance(error, json.JSONDecodeError):
        rprint(f"[red]Invalid JSON:[/red] {error}")
    elif isinstance(error, ValueError):
        rprint(f"[red]Error:[/red] {error}")
    else:
        _logger.exception("Command failed")
        rprint(f"[red]Unexpected error:[/red] {error}")

    sys.exit(1)
