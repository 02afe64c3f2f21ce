"""Shared formatting and file utilities for commands."""

import json
from pathlib import Path
from typing import Any, Dict

from rich.console import Console
from rich.table import Table

from votebooth_toolkit.ballot.codec import from_fixed_point
from votebooth_toolkit.ballot.models import BallotTransition

# Shared console instance
console = Console()


def load_json(file_path: str) -> Dict[str, Any]:
    """Load and parse a JSON file"""
    with open(file_path, "r") as file:
        return json.load(file)


def format_address(address: str, length: int = 10) -> str:
    """
    Format an Ethereum address to show first and last characters.

    Args:
        address: Ethereum address
        length: Total visible characters (default: 10)

    Returns:
        Formatted address like "0x1234...5678"
    """
    if not address:
        return "N/A"
    if len(address) <= length:
        return address
    return f"{address[:6]}...{address[-4:]}"


def format_amount(amount: int) -> str:
    """10^18-scaled amount as a plain decimal string"""
    text = format(from_fixed_point(amount), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def save_json_output(
    data: Dict[str, Any],
    filename: str,
    output_dir: str = "output",
    print_path: bool = True,
) -> str:
    """
    Save data to a JSON file with automatic directory creation.

    Args:
        data: Data to save
        filename: Output filename (can include subdirectories)
        output_dir: Base output directory (default: 'output')
        print_path: Whether to print the saved file path

    Returns:
        Full path to saved file
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    filepath = output_path / filename
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)

    if print_path:
        console.print(f"[cyan]Data saved to:[/cyan] {filepath}")

    return str(filepath)


def create_quote_table(transition: BallotTransition) -> Table:
    """
    Rich table describing where a ballot's credits and tallies go.

    Args:
        transition: Planned ballot transition

    Returns:
        Configured Rich Table
    """
    table = Table(
        show_header=True,
        header_style="bold cyan",
        show_lines=False,
        pad_edge=False,
        box=None,
    )
    table.add_column("Item", width=18)
    table.add_column("Amount", justify="right")
    table.add_column("Pool", width=10, justify="center")

    table.add_row(
        "Previous vote",
        format_amount(transition.previous_amount),
        transition.previous_outcome.value,
    )
    table.add_row(
        "New vote",
        format_amount(transition.new_amount),
        transition.new_outcome.value,
    )
    table.add_row(
        "Voice credit cost",
        format_amount(transition.cost),
        transition.new_outcome.value if transition.cost else "-",
    )
    table.add_row(
        "Tally credited",
        format_amount(transition.tally_credit),
        transition.new_outcome.value if transition.tally_credit else "-",
    )
    table.add_row(
        "Tally withdrawn",
        format_amount(transition.tally_withdrawal),
        (
            transition.previous_outcome.value
            if transition.tally_withdrawal
            else "-"
        ),
    )
    return table
