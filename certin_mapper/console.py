"""Rich console utilities for certin-mapper.

This module provides a shared Rich Console instance and the summary output
printed by the CLI after an enrichment run.
"""

import os
from collections import Counter
from typing import Any, Dict, List, Sequence, Tuple

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from ._enrichment.properties import NA, PATCH_STATUS, PROPERTY_KEYS, UPDATE_AVAILABLE, PropertySet

IS_CI = os.getenv("CI") == "true" or os.getenv("GITHUB_ACTIONS") == "true"

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "highlight": "magenta",
    }
)

# Shared console instance
console = Console(
    theme=custom_theme,
    force_terminal=IS_CI or None,
    color_system="auto",
)


def print_summary_table(
    title: str,
    data: List[Tuple[str, Any]],
    show_if_empty: bool = False,
) -> None:
    """
    Print a summary table.

    Args:
        title: Table title
        data: List of (label, value) tuples
        show_if_empty: Whether to show the table if all values are 0/empty
    """
    if not show_if_empty:
        data = [(label, value) for label, value in data if value]

    if not data:
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for label, value in data:
        table.add_row(label, str(value))

    console.print(table)


def summarize_property_sets(property_sets: Sequence[PropertySet]) -> Dict[str, Any]:
    """
    Count how many components got a meaningful value per property.

    Returns:
        Dict with ``resolved`` (per key counts), ``updates_available`` and ``total``
    """
    resolved: Counter = Counter()
    updates_available = 0
    for properties in property_sets:
        for key in PROPERTY_KEYS:
            if properties.get(key, NA) != NA:
                resolved[key] += 1
        if properties.get(PATCH_STATUS, NA).startswith(UPDATE_AVAILABLE):
            updates_available += 1
    return {"resolved": resolved, "updates_available": updates_available, "total": len(property_sets)}


def print_enrichment_summary(property_sets: Sequence[PropertySet]) -> None:
    """
    Print the property coverage of an enrichment run as a Rich table.

    Args:
        property_sets: Final property sets of all enriched components
    """
    stats = summarize_property_sets(property_sets)
    total = stats["total"]

    data = [("Components enriched", total), ("Updates available", f"{stats['updates_available']}/{total}")]
    data.extend((key, f"{stats['resolved'][key]}/{total}") for key in PROPERTY_KEYS)
    print_summary_table("CERT-In Enrichment Summary", data, show_if_empty=True)


def print_final_success(output_file: str) -> None:
    console.print()
    console.print(f"[success]✓ Enriched SBOM written to {output_file}[/success]")


def print_final_failure(message: str) -> None:
    console.print()
    console.print(f"[error]✗ {message}[/error]")
