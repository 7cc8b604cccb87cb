"""
ROI CLI Display

Rich table formatting for terminal output.
"""
from __future__ import annotations

from typing import Mapping

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from roi_engine.models import CATEGORY_ORDER, CalculationResult, InitialState, PercentMode
from roi_engine.validation import ASSUMPTION_LABELS, INPUT_LABELS
from roi_io.writers import CATEGORY_LABELS


console = Console()


def display_header(title: str) -> None:
    """Display a section header."""
    console.print()
    console.print(Panel(Text(title, style="bold white"), style="blue"))


def display_initial_state(state: InitialState, percent_modes: Mapping[str, PercentMode] | None = None) -> None:
    """Display workbook defaults for every field."""
    display_header("Workbook Defaults")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Field", style="dim")
    table.add_column("Key")
    table.add_column("Value", justify="right")

    percent_modes = percent_modes or {}
    for name, value in state.inputs.model_dump().items():
        label = INPUT_LABELS[name]
        if name in percent_modes:
            label = f"{label} [{percent_modes[name].value}]"
        table.add_row(label, name, f"{value:,.2f}")
    table.add_row("", "", "")
    for name, value in state.assumptions.model_dump().items():
        table.add_row(ASSUMPTION_LABELS[name], name, f"{value:,.2f}")

    console.print(table)


def display_breakdown(result: CalculationResult) -> None:
    """Display per-category savings and totals."""
    display_header("Annual Savings")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Category", style="dim")
    table.add_column("Hours Saved", justify="right")
    table.add_column("Dollars Saved", justify="right")

    for category in CATEGORY_ORDER:
        item = result.breakdown[category]
        table.add_row(CATEGORY_LABELS[category], f"{item.hours_saved:,.1f}", f"{item.dollars_saved:,.2f}")
    table.add_row("", "", "")
    table.add_row(
        "[bold green]Total[/bold green]",
        f"[bold green]{result.totals.hours_saved:,.1f}[/bold green]",
        f"[bold green]{result.totals.dollars_saved:,.2f}[/bold green]",
    )

    console.print(table)


def display_monthly(result: CalculationResult) -> None:
    """Display the cumulative ROI series."""
    display_header("Cumulative ROI by Month")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Month", justify="center")
    table.add_column("Cumulative ROI", justify="right")

    for point in result.monthly:
        style = "red" if point.roi < 0 else "green"
        table.add_row(f"{point.month:g}", f"[{style}]{point.roi:,.2f}[/{style}]")

    console.print(table)


def display_summary(result: CalculationResult) -> None:
    """Display payback and the echoed assumptions."""
    display_header("Summary")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim")
    table.add_column("Value", justify="right")

    payback = result.payback_month
    table.add_row("Payback month", f"{payback:g}" if payback is not None else "not reached")
    if result.monthly:
        table.add_row("Cumulative ROI at end", f"{result.monthly[-1].roi:,.2f}")
    for name, value in result.assumptions.model_dump().items():
        table.add_row(ASSUMPTION_LABELS[name], f"{value:,.2f}")

    console.print(table)


def display_all(result: CalculationResult) -> None:
    """Display a full calculation result."""
    display_breakdown(result)
    display_monthly(result)
    display_summary(result)

    console.print()
    console.print("[bold green]✓ ROI Calculation Complete[/bold green]")
