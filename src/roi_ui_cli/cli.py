"""
ROI CLI Application

Typer-based command-line interface for the spreadsheet-backed ROI calculator.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from roi_engine.config import settings
from roi_engine.engine import RoiEngine, run_calculation
from roi_engine.errors import ValidationError
from roi_engine.loader import read_workbook
from roi_engine.schema import detect_schema
from roi_engine.validation import validate_assumptions, validate_inputs
from roi_io.readers import Scenario, apply_scenario, parse_assignment, read_scenario_file
from roi_io.template import LAYOUTS, save_reference_workbook
from roi_io.writers import export_csv, export_json, export_xlsx
from roi_io.xlsx_validation import check_schema_cells, load_workbook_formulas
from roi_ui_cli.charts import save_charts, show_charts
from roi_ui_cli.display import display_all, display_initial_state


app = typer.Typer(
    name="roi",
    help="Spreadsheet-backed ROI calculator",
    add_completion=False,
)

console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Show engine debug logging",
    ),
) -> None:
    """Configure logging for every command."""
    level = logging.DEBUG if verbose else settings.LOG_LEVEL
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _open_engine(workbook: Optional[str]) -> RoiEngine:
    console.print(f"[dim]Loading workbook: {workbook or settings.WORKBOOK_URL}[/dim]")
    return asyncio.run(RoiEngine.open(workbook))


def _build_scenario(scenario_file: Optional[Path], assignments: Optional[List[str]]) -> Scenario:
    scenario = read_scenario_file(scenario_file) if scenario_file else Scenario()
    for text in assignments or []:
        section, name, value = parse_assignment(text)
        getattr(scenario, section)[name] = value
    return scenario


def _print_validation_errors(messages: list[str]) -> None:
    console.print("[red]Validation failed:[/red]")
    for message in messages:
        console.print(f"  [red]• {message}[/red]")


workbook_option = typer.Option(
    None,
    "--workbook", "-w",
    help="Workbook URL or path (defaults to ROI_WORKBOOK_URL)",
)


@app.command()
def defaults(
    workbook: Optional[str] = workbook_option,
) -> None:
    """
    Show the workbook-authored default for every field.
    """
    try:
        engine = _open_engine(workbook)
        display_initial_state(engine.get_initial_state(), engine.percent_modes)
        if engine.ambiguous_percent_fields:
            console.print(
                "[yellow]Percent storage inferred from a zero default: "
                f"{', '.join(engine.ambiguous_percent_fields)}[/yellow]"
            )
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def calculate(
    workbook: Optional[str] = workbook_option,
    scenario_file: Optional[Path] = typer.Option(
        None,
        "--scenario", "-s",
        help="Scenario overrides (YAML or JSON)",
    ),
    assignments: Optional[List[str]] = typer.Option(
        None,
        "--set",
        help="Override one field, e.g. --set pctTicketsMigrated=40",
    ),
    json_output: Optional[Path] = typer.Option(
        None,
        "--json",
        help="Write the result as JSON",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Output Excel file path",
    ),
    csv_dir: Optional[Path] = typer.Option(
        None,
        "--csv-dir",
        help="Directory to export CSV files",
    ),
    charts: bool = typer.Option(
        False,
        "--charts",
        help="Display interactive charts",
    ),
    charts_dir: Optional[Path] = typer.Option(
        None,
        "--charts-dir",
        help="Directory to save chart files",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Suppress table output",
    ),
) -> None:
    """
    Run the ROI model with workbook defaults plus overrides.

    Overrides come from a scenario file and then from --set options.
    """
    try:
        scenario = _build_scenario(scenario_file, assignments)
        engine = _open_engine(workbook)
        inputs, assumptions = apply_scenario(engine.get_initial_state(), scenario)

        console.print("[dim]Running ROI model...[/dim]")
        result = asyncio.run(run_calculation(engine, inputs, assumptions))

        if not quiet:
            display_all(result)

        if json_output:
            export_json(result, json_output)
            console.print(f"[green]✓ Wrote {json_output}[/green]")

        if output:
            export_xlsx(result, output)
            console.print(f"[green]✓ Exported to {output}[/green]")

        if csv_dir:
            files = export_csv(result, csv_dir)
            console.print(f"[green]✓ Exported {len(files)} CSV files[/green]")

        if charts:
            console.print("\n[dim]Opening charts in browser...[/dim]")
            show_charts(result)

        if charts_dir:
            files = save_charts(result, charts_dir)
            console.print(f"[green]✓ Saved {len(files)} chart files[/green]")

    except ValidationError as e:
        _print_validation_errors(e.messages)
        raise typer.Exit(code=1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def validate(
    scenario_file: Path = typer.Argument(
        ...,
        help="Scenario file (YAML or JSON)",
    ),
    workbook: Optional[str] = workbook_option,
) -> None:
    """
    Validate a scenario against the workbook defaults without calculating.
    """
    try:
        scenario = read_scenario_file(scenario_file)
        engine = _open_engine(workbook)
        inputs, assumptions = apply_scenario(engine.get_initial_state(), scenario)
        errors = validate_inputs(inputs) + validate_assumptions(assumptions)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    if errors:
        _print_validation_errors(errors)
        raise typer.Exit(code=1)

    console.print("[green]✓ Scenario is valid[/green]")
    console.print(f"\n  Input overrides: {len(scenario.inputs)}")
    console.print(f"  Assumption overrides: {len(scenario.assumptions)}")


@app.command()
def template(
    output: Path = typer.Argument(
        ...,
        help="Path of the .xlsx file to write",
    ),
    layout: str = typer.Option(
        "v1",
        "--layout", "-l",
        help=f"Workbook layout: {', '.join(LAYOUTS)}",
    ),
) -> None:
    """
    Write the reference ROI workbook.
    """
    try:
        path = save_reference_workbook(output, layout)
        console.print(f"[green]✓ Wrote {layout} workbook to {path}[/green]")
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def inspect(
    workbook_path: Path = typer.Argument(
        ...,
        help="Workbook (.xlsx) to check",
    ),
) -> None:
    """
    Report the detected layout and check its bound cells.
    """
    try:
        model = read_workbook(workbook_path.read_bytes())
        schema = detect_schema(model.sheet_names)
        report = check_schema_cells(load_workbook_formulas(workbook_path), schema)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"  Layout: {schema.version}")
    console.print(f"  Sheets: {', '.join(model.sheet_names)}")
    console.print(f"  Bound fields: {len(schema.fields)}")

    for ref in report.missing_formulas:
        console.print(f"  [yellow]Output cell without formula: {ref}[/yellow]")
    for ref in report.formula_inputs:
        console.print(f"  [yellow]Field cell holds a formula: {ref}[/yellow]")

    if not report.ok:
        console.print("[red]Workbook does not conform to its layout[/red]")
        raise typer.Exit(code=1)
    console.print("[green]✓ Workbook conforms to its layout[/green]")


if __name__ == "__main__":
    app()
