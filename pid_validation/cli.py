"""Command Line Interface for Patient Identifier Validation.

This module provides a CLI using Typer for validating single identifiers or
whole CSV files against an identifier type catalog.

Security Impact:
    - Identifier values are shown only on the user's own terminal or written
      to the output file the user asked for; they are never logged
    - Exit codes let scripts gate imports on validation results
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pid_validation.adapters.batch_validator import BatchIdentifierValidator
from pid_validation.adapters.in_memory_repository import InMemoryPatientRepository
from pid_validation.adapters.type_catalog import find_identifier_type, load_identifier_types
from pid_validation.domain.models import Location, PatientIdentifier, PatientReference
from pid_validation.domain.ports import UnallowedIdentifierError
from pid_validation.domain.services.national_id import NationalIdChecksum
from pid_validation.infrastructure.logging_config import setup_logging
from pid_validation.infrastructure.settings import settings

logger = logging.getLogger(__name__)

# Initialize Typer app and Rich console
app = typer.Typer(
    name="pidval",
    help="Patient identifier validation: format, check digits, location and uniqueness",
    add_completion=False
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    config = settings.validation_config
    setup_logging(use_json=config.log_json, log_level="DEBUG" if verbose else config.log_level)


def _load_catalog(catalog: Path) -> dict:
    try:
        return load_identifier_types(catalog)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]✗[/red] Failed to load identifier types: {str(e)}")
        raise typer.Exit(code=2)


@app.command()
def check(
    identifier: str = typer.Argument(..., help="Identifier value to validate"),
    type_name: str = typer.Option(..., "--type", "-t", help="Identifier type name"),
    catalog: Path = typer.Option(..., "--catalog", "-c", help="Identifier type catalog (JSON)", exists=True),
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Location the identifier is assigned at"),
    voided: bool = typer.Option(False, "--voided", help="Treat the identifier as voided"),
    locale: Optional[str] = typer.Option(None, "--locale", help="Message locale (e.g. en, pt_BR)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Validate a single identifier.

    Examples:
        pidval check 123.456.789-09 --type CPF --catalog types.json
        pidval check 1234 --type "Old ID" --catalog types.json --location Clinic
    """
    _configure_logging(verbose)
    identifier_types = _load_catalog(catalog)

    patient_identifier = PatientIdentifier(
        identifier=identifier,
        identifier_type=find_identifier_type(identifier_types, type_name),
        location=Location(name=location) if location else None,
        patient=PatientReference(),
        voided=voided,
    )

    pipeline = settings.build_pipeline(InMemoryPatientRepository())
    renderer = settings.build_message_renderer()
    result = pipeline.evaluate(patient_identifier)

    if result.is_failure():
        details = result.error_details
        message = renderer.render(details["message_key"], details["message_args"], locale)
        console.print(f"[red]✗[/red] {result.error_type}: {escape(message)}")
        raise typer.Exit(code=1)

    console.print(f"[green]✓[/green] Valid identifier: {escape(patient_identifier.identifier)}")


@app.command("validate-file")
def validate_file(
    input_file: Path = typer.Argument(..., help="CSV file with identifier and identifier_type columns", exists=True),
    catalog: Path = typer.Option(..., "--catalog", "-c", help="Identifier type catalog (JSON)", exists=True),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write results to this CSV file"),
    locale: Optional[str] = typer.Option(None, "--locale", help="Message locale (e.g. en, pt_BR)"),
    show_valid: bool = typer.Option(False, "--show-valid", help="List valid rows as well as rejected ones"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Validate every identifier in a CSV file.

    Accepted identifiers are remembered, so a later row holding the same
    identifier for a different patient is rejected as not unique.

    Examples:
        pidval validate-file identifiers.csv --catalog types.json
        pidval validate-file identifiers.csv -c types.json -o results.csv --locale pt_BR
    """
    _configure_logging(verbose)
    identifier_types = _load_catalog(catalog)

    try:
        df = pd.read_csv(input_file, dtype=str, keep_default_na=False, na_values=[''])
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        console.print(f"[red]✗[/red] Failed to read {input_file}: {str(e)}")
        raise typer.Exit(code=2)

    repository = InMemoryPatientRepository()
    batch = BatchIdentifierValidator(
        pipeline=settings.build_pipeline(repository),
        identifier_types=identifier_types,
        renderer=settings.build_message_renderer(),
        locale=locale,
        on_valid=repository.add,
    )

    try:
        results = batch.validate_frame(df)
    except KeyError as e:
        console.print(f"[red]✗[/red] {escape(e.args[0])}")
        raise typer.Exit(code=2)
    except ValueError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(code=2)

    if output:
        results.to_csv(output, index=False)
        console.print(f"[dim]Results written to {output}[/dim]")

    rows = results if show_valid else results[~results['is_valid']]
    if not rows.empty:
        table = Table(title="Identifier validation")
        table.add_column("Row", justify="right")
        table.add_column("Identifier")
        table.add_column("Type")
        table.add_column("Result")
        table.add_column("Message")
        for index, row in rows.iterrows():
            table.add_row(
                str(index + 1),
                escape(str(row["identifier"])),
                escape(str(row["identifier_type"])),
                "[green]valid[/green]" if row['is_valid'] else f"[red]{row['failure_kind']}[/red]",
                escape(row["message"] or ""),
            )
        console.print(table)

    valid_count = int(results['is_valid'].sum())
    rejected_count = len(results) - valid_count
    console.print(f"\n[bold]Valid:[/bold] {valid_count}  [bold]Rejected:[/bold] {rejected_count}")

    if rejected_count:
        raise typer.Exit(code=1)


@app.command("check-digits")
def check_digits(
    base: str = typer.Argument(..., help="First nine digits of a national ID (CPF)"),
) -> None:
    """Print the complete national ID (CPF) for a nine-digit base.

    Examples:
        pidval check-digits 123456789
        pidval check-digits 123.456.789
    """
    try:
        console.print(NationalIdChecksum().valid_identifier(base))
    except UnallowedIdentifierError as e:
        console.print(f"[red]✗[/red] {str(e)}")
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
