"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

mssql-connstr CLI - translate SQL Server connection strings between drivers.
"""

from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mssql_connstr.connection_string_parser import parse
from mssql_connstr.constants import ALL_DRIVERS, DriverType
from mssql_connstr.drivers import DRIVER_PROFILES
from mssql_connstr.exceptions import ConnectionStringParseError, TranslatorError
from mssql_connstr.logging import setup_logging
from mssql_connstr.models import TranslationOptions, TranslationResult
from mssql_connstr.translator import translate as translate_connection_string
from mssql_connstr.translator import translate_all
from mssql_connstr.validator import validate as validate_parsed
from mssql_connstr.validator import validate_syntax

app = typer.Typer(help="Translate SQL Server connection strings between driver formats")
console = Console()

DRIVER_HELP = "One of: " + ", ".join(driver.value for driver in ALL_DRIVERS)


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(1)


def _build_options(readable: bool, order: str, preserve_unknown: bool,
                   include_defaults: bool, short_names: bool) -> TranslationOptions:
    try:
        return TranslationOptions(
            include_defaults=include_defaults,
            preserve_unknown=preserve_unknown,
            prefer_short_names=short_names,
            formatting="readable" if readable else "compact",
            keyword_order=order,
        )
    except TranslatorError as e:
        _fail(e.message)


def _coerce_driver(driver: Optional[str]) -> Optional[DriverType]:
    if driver is None:
        return None
    try:
        return DriverType.coerce(driver)
    except TranslatorError as e:
        _fail(e.message)


def _print_details(result: TranslationResult) -> None:
    if result.untranslatable_keywords:
        table = Table(title="Untranslatable Keywords")
        table.add_column("Keyword", style="cyan")
        table.add_column("Reason", style="yellow")
        for item in result.untranslatable_keywords:
            table.add_row(escape(item.keyword), item.reason.value)
        console.print(table)

    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning.message)}")


@app.callback()
def main_callback(
    log: Optional[str] = typer.Option(None, "--log", help="Enable debug logging: file, stdout or both"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file path (with --log file/both)"),
):
    """Translate SQL Server connection strings between driver formats."""
    if log:
        try:
            setup_logging(log, log_file)
        except ValueError as e:
            _fail(str(e))


@app.command()
def translate(
    connection_string: str = typer.Argument(..., help="Connection string to translate"),
    to: str = typer.Option(..., "--to", "-t", help=f"Target driver. {DRIVER_HELP}"),
    source: Optional[str] = typer.Option(None, "--from", "-f", help="Source driver (skips detection)"),
    readable: bool = typer.Option(False, "--readable", "-r", help="Readable spacing and indentation"),
    order: str = typer.Option("source", "--order", help="Keyword order: source, canonical or alphabetical"),
    preserve_unknown: bool = typer.Option(False, "--preserve-unknown", help="Pass unknown keywords through"),
    include_defaults: bool = typer.Option(False, "--include-defaults", help="Emit target driver defaults"),
    short_names: bool = typer.Option(False, "--short-names", help="Prefer short keyword spellings"),
    strict: bool = typer.Option(False, "--strict", help="Fail on parse errors or untranslatable keywords"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show untranslatable keywords and warnings"),
):
    """Translate a connection string to another driver's format."""
    target = _coerce_driver(to)
    source_driver = _coerce_driver(source)
    options = _build_options(readable, order, preserve_unknown, include_defaults, short_names)

    if strict:
        try:
            parse(connection_string, source_driver).raise_for_errors()
        except ConnectionStringParseError as e:
            _fail(e.message)

    result = translate_connection_string(connection_string, target, options, source_driver)
    if not result.success:
        for error in result.errors:
            console.print(f"[red]Error:[/red] {escape(error.message)}")
        raise typer.Exit(1)

    typer.echo(result.connection_string)
    if verbose or strict:
        _print_details(result)
    if strict and result.untranslatable_keywords:
        raise typer.Exit(1)


@app.command(name="all")
def all_drivers(
    connection_string: str = typer.Argument(..., help="Connection string to translate"),
    source: Optional[str] = typer.Option(None, "--from", "-f", help="Source driver (skips detection)"),
    readable: bool = typer.Option(False, "--readable", "-r", help="Readable spacing and indentation"),
    order: str = typer.Option("source", "--order", help="Keyword order: source, canonical or alphabetical"),
):
    """Translate a connection string to every driver format."""
    source_driver = _coerce_driver(source)
    options = _build_options(readable, order, False, False, False)

    results: List[TranslationResult] = translate_all(connection_string, options, source_driver)
    failed = [result for result in results if not result.success]
    if failed:
        for error in failed[0].errors:
            console.print(f"[red]Error:[/red] {escape(error.message)}")
        raise typer.Exit(1)

    for result in results:
        profile = DRIVER_PROFILES[result.target_driver]
        console.print(f"\n[bold cyan]{escape(profile.display_name)}[/bold cyan]")
        typer.echo(result.connection_string)
        if result.untranslatable_keywords:
            names = ", ".join(item.keyword for item in result.untranslatable_keywords)
            console.print(f"[yellow]Not translated:[/yellow] {escape(names)}")


@app.command()
def detect(
    connection_string: str = typer.Argument(..., help="Connection string to inspect"),
):
    """Detect the driver format of a connection string."""
    parsed = parse(connection_string)
    console.print(
        f"Driver: [green]{parsed.driver.value}[/green] "
        f"({escape(DRIVER_PROFILES[parsed.driver].display_name)})"
    )
    console.print(f"Confidence: {parsed.confidence.value}")
    console.print(f"Keywords: {len(parsed.pairs)}")


@app.command()
def validate(
    connection_string: str = typer.Argument(..., help="Connection string to validate"),
    source: Optional[str] = typer.Option(None, "--from", "-f", help="Source driver (skips detection)"),
):
    """Check syntax and semantics of a connection string."""
    source_driver = _coerce_driver(source)
    syntax = validate_syntax(connection_string)
    result = validate_parsed(parse(connection_string, source_driver))

    errors = syntax.errors or result.errors
    for error in errors:
        suffix = f" ({error.suggestion})" if error.suggestion else ""
        console.print(f"[red]Error:[/red] {escape(error.message)}{escape(suffix)}")
    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning.message)}")

    if errors:
        raise typer.Exit(1)
    console.print("[green]Valid[/green]")


@app.command()
def drivers():
    """List supported drivers."""
    table = Table(title="Supported Drivers")
    table.add_column("Driver", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Output", style="white")

    for driver in ALL_DRIVERS:
        profile = DRIVER_PROFILES[driver]
        table.add_row(driver.value, escape(profile.display_name), profile.render_strategy.value)

    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
