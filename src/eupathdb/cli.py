"""Command line interface for EuPathDB annotation retrieval."""

from __future__ import annotations

from enum import IntEnum
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from eupathdb.clients.providers import PROVIDER_PREFIXES
from eupathdb.common.exceptions import (
    ConfigLoadError,
    DataError,
    NetworkError,
    UnsupportedFormatError,
    ValidationError,
)
from eupathdb.config import _merge_dicts, load_config, parse_cli_overrides
from eupathdb.io.text_table import parse_text_table
from eupathdb.io.writer import write_flat_table
from eupathdb.logging_setup import configure_logging, generate_run_id, set_run_context
from eupathdb.pipeline import AnnotationPipeline

app = typer.Typer(help="Retrieve and flatten EuPathDB annotation tables", no_args_is_help=True)
console = Console()


class ExitCode(IntEnum):
    """Exit codes for the CLI."""

    OK = 0
    CONFIG_ERROR = 1
    HTTP_ERROR = 2
    VALIDATION_ERROR = 3
    IO_ERROR = 4


CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
    resolve_path=True,
    help="Path to a YAML configuration file.",
)


def _build_overrides(
    *,
    output_dir: Path | None,
    workers: int | None,
    dry_run: bool | None,
    log_level: str | None,
    assignments: list[str],
) -> dict:
    overrides: dict = {}
    if output_dir is not None:
        overrides.setdefault("io", {}).setdefault("output", {})["dir"] = str(output_dir)
    if workers is not None:
        overrides.setdefault("runtime", {})["workers"] = workers
    if dry_run is not None:
        overrides.setdefault("runtime", {})["dry_run"] = dry_run
    if log_level is not None:
        overrides.setdefault("logging", {})["level"] = log_level.upper()
    return _merge_dicts(overrides, parse_cli_overrides(assignments))


@app.command("fetch")
def fetch_command(
    provider: str = typer.Argument(..., help="Data provider, e.g. TriTrypDB"),
    organisms: List[str] = typer.Argument(..., help="Organism names as used by the provider"),
    tables: List[str] = typer.Option(..., "--table", "-t", help="Sub-table to retrieve (repeatable)"),
    variant: str = typer.Option("attributes", "--variant", help="Query variant: attributes or table"),
    config: Optional[Path] = CONFIG_OPTION,
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Directory for output tables"),
    workers: Optional[int] = typer.Option(None, "--workers", min=1, help="Organisms fetched in parallel"),
    dry_run: Optional[bool] = typer.Option(None, "--dry-run/--no-dry-run", help="Skip writing outputs"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
    assignments: List[str] = typer.Option([], "--set", help="Config override KEY=VALUE (dotted keys)"),
) -> None:
    """Fetch TABLES for each ORGANISM of PROVIDER and write flat tables."""
    if variant not in ("attributes", "table"):
        raise typer.BadParameter("variant must be 'attributes' or 'table'", param_hint="--variant")

    try:
        overrides = _build_overrides(
            output_dir=output_dir, workers=workers, dry_run=dry_run, log_level=log_level, assignments=assignments
        )
        cfg = load_config(config, overrides=overrides)
    except ConfigLoadError as exc:
        typer.secho(f"Configuration error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR) from exc

    configure_logging(
        cfg.logging.level,
        console_format=cfg.logging.console.format,
        file_enabled=cfg.logging.file.enabled,
        log_file=cfg.logging.file.path,
        max_bytes=cfg.logging.file.max_bytes,
        backup_count=cfg.logging.file.backup_count,
    )
    set_run_context(run_id=generate_run_id(), stage="fetch")

    pipeline = AnnotationPipeline(cfg)
    try:
        results = pipeline.run(provider, organisms, tables, variant=variant)
    except (NetworkError, UnsupportedFormatError) as exc:
        typer.secho(f"HTTP error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=ExitCode.HTTP_ERROR) from exc
    except (DataError, ValidationError) as exc:
        typer.secho(f"Validation error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=ExitCode.VALIDATION_ERROR) from exc

    try:
        pipeline.write(results)
    except OSError as exc:
        typer.secho(f"I/O error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=ExitCode.IO_ERROR) from exc

    summary = Table(title=f"{provider} annotation tables")
    summary.add_column("Organism")
    summary.add_column("Table")
    summary.add_column("Rows", justify="right")
    summary.add_column("Status")
    summary.add_column("Output")
    for result in results:
        status = "degraded" if result.degraded else ("empty" if result.frame.empty else "ok")
        summary.add_row(result.organism, result.table, str(result.rows), status, str(result.path or "-"))
    console.print(summary)


@app.command("providers")
def providers_command() -> None:
    """List known providers and their service prefixes."""
    table = Table(title="EuPathDB providers")
    table.add_column("Provider")
    table.add_column("Prefix")
    for name, prefix in sorted(PROVIDER_PREFIXES.items()):
        table.add_row(name, prefix)
    console.print(table)


@app.command("parse-text")
def parse_text_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Organism text dump (.txt or .gz)"),
    table_name: str = typer.Option(..., "--table", "-t", help="Table section to extract"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the table as CSV"),
) -> None:
    """Extract one table section from an organism text dump."""
    try:
        frame = parse_text_table(path, table_name)
        if output is not None:
            write_flat_table(frame, output)
    except OSError as exc:
        typer.secho(f"I/O error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=ExitCode.IO_ERROR) from exc
    typer.echo(f"Parsed {len(frame)} rows from {table_name} table")


def main() -> None:
    """Entry point for console script."""
    app()


if __name__ == "__main__":
    main()
