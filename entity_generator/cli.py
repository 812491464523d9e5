"""
Command-line interface for batch entity generation.

Reads a SQL script, generates the sources of every CREATE TABLE statement
in it and writes them below the output directory.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Prompt
from rich.syntax import Syntax
from rich.table import Table

from .codegen import GenerationResult, __version__, generate_from_ddl
from .codegen.core.config import (
    ConfigError,
    GeneratorConfig,
    get_config,
    init_config_file,
    load_config,
)
from .codegen.languages.java import TransformContext
from .logging_config import get_logger, setup_logging
from .utils import (
    DDLLoaderError,
    OutputError,
    load_ddl_file,
    prepare_output_dir,
    split_create_table_statements,
    write_generated_file,
)

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich console
console = Console()


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="entity-generator",
        description="Generate JPA entities, repositories and VOs from "
        "PostgreSQL CREATE TABLE statements",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  entity-generator schema.sql
  entity-generator schema.sql -o build/generated --show-code
  entity-generator --init-config
        """.strip(),
    )

    parser.add_argument("sql_file", nargs="?", help="SQL file with CREATE TABLE DDL")
    parser.add_argument(
        "--output",
        "-o",
        metavar="DIR",
        help="Output directory (default: output_dir from the configuration)",
    )
    parser.add_argument(
        "--config", metavar="FILE", help="Configuration file (ini or JSON)"
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write the default configuration file and exit",
    )
    parser.add_argument(
        "--keep-output",
        action="store_true",
        help="Don't clear the output directory before writing",
    )
    parser.add_argument(
        "--show-code",
        action="store_true",
        help="Print the generated sources",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    parser.add_argument("--log-file", metavar="FILE", help="Write a debug log file")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser


def _log_level(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build configuration from the config file and CLI arguments."""
    try:
        config = load_config(config_file=args.config) if args.config else get_config()
    except ConfigError as e:
        raise CLIError(f"Invalid configuration: {e}") from e

    if args.output:
        config = replace(config, output_dir=args.output)
    return config


def _resolve_sql_file(args: argparse.Namespace) -> Path:
    if args.sql_file:
        return Path(args.sql_file)

    answer = Prompt.ask("📄 Path to the SQL file").strip()
    if not answer:
        raise CLIError("No SQL file given")
    return Path(answer)


def _load_statements(sql_file: Path) -> list[str]:
    try:
        sql = load_ddl_file(sql_file)
    except (FileNotFoundError, DDLLoaderError) as e:
        raise CLIError(str(e)) from e

    statements = split_create_table_statements(sql)
    if not statements:
        raise CLIError(f"No CREATE TABLE statement found in {sql_file}")
    return statements


def _generate_all(
    statements: list[str], config: GeneratorConfig
) -> list[GenerationResult]:
    """Generate each table in turn under a spinner."""
    context = TransformContext.from_config(config)
    results = []

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Generating...", total=len(statements))
        for index, ddl in enumerate(statements, start=1):
            progress.update(
                task, description=f"Generating table {index}/{len(statements)}"
            )
            results.append(generate_from_ddl(ddl, config, context))
            progress.advance(task)

    return results


def _write_results(results: list[GenerationResult], output_dir: Path) -> int:
    """Write every generated file; returns the number of write failures."""
    failures = 0
    for result in results:
        if not result.success:
            continue
        for generated in result.files:
            try:
                write_generated_file(generated, output_dir)
            except OutputError as e:
                failures += 1
                console.print(f"[red]✗[/red] {e}")
    return failures


def _show_code(results: list[GenerationResult]):
    for result in results:
        for generated in result.files:
            console.print()
            console.print(
                Panel(
                    Syntax(generated.code, "java", theme="monokai"),
                    title=f"📝 {generated.package}.{generated.type_name}",
                    border_style="blue",
                )
            )


def _print_summary(results: list[GenerationResult]):
    table = Table(
        title="📋 Generation Summary", box=box.ROUNDED, title_style="bold cyan"
    )
    table.add_column("Table", style="bold")
    table.add_column("Status")
    table.add_column("Files", style="cyan")
    table.add_column("Notes", style="dim")

    for result in results:
        if result.success:
            status = "[green]✓ ok[/green]"
            notes = "; ".join(result.warnings)
            if result.metadata.get("partitioned"):
                notes = "partitioned" + (f"; {notes}" if notes else "")
        else:
            status = "[red]✗ failed[/red]"
            notes = result.error_message or ""
        table.add_row(
            result.table_name,
            status,
            ", ".join(f.type_name for f in result.files),
            notes,
        )

    console.print()
    console.print(table)


def run(args: argparse.Namespace) -> int:
    """
    Run the batch generation described by parsed arguments.

    Returns:
        Exit code (0 when every table succeeded)
    """
    if args.init_config:
        path = init_config_file(args.config)
        console.print(f"[green]✓[/green] Configuration file: {path}")
        return 0

    config = _build_config(args)
    sql_file = _resolve_sql_file(args)
    statements = _load_statements(sql_file)
    console.print(f"📄 Loaded: {sql_file} ({len(statements)} table(s))")

    try:
        output_dir = prepare_output_dir(config.output_dir, keep=args.keep_output)
    except OutputError as e:
        raise CLIError(str(e)) from e

    results = _generate_all(statements, config)
    write_failures = _write_results(results, output_dir)

    if args.show_code:
        _show_code(results)
    _print_summary(results)

    succeeded = sum(1 for r in results if r.success)
    failed = len(results) - succeeded
    console.print(
        f"\n[green]{succeeded} succeeded[/green], [red]{failed} failed[/red]; "
        f"output in {output_dir}"
    )
    logger.info("Finished: %d succeeded, %d failed", succeeded, failed)

    if failed or write_failures:
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Console script entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(_log_level(args.verbose), log_file=args.log_file)

    try:
        return run(args)
    except CLIError as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        logger.debug("CLI error", exc_info=True)
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
