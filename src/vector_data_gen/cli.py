"""Command-line interface for vector-data-gen.

Usage::

    # One 512MB file of 1024-dim vectors
    vector-data-gen generate --verbose

    # 100MB zstd files, 4 worker processes
    vector-data-gen generate -t 200000 -f 100MB -c zstd -w 4

    # Custom shape in another directory
    vector-data-gen generate --vector-dim 768 --scalar-len 64 -o ./custom_data

    # Check what was written
    vector-data-gen verify -o ./custom_data --vector-dim 768 --scalar-len 64 -t 1000

The script is installed as ``vector-data-gen`` when the package is
installed via pip.
"""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_FILE_SIZE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_PREFIX,
    DEFAULT_SCALAR_LEN,
    DEFAULT_SEED,
    DEFAULT_TOTAL_ROWS,
    DEFAULT_VECTOR_DIM,
    CompressionType,
    Configuration,
    parse_file_size,
)
from .estimator import bytes_per_row, estimate_rows_per_file
from .exceptions import ConfigurationError, EncodingError, OutputIOError
from .logging_config import get_logger, log_error_with_context, setup_logging
from .pipeline import FileSplitWriter
from .progress import LoggingObserver, RichProgressObserver, format_bytes
from .verifier import verify_output

console = Console()


def _build_config(**kwargs) -> Configuration:
    try:
        return Configuration(**kwargs)
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e


def _output_dir_option(func):
    return click.option(
        "-o",
        "--output-dir",
        default=str(DEFAULT_OUTPUT_DIR),
        show_default=True,
        type=click.Path(file_okay=False, path_type=Path),
        help="Directory holding the generated files.",
    )(func)


def _shape_options(func):
    for option in reversed(
        [
            click.option(
                "-t",
                "--total-rows",
                default=DEFAULT_TOTAL_ROWS,
                show_default=True,
                type=int,
                help="Total number of rows to generate.",
            ),
            click.option(
                "--vector-dim",
                default=DEFAULT_VECTOR_DIM,
                show_default=True,
                type=int,
                help="Vector dimension (float32 values per row).",
            ),
            click.option(
                "--scalar-len",
                default=DEFAULT_SCALAR_LEN,
                show_default=True,
                type=int,
                help="Scalar string length in bytes.",
            ),
            click.option(
                "-p",
                "--prefix",
                default=DEFAULT_PREFIX,
                show_default=True,
                help="File name prefix; files are named <prefix>-<index>.parquet.",
            ),
        ]
    ):
        func = option(func)
    return func


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging with detailed debug information.",
)
@click.version_option(package_name="vector-data-gen")
@click.pass_context
def main(ctx: click.Context, verbose: bool = False) -> None:
    """Generate reproducible vector + scalar test data as Parquet files."""
    setup_logging(verbose=verbose, log_level="DEBUG" if verbose else "INFO")
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@main.command()
@_output_dir_option
@_shape_options
@click.option(
    "-f",
    "--file-size",
    default=DEFAULT_FILE_SIZE,
    show_default=True,
    help="Target size per file, e.g. '512MB', '1GB', '64MiB'.",
)
@click.option(
    "-c",
    "--compression",
    default=CompressionType.SNAPPY.value,
    show_default=True,
    type=click.Choice([c.value for c in CompressionType], case_sensitive=False),
    help="Compression codec for the Parquet files.",
)
@click.option(
    "--seed",
    default=DEFAULT_SEED,
    show_default=True,
    type=click.IntRange(min=0),
    help="Random seed for reproducible data; file i uses seed + i.",
)
@click.option(
    "-b",
    "--batch-size",
    default=DEFAULT_BATCH_SIZE,
    show_default=True,
    type=int,
    help="Rows generated and written per batch.",
)
@click.option(
    "-w",
    "--workers",
    default=1,
    show_default=True,
    type=click.IntRange(min=1),
    help="Worker processes producing files in parallel.",
)
@click.option(
    "--no-progress",
    is_flag=True,
    help="Disable the progress bar.",
)
@click.pass_context
def generate(
    ctx: click.Context,
    output_dir: Path,
    total_rows: int,
    vector_dim: int,
    scalar_len: int,
    prefix: str,
    file_size: str,
    compression: str,
    seed: int,
    batch_size: int,
    workers: int,
    no_progress: bool = False,
) -> None:
    """Generate Parquet files of bounded size until --total-rows are written."""
    verbose = ctx.obj.get("verbose", False)
    logger = get_logger(__name__)

    try:
        target_file_size = parse_file_size(file_size)
    except ConfigurationError as e:
        raise click.BadParameter(str(e), param_hint="--file-size") from e

    config = _build_config(
        vector_dim=vector_dim,
        scalar_len=scalar_len,
        target_file_size=target_file_size,
        compression=compression.lower(),
        seed=seed,
        batch_size=batch_size,
        total_rows=total_rows,
        output_dir=output_dir,
        prefix=prefix,
    )

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        click.echo(f"✗ Failed to create output directory {output_dir}: {e}", err=True)
        raise SystemExit(1) from e

    rows_per_file = estimate_rows_per_file(config)
    if verbose:
        table = Table(title="Configuration", show_header=False)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        for key, value in config.describe().items():
            table.add_row(key, str(value))
        table.add_row("Estimated bytes per row", f"{bytes_per_row(config):,}")
        table.add_row("Estimated rows per file", f"{rows_per_file:,}")
        table.add_row("Workers", str(workers))
        console.print(table)

    writer = FileSplitWriter(config, observers=[LoggingObserver()])

    try:
        if no_progress:
            summary = writer.run(workers=workers)
        else:
            # INFO lines would break the live progress bar
            setup_logging(verbose=verbose, log_level="DEBUG" if verbose else "WARNING")
            with RichProgressObserver(total_rows, console=console) as progress:
                writer.observers.append(progress)
                summary = writer.run(workers=workers)
            setup_logging(verbose=verbose, log_level="DEBUG" if verbose else "INFO")
    except (OutputIOError, EncodingError) as e:
        state = writer.state
        log_error_with_context(
            e,
            {
                "files_written": state.files_written,
                "rows_written": state.total_rows_written,
            },
        )
        click.echo(f"✗ Generation failed: {e}", err=True)
        click.echo(
            f"  {state.files_written} complete file(s) left in {output_dir}", err=True
        )
        raise SystemExit(1) from e

    total_bytes = sum(report.file_byte_size for report in summary.files)
    logger.debug(f"Run summary: {summary.model_dump(exclude={'files'})}")
    click.echo(f"✓ Generated {summary.total_rows:,} rows in {summary.total_files} file(s)")
    click.echo(f"  Output directory: {output_dir}")
    click.echo(f"  Total size: {format_bytes(total_bytes)}")
    click.echo(f"  Total time: {summary.total_elapsed:.2f}s")


@main.command()
@_output_dir_option
@_shape_options
@click.option(
    "--no-total-check",
    is_flag=True,
    help="Do not compare the summed row count with --total-rows.",
)
def verify(
    output_dir: Path,
    total_rows: int,
    vector_dim: int,
    scalar_len: int,
    prefix: str,
    no_total_check: bool = False,
) -> None:
    """Check generated files: schema, vector payloads, scalars and row totals."""
    config = _build_config(
        vector_dim=vector_dim,
        scalar_len=scalar_len,
        total_rows=total_rows,
        output_dir=output_dir,
        prefix=prefix,
    )
    try:
        result = verify_output(config, check_total=not no_total_check)
    except OutputIOError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from e

    table = Table(title=f"Files in {output_dir}")
    table.add_column("File", style="cyan")
    table.add_column("Rows", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Status")
    for check in result.files:
        status = "[green]ok[/green]" if check.ok else f"[red]{'; '.join(check.errors)}[/red]"
        table.add_row(
            check.path.name,
            f"{check.rows:,}",
            format_bytes(check.file_byte_size),
            status,
        )
    console.print(table)

    for error in result.errors:
        click.echo(f"✗ {error}", err=True)
    if not result.ok:
        raise SystemExit(1)
    click.echo(f"✓ {len(result.files)} file(s), {result.total_rows:,} rows verified")


if __name__ == "__main__":
    main()
