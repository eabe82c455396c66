"""Progress observers for :class:`~vector_data_gen.pipeline.FileSplitWriter`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from .logging_config import get_logger, log_performance

if TYPE_CHECKING:
    from .pipeline import FileReport, RunSummary


def format_bytes(num_bytes: float) -> str:
    """Decimal, human readable byte count (``1.5 MB``)."""
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if abs(num_bytes) < 1000 or unit == "TB":
            return f"{num_bytes:.0f} {unit}" if unit == "B" else f"{num_bytes:.2f} {unit}"
        num_bytes /= 1000
    return f"{num_bytes:.2f} TB"


class LoggingObserver:
    """Logs each finished file and the run summary."""

    def __init__(self):
        self.logger = get_logger(__name__)

    def on_file_closed(self, report: FileReport) -> None:
        self.logger.info(
            f"Generated {report.path.name}: {report.rows_written:,} rows "
            f"({format_bytes(report.file_byte_size)}) in {report.elapsed:.2f}s "
            f"({report.rows_per_second:,.0f} rows/sec)"
        )

    def on_run_complete(self, summary: RunSummary) -> None:
        log_performance(
            "Data generation",
            summary.total_elapsed,
            rows=summary.total_rows,
            files=summary.total_files,
        )


class RichProgressObserver:
    """Rich progress bar over the total number of rows.

    Use as a context manager so the bar is stopped even when the run fails::

        with RichProgressObserver(config.total_rows) as progress:
            FileSplitWriter(config, observers=[progress]).run()
    """

    def __init__(self, total_rows: int, console: Console | None = None):
        self.total_rows = total_rows
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=console,
        )
        self._task = None

    def __enter__(self) -> RichProgressObserver:
        self.progress.start()
        self._task = self.progress.add_task("Generating rows", total=self.total_rows)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.progress.stop()

    def on_file_closed(self, report: FileReport) -> None:
        if self._task is None:
            return
        self.progress.update(
            self._task,
            advance=report.rows_written,
            description=f"Wrote {report.path.name}",
        )

    def on_run_complete(self, summary: RunSummary) -> None:
        if self._task is None:
            return
        self.progress.update(
            self._task,
            completed=summary.total_rows,
            description="Data generation complete!",
        )
