"""Bounded-size multi-file generation.

:class:`FileSplitWriter` turns a :class:`Configuration` into a sequence of
Parquet files. Each file is produced by the cycle

    Opening(i) -> Writing(i) -> Closing(i)

and the run moves to ``Done`` as soon as the requested total is written. Every
file draws its rows from a generator seeded with ``seed + i``, so a file's
content depends only on the configuration and its index. That is what allows
:meth:`FileSplitWriter.run` to hand whole files to worker processes without
changing any output byte.
"""

from __future__ import annotations

import multiprocessing
import sys
import time
from concurrent.futures import FIRST_EXCEPTION, ProcessPoolExecutor, wait
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, ConfigDict

from .batch import BatchAssembler
from .estimator import estimate_rows_per_file
from .exceptions import OutputIOError
from .generator import RowGenerator
from .logging_config import get_logger, log_error_with_context
from .table_writer import ParquetTableWriter, TableWriter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .config import Configuration

logger = get_logger(__name__)


class WriterPhase(str, Enum):
    IDLE = "idle"
    OPENING = "opening"
    WRITING = "writing"
    CLOSING = "closing"
    DONE = "done"


class FileReport(BaseModel):
    """Sent to observers after a file has been closed."""

    model_config = ConfigDict(frozen=True)

    file_index: int
    path: Path
    rows_written: int
    elapsed: float
    file_byte_size: int

    @property
    def rows_per_second(self) -> float:
        return self.rows_written / self.elapsed if self.elapsed > 0 else 0.0


class RunSummary(BaseModel):
    """Sent to observers, and returned by ``run()``, once all rows are written."""

    model_config = ConfigDict(frozen=True)

    total_files: int
    total_rows: int
    total_elapsed: float
    rows_per_file: int
    files: list[FileReport]


class RunState(BaseModel):
    """Progress of a run. Only the writer loop updates it."""

    remaining: int = 0
    total_rows_written: int = 0
    files_written: int = 0
    phase: WriterPhase = WriterPhase.IDLE
    current_file: int | None = None


class ProgressObserver(Protocol):
    def on_file_closed(self, report: FileReport) -> None: ...

    def on_run_complete(self, summary: RunSummary) -> None: ...


class FileSplitWriter:
    """Writes ``config.total_rows`` rows across files of bounded size."""

    def __init__(
        self,
        config: Configuration,
        table_writer: TableWriter | None = None,
        assembler: BatchAssembler | None = None,
        observers: Iterable[ProgressObserver] = (),
    ):
        self.config = config
        self.table_writer = table_writer or ParquetTableWriter()
        self.assembler = assembler or BatchAssembler()
        self.observers = list(observers)
        self.rows_per_file = estimate_rows_per_file(config)
        self._state = RunState(remaining=config.total_rows)

    @property
    def state(self) -> RunState:
        return self._state.model_copy()

    def plan(self) -> list[tuple[int, int]]:
        """Return ``(file_index, rows)`` for every file the run will write."""
        files = []
        remaining = self.config.total_rows
        file_index = 0
        while remaining > 0:
            rows = min(self.rows_per_file, remaining)
            files.append((file_index, rows))
            remaining -= rows
            file_index += 1
        return files

    def run(self, workers: int = 1) -> RunSummary:
        """Generate every file, then report the summary to observers.

        Args:
            workers: Number of processes producing files. ``1`` writes all
                files sequentially in this process. When a worker fails, the run
                raises without waiting; files other workers had already started
                are still completed, so higher-index files may exist on disk.

        Raises:
            OutputIOError: A file could not be created, written or closed
            EncodingError: A batch did not match the table schema
        """
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        if self._state.phase is not WriterPhase.IDLE:
            raise RuntimeError("FileSplitWriter.run() can only be called once")

        logger.info(
            f"Writing {self.config.total_rows:,} rows, "
            f"~{self.rows_per_file:,} rows per file, batch size {self.config.batch_size:,}"
        )
        start = time.perf_counter()

        if workers == 1 or len(self.plan()) == 1:
            reports = self._run_sequential()
        else:
            reports = self._run_parallel(workers)

        self._state.phase = WriterPhase.DONE
        self._state.current_file = None
        summary = RunSummary(
            total_files=len(reports),
            total_rows=self._state.total_rows_written,
            total_elapsed=time.perf_counter() - start,
            rows_per_file=self.rows_per_file,
            files=sorted(reports, key=lambda report: report.file_index),
        )
        for observer in self.observers:
            observer.on_run_complete(summary)
        return summary

    def _run_sequential(self) -> list[FileReport]:
        reports = []
        file_index = 0
        while self._state.remaining > 0:
            rows = min(self.rows_per_file, self._state.remaining)
            report = self.write_file(file_index, rows)
            self._record(report)
            reports.append(report)
            file_index += 1
        return reports

    def _run_parallel(self, workers: int) -> list[FileReport]:
        plan = self.plan()
        logger.info(f"Starting parallel generation of {len(plan)} files with {workers} workers")
        reports = []
        # spawn keeps workers free of the parent's open file handles and threads
        context = multiprocessing.get_context("spawn")
        executor = ProcessPoolExecutor(
            max_workers=min(workers, len(plan)),
            mp_context=context,
            initializer=_init_worker,
        )
        try:
            pending = {
                executor.submit(
                    _write_file_in_worker,
                    self.config,
                    self.table_writer,
                    self.assembler,
                    file_index,
                    rows,
                ): file_index
                for file_index, rows in plan
            }
            self._state.phase = WriterPhase.WRITING
            while pending:
                done, _ = wait(pending, return_when=FIRST_EXCEPTION)
                for future in done:
                    file_index = pending.pop(future)
                    error = future.exception()
                    if error is not None:
                        log_error_with_context(
                            error,
                            {
                                "file_index": file_index,
                                "path": str(self.config.file_path(file_index)),
                            },
                        )
                        raise error
                    report = future.result()
                    self._record(report)
                    reports.append(report)
        except BaseException:
            # Queued files are dropped; files already running in a worker still
            # finish in the background, so higher-index files may appear on disk
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return reports

    def write_file(self, file_index: int, rows: int) -> FileReport:
        """Produce file ``file_index`` holding exactly ``rows`` rows."""
        if rows < 1:
            raise ValueError(f"A file must hold at least one row, got {rows}")

        path = self.config.file_path(file_index)
        start = time.perf_counter()

        self._state.phase = WriterPhase.OPENING
        self._state.current_file = file_index
        file_config = self.config.for_file(file_index)
        generator = RowGenerator.from_config(file_config)
        logger.info(f"Generating file {file_index + 1}: {path} ({rows:,} rows, seed {file_config.seed})")

        try:
            session = self.table_writer.open(
                path, self.assembler.schema, self.config.compression
            )
        except OutputIOError as e:
            self._fail(e, file_index, path)
            raise

        try:
            self._state.phase = WriterPhase.WRITING
            needed = rows
            batch_number = 0
            while needed > 0:
                batch_rows = min(self.config.batch_size, needed)
                batch = self.assembler.assemble(generator, batch_rows)
                self.table_writer.write(session, batch)
                needed -= batch.num_rows
                batch_number += 1
                logger.debug(
                    f"File {file_index}: batch {batch_number} wrote {batch.num_rows:,} rows, {needed:,} left"
                )

            self._state.phase = WriterPhase.CLOSING
            self.table_writer.close(session)
        except Exception as e:
            self.table_writer.abort(session)
            self._fail(e, file_index, path)
            raise

        try:
            file_byte_size = path.stat().st_size
        except OSError as e:
            raise OutputIOError(
                f"Closed file is missing: {e}", path=path, file_index=file_index
            ) from e

        return FileReport(
            file_index=file_index,
            path=path,
            rows_written=rows,
            elapsed=time.perf_counter() - start,
            file_byte_size=file_byte_size,
        )

    def _fail(self, error: Exception, file_index: int, path: Path) -> None:
        if isinstance(error, OutputIOError) and error.file_index is None:
            error.file_index = file_index
        log_error_with_context(error, {"file_index": file_index, "path": str(path)})

    def _record(self, report: FileReport) -> None:
        self._state.remaining -= report.rows_written
        self._state.total_rows_written += report.rows_written
        self._state.files_written += 1
        for observer in self.observers:
            observer.on_file_closed(report)


def _init_worker() -> None:
    from loguru import logger as worker_logger

    # Keep worker processes quiet so they do not garble the progress display
    worker_logger.remove()
    worker_logger.add(
        sys.stderr,
        level="WARNING",
        format="{time:HH:mm:ss} | {level: <8} | {message}",
        colorize=True,
    )


def _write_file_in_worker(
    config: Configuration,
    table_writer: TableWriter,
    assembler: BatchAssembler,
    file_index: int,
    rows: int,
) -> FileReport:
    writer = FileSplitWriter(config, table_writer=table_writer, assembler=assembler)
    return writer.write_file(file_index, rows)
