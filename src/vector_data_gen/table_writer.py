"""Table file writers.

The pipeline talks to a :class:`TableWriter`; on-disk details such as row-group
sizing, dictionary encoding and the footer stay inside the implementation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

import pyarrow as pa
import pyarrow.parquet as pq

from .config import CompressionType
from .exceptions import EncodingError, OutputIOError
from .logging_config import get_logger

MAX_ROW_GROUP_SIZE = 100_000

logger = get_logger(__name__)


class TableWriter(Protocol):
    """Session-based writer for one table file at a time."""

    def open(
        self, path: Path, schema: pa.Schema, compression: CompressionType
    ) -> Any: ...

    def write(self, session: Any, batch: pa.RecordBatch) -> None: ...

    def close(self, session: Any) -> None: ...

    def abort(self, session: Any) -> None: ...


class ParquetSession:
    """An open Parquet file and the path it writes to."""

    def __init__(self, path: Path, writer: pq.ParquetWriter):
        self.path = path
        self.writer = writer
        self.rows_written = 0
        self.closed = False


class ParquetTableWriter:
    """Writes record batches to Parquet files with ``pyarrow.parquet``."""

    def __init__(
        self,
        use_dictionary: bool = True,
        max_row_group_size: int = MAX_ROW_GROUP_SIZE,
    ):
        self.use_dictionary = use_dictionary
        self.max_row_group_size = max_row_group_size

    def open(
        self, path: Path, schema: pa.Schema, compression: CompressionType
    ) -> ParquetSession:
        path = Path(path)
        try:
            writer = pq.ParquetWriter(
                str(path),
                schema,
                compression=CompressionType(compression).codec,
                use_dictionary=self.use_dictionary,
            )
        except (OSError, pa.ArrowException) as e:
            raise OutputIOError(f"Failed to create file: {e}", path=path) from e

        logger.debug(f"Opened {path.name} (compression={CompressionType(compression).value})")
        return ParquetSession(path, writer)

    def write(self, session: ParquetSession, batch: pa.RecordBatch) -> None:
        if session.closed:
            raise OutputIOError("Write to a closed file", path=session.path)
        if not batch.schema.equals(session.writer.schema):
            raise EncodingError(
                f"Batch schema {batch.schema} does not match file schema {session.writer.schema}"
            )
        if batch.num_rows == 0:
            return

        try:
            session.writer.write_batch(batch, row_group_size=self.max_row_group_size)
        except (OSError, pa.ArrowException) as e:
            raise OutputIOError(f"Failed to write batch: {e}", path=session.path) from e
        session.rows_written += batch.num_rows

    def close(self, session: ParquetSession) -> None:
        if session.closed:
            return
        session.closed = True
        try:
            session.writer.close()
        except (OSError, pa.ArrowException) as e:
            raise OutputIOError(f"Failed to close file: {e}", path=session.path) from e
        logger.debug(f"Closed {session.path.name} ({session.rows_written:,} rows)")

    def abort(self, session: ParquetSession) -> None:
        """Release the file handle after a failure; the file is left as is."""
        if session.closed:
            return
        session.closed = True
        try:
            session.writer.close()
        except (OSError, pa.ArrowException) as e:
            logger.warning(f"Could not release {session.path} after failure: {e}")
