"""Read generated files back and check them against the configuration."""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import pyarrow as pa
import pyarrow.parquet as pq
from pydantic import BaseModel, Field

from .batch import SCALAR_COLUMN, VECTOR_COLUMN, VECTOR_SCHEMA
from .config import FILE_EXTENSION
from .exceptions import OutputIOError
from .generator import ALPHANUMERIC, decode_vector
from .logging_config import get_logger

if TYPE_CHECKING:
    from .config import Configuration

logger = get_logger(__name__)

_ALPHABET = frozenset(ALPHANUMERIC)


class FileCheck(BaseModel):
    """Outcome of checking one file."""

    path: Path
    rows: int = 0
    file_byte_size: int = 0
    errors: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class VerificationResult(BaseModel):
    files: list[FileCheck] = Field(default_factory=list)
    total_rows: int = 0
    expected_rows: int | None = None
    errors: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors and all(check.ok for check in self.files)


def find_output_files(output_dir: Path, prefix: str) -> list[Path]:
    """Files named exactly ``{prefix}-{index:08d}.parquet``, ordered by index."""
    pattern = re.compile(rf"{re.escape(prefix)}-(\d{{8,}})\.{FILE_EXTENSION}")
    indexed = []
    for path in Path(output_dir).iterdir():
        match = pattern.fullmatch(path.name)
        if match and path.is_file():
            indexed.append((int(match.group(1)), path))
    return [path for _, path in sorted(indexed)]


def verify_file(path: Path, vector_dim: int, scalar_len: int) -> FileCheck:
    """Check schema, vector payloads and scalar strings of one file."""
    check = FileCheck(path=path, file_byte_size=path.stat().st_size)
    try:
        table = pq.read_table(path)
    except (OSError, pa.ArrowException) as e:
        check.errors.append(f"unreadable: {e}")
        return check

    check.rows = table.num_rows
    if not table.schema.remove_metadata().equals(VECTOR_SCHEMA):
        check.errors.append(f"schema mismatch: {table.schema}")
        return check

    vector_bytes = vector_dim * 4
    for row, payload in enumerate(table.column(VECTOR_COLUMN).to_pylist()):
        if len(payload) != vector_bytes:
            check.errors.append(
                f"row {row}: vector has {len(payload)} bytes, expected {vector_bytes}"
            )
            break
        values = decode_vector(payload)
        # NaN fails both comparisons
        if not np.all((values >= -1.0) & (values < 1.0)):
            check.errors.append(f"row {row}: vector value outside [-1, 1)")
            break

    for row, scalar in enumerate(table.column(SCALAR_COLUMN).to_pylist()):
        if len(scalar) != scalar_len or not _ALPHABET.issuperset(scalar):
            check.errors.append(
                f"row {row}: scalar {scalar!r} is not {scalar_len} alphanumeric characters"
            )
            break

    return check


def verify_output(config: Configuration, check_total: bool = True) -> VerificationResult:
    """Verify every ``{prefix}-{index:08d}.parquet`` file in ``config.output_dir``.

    Problems are collected in the result rather than raised.

    Raises:
        OutputIOError: If the output directory does not exist
    """
    output_dir = Path(config.output_dir)
    if not output_dir.is_dir():
        raise OutputIOError("Output directory not found", path=output_dir)

    result = VerificationResult(expected_rows=config.total_rows if check_total else None)
    paths = find_output_files(output_dir, config.prefix)
    if not paths:
        result.errors.append(f"no {config.prefix}-*.{FILE_EXTENSION} files found")
        return result

    for path in paths:
        check = verify_file(path, config.vector_dim, config.scalar_len)
        logger.debug(f"Checked {path.name}: {check.rows:,} rows, {len(check.errors)} problems")
        result.files.append(check)
        result.total_rows += check.rows

    if check_total and result.total_rows != config.total_rows:
        result.errors.append(
            f"found {result.total_rows:,} rows, expected {config.total_rows:,}"
        )
    return result
