"""Rows-per-file estimation.

The estimate is taken before compression and is never corrected against the
real file size while writing, so compressed files usually end up smaller than
the target. Random float payloads barely compress, which keeps the gap small
for the vector column.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import Configuration

FLOAT32_BYTES = 4

# Per-value bookkeeping in the columnar encoding (length prefix / offsets)
BINARY_OVERHEAD_BYTES = 8
STRING_OVERHEAD_BYTES = 8


def bytes_per_row(config: Configuration) -> int:
    """Estimated uncompressed size of one row."""
    vector_bytes = config.vector_dim * FLOAT32_BYTES + BINARY_OVERHEAD_BYTES
    scalar_bytes = config.scalar_len + STRING_OVERHEAD_BYTES
    return vector_bytes + scalar_bytes


def estimate_rows_per_file(config: Configuration) -> int:
    """Number of rows that fit in ``target_file_size``, never less than 1."""
    return max(1, config.target_file_size // bytes_per_row(config))
