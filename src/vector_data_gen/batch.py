"""Columnar batch assembly."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pyarrow as pa

from .exceptions import EncodingError

if TYPE_CHECKING:
    from .generator import RowGenerator

VECTOR_COLUMN = "vector"
SCALAR_COLUMN = "scalar"

# Vectors are stored as opaque binary payloads rather than list<float32>
VECTOR_SCHEMA = pa.schema(
    [
        pa.field(VECTOR_COLUMN, pa.binary(), nullable=False),
        pa.field(SCALAR_COLUMN, pa.string(), nullable=False),
    ]
)


class BatchAssembler:
    """Packs rows drawn from a :class:`RowGenerator` into record batches."""

    def __init__(self, schema: pa.Schema = VECTOR_SCHEMA):
        self.schema = schema

    def assemble(self, generator: RowGenerator, count: int) -> pa.RecordBatch:
        """Draw ``count`` rows from ``generator`` and return them as one batch.

        Rows keep their draw order. ``count == 0`` returns an empty batch with
        the full schema.

        Raises:
            ValueError: If ``count`` is negative
            EncodingError: If Arrow rejects the columns
        """
        if count < 0:
            raise ValueError(f"Batch row count must be >= 0, got {count}")

        vectors: list[bytes] = []
        scalars: list[str] = []
        for _ in range(count):
            vector, scalar = generator.next_row()
            vectors.append(vector)
            scalars.append(scalar)

        try:
            columns = [
                pa.array(vectors, type=self.schema.field(VECTOR_COLUMN).type),
                pa.array(scalars, type=self.schema.field(SCALAR_COLUMN).type),
            ]
            return pa.RecordBatch.from_arrays(columns, schema=self.schema)
        except (pa.ArrowInvalid, pa.ArrowTypeError) as e:
            raise EncodingError(
                f"Failed to build a {count}-row batch for schema {self.schema}: {e}"
            ) from e
