"""Reproducible vector + scalar Parquet test data of bounded file size."""

from .batch import VECTOR_SCHEMA, BatchAssembler
from .config import CompressionType, Configuration, parse_file_size
from .estimator import bytes_per_row, estimate_rows_per_file
from .exceptions import (
    ConfigurationError,
    EncodingError,
    OutputIOError,
    VectorDataGenError,
)
from .generator import RowGenerator
from .pipeline import FileReport, FileSplitWriter, RunState, RunSummary
from .table_writer import ParquetTableWriter, TableWriter

__version__ = "0.1.0"

__all__ = [
    "VECTOR_SCHEMA",
    "BatchAssembler",
    "CompressionType",
    "Configuration",
    "ConfigurationError",
    "EncodingError",
    "FileReport",
    "FileSplitWriter",
    "OutputIOError",
    "ParquetTableWriter",
    "RowGenerator",
    "RunState",
    "RunSummary",
    "TableWriter",
    "VectorDataGenError",
    "bytes_per_row",
    "estimate_rows_per_file",
    "parse_file_size",
]
