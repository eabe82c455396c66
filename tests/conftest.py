"""Shared fixtures for the vector-data-gen test suite."""

import sys
from pathlib import Path

import pytest
from loguru import logger

from vector_data_gen.config import CompressionType, Configuration
from vector_data_gen.table_writer import ParquetTableWriter


class RecordingTableWriter(ParquetTableWriter):
    """Parquet writer that remembers the row count of every batch per file."""

    def __init__(self):
        super().__init__()
        self.batches: dict[str, list[int]] = {}

    def write(self, session, batch):
        self.batches.setdefault(session.path.name, []).append(batch.num_rows)
        super().write(session, batch)


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI tests attach sinks to streams that CliRunner closes afterwards."""
    yield
    logger.configure(extra={})
    logger.remove()
    logger.add(sys.stderr, level="INFO")


@pytest.fixture
def recording_writer():
    return RecordingTableWriter()


@pytest.fixture
def small_config(tmp_path: Path):
    """The 4-dim / 8-char configuration: 40 estimated bytes per row, 25 rows per file."""

    def build(**overrides) -> Configuration:
        params = {
            "vector_dim": 4,
            "scalar_len": 8,
            "target_file_size": 1000,
            "compression": CompressionType.SNAPPY,
            "seed": 1,
            "batch_size": 2,
            "total_rows": 5,
            "output_dir": tmp_path / "out",
            "prefix": "data",
        }
        params.update(overrides)
        Path(params["output_dir"]).mkdir(parents=True, exist_ok=True)
        return Configuration(**params)

    return build
