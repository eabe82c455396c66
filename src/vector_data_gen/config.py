"""Generation parameters and human-readable size parsing."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

MAX_SEED = 2**64 - 1

FILE_EXTENSION = "parquet"

DEFAULT_VECTOR_DIM = 1024
DEFAULT_SCALAR_LEN = 32
DEFAULT_FILE_SIZE = "512MB"
DEFAULT_SEED = 42
DEFAULT_BATCH_SIZE = 10_000
DEFAULT_TOTAL_ROWS = 1000
DEFAULT_PREFIX = "data"
DEFAULT_OUTPUT_DIR = Path("./output")

_SIZE_UNITS = {
    "": 1,
    "B": 1,
    "KB": 10**3,
    "MB": 10**6,
    "GB": 10**9,
    "TB": 10**12,
    "KIB": 2**10,
    "MIB": 2**20,
    "GIB": 2**30,
    "TIB": 2**40,
}

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)\s*([A-Za-z]*)\s*$")


class CompressionType(str, Enum):
    """Compression codecs supported for output files."""

    NONE = "none"
    SNAPPY = "snappy"
    GZIP = "gzip"
    LZ4 = "lz4"
    ZSTD = "zstd"

    @property
    def codec(self) -> str:
        """Codec name understood by ``pyarrow.parquet``."""
        return self.value


def parse_file_size(size_str: str) -> int:
    """
    Parse a human-readable size into bytes.

    Decimal units follow SI (``MB`` is 1,000,000 bytes); ``KiB``/``MiB``/
    ``GiB``/``TiB`` are binary. A bare number is a byte count.

    Args:
        size_str: Size string like '512MB', '1.5GB', '64MiB' or '4096'

    Returns:
        Size in bytes

    Raises:
        ConfigurationError: If the string is malformed or not positive
    """
    if size_str is None or not str(size_str).strip():
        raise ConfigurationError("File size must not be empty")

    match = _SIZE_PATTERN.match(str(size_str))
    if not match:
        raise ConfigurationError(
            f"Invalid file size format: {size_str!r}. Use formats like '512MB', '1GB' or '64MiB'"
        )

    number, unit = match.groups()
    multiplier = _SIZE_UNITS.get(unit.upper())
    if multiplier is None:
        raise ConfigurationError(f"Unknown size unit {unit!r} in {size_str!r}")

    size = int(float(number) * multiplier)
    if size <= 0:
        raise ConfigurationError(f"File size must be positive, got {size_str!r}")
    return size


class Configuration(BaseModel):
    """Validated, immutable parameters for one generation run."""

    model_config = ConfigDict(frozen=True)

    vector_dim: int = Field(default=DEFAULT_VECTOR_DIM, gt=0)
    scalar_len: int = Field(default=DEFAULT_SCALAR_LEN, gt=0)
    target_file_size: int = Field(default=512_000_000, gt=0)
    compression: CompressionType = CompressionType.SNAPPY
    seed: int = Field(default=DEFAULT_SEED, ge=0, le=MAX_SEED)
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, gt=0)
    total_rows: int = Field(default=DEFAULT_TOTAL_ROWS, gt=0)
    output_dir: Path = DEFAULT_OUTPUT_DIR
    prefix: str = DEFAULT_PREFIX

    def __init__(self, **data):
        try:
            super().__init__(**data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(x) for x in error['loc']) or 'config'}: {error['msg']}"
                for error in e.errors()
            )
            raise ConfigurationError(f"Invalid configuration: {problems}") from e

    @field_validator("prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("prefix must not be empty")
        if "/" in value or "\\" in value:
            raise ValueError("prefix must not contain path separators")
        return value

    def for_file(self, file_index: int) -> Configuration:
        """Return the variant used for one file, seeded with ``seed + file_index``."""
        if file_index < 0:
            raise ConfigurationError(f"file_index must be >= 0, got {file_index}")
        return self.model_copy(
            update={"seed": (self.seed + file_index) % (MAX_SEED + 1)}
        )

    def file_name(self, file_index: int) -> str:
        return f"{self.prefix}-{file_index:08d}.{FILE_EXTENSION}"

    def file_path(self, file_index: int) -> Path:
        return self.output_dir / self.file_name(file_index)

    def describe(self) -> dict[str, object]:
        """Human-oriented summary used by verbose output."""
        return {
            "Vector dimension": self.vector_dim,
            "Scalar length": f"{self.scalar_len} bytes",
            "Target file size": f"{self.target_file_size:,} bytes",
            "Compression": self.compression.value,
            "Random seed": self.seed,
            "Prefix": self.prefix,
            "Output directory": str(self.output_dir),
            "Total rows to generate": f"{self.total_rows:,}",
            "Batch size": f"{self.batch_size:,}",
        }
