"""Exception hierarchy for vector-data-gen."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003


class VectorDataGenError(Exception):
    """Base class for all errors raised by vector-data-gen."""


class ConfigurationError(VectorDataGenError, ValueError):
    """Invalid generation parameters, rejected before any file is written."""


class OutputIOError(VectorDataGenError, OSError):
    """Creating, writing or closing an output file failed.

    The run is aborted. Files closed before the failure are left on disk.
    """

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        file_index: int | None = None,
    ):
        super().__init__(message)
        self.path = Path(path) if path is not None else None
        self.file_index = file_index

    def __str__(self) -> str:
        message = self.args[0] if self.args else ""
        details = []
        if self.file_index is not None:
            details.append(f"file_index={self.file_index}")
        if self.path is not None:
            details.append(f"path={self.path}")
        if details:
            return f"{message} ({', '.join(details)})"
        return message


class EncodingError(VectorDataGenError):
    """Columns or batches did not match the fixed table schema.

    Indicates a programming error; never retried.
    """
