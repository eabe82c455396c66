"""Deterministic row synthesis."""

from __future__ import annotations

import string
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from .config import Configuration

# 62 characters, upper case first, then lower case, then digits
ALPHANUMERIC = string.ascii_uppercase + string.ascii_lowercase + string.digits

_ALPHABET_CODES = np.frombuffer(ALPHANUMERIC.encode("ascii"), dtype=np.uint8)

# Explicit little-endian so the byte layout does not depend on the host
_VECTOR_DTYPE = np.dtype("<f4")


class RowGenerator:
    """Produces an endless, reproducible sequence of (vector, scalar) rows.

    Each instance owns its own PCG64 stream; two instances built from the same
    seed yield the same rows in the same order. The only way to restart a
    sequence is to build a new instance.
    """

    def __init__(self, seed: int, vector_dim: int, scalar_len: int):
        self.seed = seed
        self.vector_dim = vector_dim
        self.scalar_len = scalar_len
        self._rng = np.random.Generator(np.random.PCG64(seed))

    @classmethod
    def from_config(cls, config: Configuration) -> RowGenerator:
        return cls(config.seed, config.vector_dim, config.scalar_len)

    def next_vector(self) -> bytes:
        """Draw ``vector_dim`` floats in [-1.0, 1.0) as little-endian float32 bytes."""
        # random() yields multiples of 2**-24 in [0, 1); 2x - 1 is exact in float32
        samples = self._rng.random(self.vector_dim, dtype=np.float32)
        values = samples * np.float32(2.0) - np.float32(1.0)
        return values.astype(_VECTOR_DTYPE, copy=False).tobytes()

    def next_scalar(self) -> str:
        """Draw ``scalar_len`` characters from the alphanumeric alphabet."""
        indices = self._rng.integers(0, len(ALPHANUMERIC), size=self.scalar_len)
        return _ALPHABET_CODES[indices].tobytes().decode("ascii")

    def next_row(self) -> tuple[bytes, str]:
        vector = self.next_vector()
        return vector, self.next_scalar()

    def __iter__(self):
        while True:
            yield self.next_row()


def decode_vector(payload: bytes) -> np.ndarray:
    """Inverse of :meth:`RowGenerator.next_vector`."""
    if len(payload) % _VECTOR_DTYPE.itemsize:
        raise ValueError(
            f"Vector payload of {len(payload)} bytes is not a whole number of float32 values"
        )
    return np.frombuffer(payload, dtype=_VECTOR_DTYPE)
