"""Tests for rows-per-file estimation."""

import pytest

from vector_data_gen.config import Configuration
from vector_data_gen.estimator import (
    BINARY_OVERHEAD_BYTES,
    STRING_OVERHEAD_BYTES,
    bytes_per_row,
    estimate_rows_per_file,
)


def test_overheads_are_fixed_constants():
    assert BINARY_OVERHEAD_BYTES == 8
    assert STRING_OVERHEAD_BYTES == 8


def test_small_row_cost():
    config = Configuration(vector_dim=4, scalar_len=8, target_file_size=1000)

    assert bytes_per_row(config) == (16 + 8) + (8 + 8) == 40
    assert estimate_rows_per_file(config) == 25


def test_default_configuration():
    config = Configuration()

    assert bytes_per_row(config) == 4096 + 8 + 32 + 8
    assert estimate_rows_per_file(config) == 512_000_000 // 4144


def test_rounds_down():
    config = Configuration(vector_dim=4, scalar_len=8, target_file_size=1039)

    assert estimate_rows_per_file(config) == 25


@pytest.mark.parametrize("target_file_size", [1, 10, 39])
def test_floor_of_one_row(target_file_size):
    config = Configuration(vector_dim=4, scalar_len=8, target_file_size=target_file_size)

    assert estimate_rows_per_file(config) == 1


@pytest.mark.parametrize(
    "vector_dim, scalar_len, target_file_size",
    [(1, 1, 1), (1024, 32, 512_000_000), (3, 100, 77), (4096, 1, 10**9)],
)
def test_always_positive(vector_dim, scalar_len, target_file_size):
    config = Configuration(
        vector_dim=vector_dim, scalar_len=scalar_len, target_file_size=target_file_size
    )

    assert estimate_rows_per_file(config) >= 1
