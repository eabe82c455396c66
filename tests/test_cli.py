"""End-to-end tests for the vector-data-gen command line."""

from pathlib import Path

import pyarrow.parquet as pq
import pytest
from click.testing import CliRunner

from vector_data_gen.cli import main

SMALL_SHAPE = [
    "--vector-dim",
    "4",
    "--scalar-len",
    "8",
]


@pytest.fixture
def runner():
    """Click CLI runner for isolated filesystem testing."""
    return CliRunner()


def _generate(runner, *extra):
    return runner.invoke(
        main,
        [
            "generate",
            *SMALL_SHAPE,
            "--file-size",
            "1000B",
            "--batch-size",
            "2",
            "--seed",
            "1",
            *extra,
        ],
    )


class TestGenerate:
    def test_generates_split_files(self, runner):
        with runner.isolated_filesystem():
            result = _generate(runner, "-t", "60", "-o", "out", "--no-progress")

            assert result.exit_code == 0, result.output
            files = sorted(Path("out").glob("*.parquet"))
            assert [f.name for f in files] == [
                "data-00000000.parquet",
                "data-00000001.parquet",
                "data-00000002.parquet",
            ]
            assert [pq.ParquetFile(f).metadata.num_rows for f in files] == [25, 25, 10]
            assert "Generated 60 rows in 3 file(s)" in result.output

    def test_progress_bar_run(self, runner):
        with runner.isolated_filesystem():
            result = _generate(runner, "-t", "5", "-o", "out", "-p", "vectors")

            assert result.exit_code == 0, result.output
            assert Path("out/vectors-00000000.parquet").exists()

    def test_creates_nested_output_directory(self, runner):
        with runner.isolated_filesystem():
            result = _generate(runner, "-t", "3", "-o", "a/b/c", "--no-progress")

            assert result.exit_code == 0, result.output
            assert Path("a/b/c/data-00000000.parquet").exists()

    def test_verbose_prints_configuration(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(
                main,
                [
                    "-v",
                    "generate",
                    *SMALL_SHAPE,
                    "-f",
                    "1000",
                    "-t",
                    "5",
                    "-o",
                    "out",
                    "--no-progress",
                ],
            )

            assert result.exit_code == 0, result.output
            assert "Estimated rows per file" in result.output
            assert "25" in result.output

    def test_compression_choice(self, runner):
        with runner.isolated_filesystem():
            result = _generate(runner, "-t", "5", "-o", "out", "-c", "ZSTD", "--no-progress")

            assert result.exit_code == 0, result.output
            meta = pq.ParquetFile("out/data-00000000.parquet").metadata
            assert meta.row_group(0).column(0).compression == "ZSTD"

    def test_workers_produce_same_files(self, runner):
        with runner.isolated_filesystem():
            first = _generate(runner, "-t", "60", "-o", "seq", "--no-progress")
            second = _generate(runner, "-t", "60", "-o", "par", "-w", "2", "--no-progress")

            assert first.exit_code == 0, first.output
            assert second.exit_code == 0, second.output
            for name in ("data-00000000.parquet", "data-00000002.parquet"):
                assert Path("seq", name).read_bytes() == Path("par", name).read_bytes()

    @pytest.mark.parametrize(
        "args",
        [
            ["--file-size", "lots"],
            ["--vector-dim", "0"],
            ["--total-rows", "0"],
            ["--batch-size", "-1"],
            ["--compression", "brotli"],
            ["--prefix", "a/b"],
        ],
    )
    def test_invalid_arguments(self, runner, args):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["generate", "-o", "out", *args])

            assert result.exit_code == 2
            assert not list(Path(".").glob("out/*.parquet"))

    def test_unwritable_output_directory(self, runner):
        with runner.isolated_filesystem():
            Path("taken").write_text("a file, not a directory")
            result = _generate(runner, "-t", "5", "-o", "taken/sub", "--no-progress")

            assert result.exit_code == 1


class TestVerify:
    def test_verify_generated_output(self, runner):
        with runner.isolated_filesystem():
            generated = _generate(runner, "-t", "60", "-o", "out", "--no-progress")
            assert generated.exit_code == 0, generated.output

            result = runner.invoke(
                main, ["verify", *SMALL_SHAPE, "-t", "60", "-o", "out"]
            )

            assert result.exit_code == 0, result.output
            assert "3 file(s), 60 rows verified" in result.output

    def test_verify_detects_wrong_total(self, runner):
        with runner.isolated_filesystem():
            _generate(runner, "-t", "10", "-o", "out", "--no-progress")

            result = runner.invoke(
                main, ["verify", *SMALL_SHAPE, "-t", "11", "-o", "out"]
            )

            assert result.exit_code == 1

    def test_verify_missing_directory(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["verify", "-o", "missing"])

            assert result.exit_code == 1


def test_help_lists_commands(runner):
    result = runner.invoke(main, ["--help"])

    assert result.exit_code == 0
    assert "generate" in result.output
    assert "verify" in result.output
