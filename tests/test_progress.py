"""Tests for progress observers and logging helpers."""

import importlib
import io

from loguru import logger
from rich.console import Console

from vector_data_gen.logging_config import (
    get_logger,
    log_error_with_context,
    log_performance,
    setup_logging,
)
from vector_data_gen.pipeline import FileSplitWriter
from vector_data_gen.progress import LoggingObserver, RichProgressObserver, format_bytes


def _capture_logs():
    messages = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{message} {extra}")
    return messages, handler_id


def test_format_bytes():
    assert format_bytes(512) == "512 B"
    assert format_bytes(1500) == "1.50 KB"
    assert format_bytes(512_000_000) == "512.00 MB"
    assert format_bytes(3 * 10**12) == "3.00 TB"


def test_logging_observer_reports_files_and_summary(small_config):
    messages, handler_id = _capture_logs()
    try:
        FileSplitWriter(small_config(total_rows=30), observers=[LoggingObserver()]).run()
    finally:
        logger.remove(handler_id)

    text = "".join(messages)
    assert "Generated data-00000000.parquet: 25 rows" in text
    assert "Generated data-00000001.parquet: 5 rows" in text
    assert "Data generation completed" in text


def test_rich_progress_reaches_total(small_config):
    console = Console(file=io.StringIO(), force_terminal=False)
    with RichProgressObserver(60, console=console) as progress:
        FileSplitWriter(small_config(total_rows=60), observers=[progress]).run()
        task = progress.progress.tasks[0]

        assert task.completed == 60
        assert task.finished


def test_rich_progress_ignores_reports_before_start(small_config):
    progress = RichProgressObserver(5)

    FileSplitWriter(small_config(total_rows=5), observers=[progress]).run()

    assert progress.progress.tasks == []


def test_log_helpers_bind_context():
    messages, handler_id = _capture_logs()
    try:
        log_performance("Unit", 2.0, rows=10)
        log_error_with_context(ValueError("boom"), {"file_index": 3})
        get_logger("tests").debug("bound")
    finally:
        logger.remove(handler_id)

    text = "".join(messages)
    assert "Unit completed in 2.00s" in text
    assert "'rows_per_second': 5.0" in text
    assert "ValueError: boom" in text
    assert "'file_index': 3" in text
    assert "'module': 'tests'" in text


def test_importing_the_package_leaves_loguru_defaults_alone():
    import vector_data_gen.logging_config as logging_config

    logger.configure(extra={})
    importlib.reload(logging_config)
    messages, handler_id = _capture_logs()
    try:
        logger.info("plain")
    finally:
        logger.remove(handler_id)

    assert messages == ["plain {}\n"]


def test_setup_logging_provides_module_for_unbound_records():
    setup_logging(log_level="INFO")
    messages = []
    handler_id = logger.add(messages.append, format="{extra[module]}|{message}")
    try:
        logger.info("plain")
        get_logger("vector_data_gen.pipeline").info("bound")
    finally:
        logger.remove(handler_id)

    assert messages == ["vector_data_gen|plain\n", "vector_data_gen.pipeline|bound\n"]
