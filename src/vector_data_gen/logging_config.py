"""Logging configuration built on loguru.

Library modules only call :func:`get_logger`; sinks are installed by the
command line through :func:`setup_logging`.
"""

from __future__ import annotations

import sys
from typing import Any

from loguru import logger

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan> - <level>{message}</level>"
)

_VERBOSE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> | {extra}"
)


def setup_logging(verbose: bool = False, log_level: str = "INFO") -> None:
    """Replace loguru's default sink with a stderr sink for the CLI.

    Args:
        verbose: Use the detailed format including call site and bound extras
        log_level: Minimum level to emit
    """
    # Default for records logged without get_logger, which the formats need
    logger.configure(extra={"module": "vector_data_gen"})
    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format=_VERBOSE_FORMAT if verbose else _CONSOLE_FORMAT,
        colorize=True,
        backtrace=verbose,
        diagnose=verbose,
    )


def get_logger(name: str) -> Any:
    """Return the shared loguru logger bound to a module name."""
    return logger.bind(module=name)


def log_error_with_context(error: BaseException, context: dict[str, Any]) -> None:
    """Log an exception together with the values needed to diagnose it."""
    get_logger(__name__).bind(**context).opt(exception=error).error(
        f"{type(error).__name__}: {error}"
    )


def log_performance(operation: str, duration: float, **metrics: Any) -> None:
    """Log how long an operation took, with optional throughput figures."""
    rows = metrics.get("rows")
    if rows and duration > 0:
        metrics.setdefault("rows_per_second", round(rows / duration, 1))
    get_logger(__name__).bind(**metrics).info(
        f"{operation} completed in {duration:.2f}s"
    )
