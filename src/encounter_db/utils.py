"""Utility functions for encounter-db."""

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from rich.console import Console

from .constants import LOG_DATE_FORMAT, LOG_FORMAT

logger = logging.getLogger(__name__)

T = TypeVar("T")


def ensure_dir(path: Path) -> Path:
    """
    Create directory if it doesn't exist.

    Args:
        path: Directory path to create

    Returns:
        The created/existing directory path
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def expand_path(path: str) -> Path:
    """
    Expand ~ and environment variables in path.

    Args:
        path: Path string to expand

    Returns:
        Expanded Path object
    """
    return Path(os.path.expanduser(os.path.expandvars(path))).resolve()


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure the encounter_db loggers for a host application.

    Args:
        level: Logging level for the encounter_db package
    """
    package_logger = logging.getLogger("encounter_db")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        package_logger.addHandler(handler)


class ErrorContext:
    """Context for error handling with actionable guidance."""

    def __init__(self, error_prefix: str, suggestions: dict[type[Exception], str] | None = None):
        """
        Initialize error context.

        Args:
            error_prefix: Prefix for error messages
            suggestions: Mapping of exception types to actionable suggestions
        """
        self.error_prefix = error_prefix
        self.suggestions = suggestions or {}


def handle_operation(
    console: Console,
    operation: Callable[[], T],
    context: ErrorContext,
    error_types: tuple[type[Exception], ...] | None = None,
) -> T:
    """
    Execute an operation, printing the error and a suggestion if it fails.

    Args:
        console: Rich console for output
        operation: Callable that performs the operation
        context: Error context with prefix and suggestions
        error_types: Tuple of exception types to report (None = report all)

    Returns:
        Result from the operation callable

    Raises:
        Exception: Re-raises every exception after reporting it

    Examples:
        context = ErrorContext(
            "Open database",
            suggestions={StoreConnectionError: "Check the database file permissions"},
        )
        conn = handle_operation(console, lambda: open_connection(path), context)
    """
    try:
        return operation()
    except Exception as e:
        if error_types and not isinstance(e, error_types):
            raise

        console.print(f"[red]Error:[/red] {context.error_prefix}: {e}")

        suggestion = context.suggestions.get(type(e))
        if suggestion:
            console.print(f"[cyan]Suggestion:[/cyan] {suggestion}")
        elif isinstance(e, (PermissionError, OSError)):
            console.print("[cyan]Suggestion:[/cyan] Check file permissions and disk space")

        raise
