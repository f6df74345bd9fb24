"""
RunCompare Exception Hierarchy

Domain-specific exceptions for the ingestion and plotting pipeline:

- RunCompareError: Base exception for all RunCompare-specific errors
- ParseError: The header row of the tabular input cannot be mapped
- ConfigError: Configuration loading and validation failures
- RenderError: Figure construction or image export failures

Row-level problems are deliberately absent from this hierarchy: rows whose
step or value cannot be coerced are dropped during indexing, and empty
selections produce "no result" instead of an exception.

Usage Examples:
    >>> try:
    ...     records = parse_records(text)
    ... except ParseError as e:
    ...     if e.error_code == "PARSE_002":
    ...         print(e.context["missing_columns"])

    >>> raise RenderError("Export failed").with_context({"image_format": "png"})
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional


class RunCompareError(Exception):
    """
    Base exception class for all RunCompare-specific errors.

    Attributes:
        error_code (str): Unique identifier for programmatic error handling
        context (Dict[str, Any]): Additional context information for debugging

    Error Codes:
        RUNCOMPARE_001: Generic RunCompare error
    """

    def __init__(
        self,
        message: str,
        error_code: str = "RUNCOMPARE_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Initialize the error with message, error code, and context.

        Args:
            message: Human-readable error description
            error_code: Unique identifier for programmatic error handling
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = dict(context) if context else {}

        if hasattr(sys, '_getframe'):
            frame = sys._getframe(1)
            if frame:
                self.context.setdefault('source_function', frame.f_code.co_name)

    def with_context(self, context: Dict[str, Any]) -> 'RunCompareError':
        """
        Add additional context to the exception and return self for chaining.

        Example:
            >>> raise RunCompareError("Operation failed").with_context({
            ...     "operation": "ingest",
            ...     "file_path": "/path/to/runs.csv",
            ... })
        """
        self.context.update(context)
        return self

    def __str__(self) -> str:
        message = super().__str__()
        details = {k: v for k, v in self.context.items() if k != 'source_function'}
        if details:
            context_str = ", ".join(f"{k}={v}" for k, v in details.items())
            return f"{message} [Error Code: {self.error_code}, Context: {context_str}]"
        return f"{message} [Error Code: {self.error_code}]"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"context={self.context!r})"
        )


class ParseError(RunCompareError):
    """
    Structural failure of the tabular input.

    Only the header row can cause this: once the four required columns are
    mapped, every data row is accepted or dropped individually.

    Error Codes:
        PARSE_001: Input has no header row
        PARSE_002: Required columns missing from the header
        PARSE_003: Required column named more than once
        PARSE_004: Input file cannot be read
    """

    def __init__(
        self,
        message: str,
        error_code: str = "PARSE_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)

        if context:
            if 'file_path' in context and isinstance(context['file_path'], (str, Path)):
                self.context['file_path'] = str(context['file_path'])


class ConfigError(RunCompareError):
    """
    Configuration validation and loading errors.

    Error Codes:
        CONFIG_001: Configuration file not found or unreadable
        CONFIG_002: YAML parsing or decoding error
        CONFIG_003: Pydantic validation failure
    """

    def __init__(
        self,
        message: str,
        error_code: str = "CONFIG_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)

        if context:
            if 'config_path' in context and isinstance(context['config_path'], (str, Path)):
                self.context['config_path'] = str(context['config_path'])


class RenderError(RunCompareError):
    """
    Figure construction or image export failures.

    Error Codes:
        RENDER_001: Figure construction failed
        RENDER_002: Image export failed
    """

    def __init__(
        self,
        message: str,
        error_code: str = "RENDER_001",
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)


def log_and_raise(
    exception: RunCompareError,
    logger: Optional[Any] = None,
    level: str = "error"
) -> None:
    """
    Log an exception with its context and then raise it.

    Args:
        exception: The exception to log and raise
        logger: Logger instance to use (optional)
        level: Log level ("error", "warning", "critical")

    Raises:
        The provided exception after logging
    """
    if logger is not None:
        log_method = getattr(logger, level, logger.error)
        log_method(f"{exception.__class__.__name__}: {exception.message}")
        for key, value in exception.context.items():
            log_method(f"  {key}: {value}")

    raise exception


__all__ = [
    'RunCompareError',
    'ParseError',
    'ConfigError',
    'RenderError',
    'log_and_raise',
]
