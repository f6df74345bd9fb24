"""
RunCompare - Align experiment-tracking metrics across runs for side-by-side plotting.

This module owns the package-wide Loguru configuration. Every other module logs
through the ``logger`` re-exported here, and tests can reset or reconfigure the
sinks without touching module state elsewhere.
"""

__version__ = "0.1.0"

import logging
import os
import sys
import warnings
from pathlib import Path
from typing import Dict, Optional, TextIO, Union

from loguru import logger


log_format_console = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

log_format_file = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{name}:{function}:{line} - {message}"
)


# --- Logger Configuration Classes and Types ---

class LoggingConfigError(Exception):
    """Raised when a logging sink cannot be validated or installed."""
    pass


class LoggerState:
    """
    Tracks which sinks this package installed so they can be torn down again.
    """

    def __init__(self):
        self._initialized = False
        self._test_mode = False
        self._sink_ids = []

    def is_initialized(self) -> bool:
        """Check if logger has been initialized."""
        return self._initialized

    def is_test_mode(self) -> bool:
        """Check if logger is in test mode."""
        return self._test_mode

    def mark_initialized(self, test_mode: bool = False):
        """Mark logger as initialized."""
        self._initialized = True
        self._test_mode = test_mode

    def add_sink_id(self, sink_id: int):
        """Track sink IDs for cleanup."""
        self._sink_ids.append(sink_id)

    @property
    def sink_ids(self):
        return list(self._sink_ids)

    def reset(self):
        """Forget every tracked sink."""
        self._initialized = False
        self._test_mode = False
        self._sink_ids.clear()


_logger_state = LoggerState()


class InterceptHandler(logging.Handler):
    """
    Standard ``logging`` handler that forwards records into Loguru.

    Third-party libraries (matplotlib, PyYAML consumers) log through the
    standard library; installing this on the root logger keeps all output in
    the Loguru sinks.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


# --- Configuration Validation Functions ---

def validate_log_level(level: str) -> str:
    """
    Validate a Loguru level name.

    Args:
        level: Log level string to validate

    Returns:
        Upper-cased log level string

    Raises:
        LoggingConfigError: If log level is invalid
    """
    valid_levels = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
    level_upper = str(level).upper()

    if level_upper not in valid_levels:
        raise LoggingConfigError(
            f"Invalid log level '{level}'. Must be one of: {', '.join(sorted(valid_levels))}"
        )

    return level_upper


def validate_output_destination(destination: Union[str, Path, TextIO, None]) -> Union[str, TextIO, None]:
    """
    Validate a sink destination, creating the parent directory of file paths.

    Raises:
        LoggingConfigError: If destination is invalid
    """
    if destination is None:
        return None

    if hasattr(destination, 'write'):
        return destination

    try:
        path_dest = Path(destination)
        if not path_dest.parent.exists():
            try:
                path_dest.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise LoggingConfigError(
                    f"Cannot create directory for log destination '{destination}': {e}"
                ) from e
        return str(path_dest)
    except (TypeError, ValueError) as e:
        raise LoggingConfigError(
            f"Invalid output destination '{destination}': {e}"
        ) from e


# --- Core Logging Configuration Functions ---

def configure_console_logging(
    level: str = "INFO",
    format_template: Optional[str] = None,
    colorize: bool = True,
    destination: TextIO = sys.stderr
) -> int:
    """
    Add a console sink.

    Args:
        level: Log level for console output
        format_template: Custom format template (uses ``log_format_console`` if None)
        colorize: Enable colored console output
        destination: Console destination (default: sys.stderr)

    Returns:
        Sink ID for tracking and cleanup

    Raises:
        LoggingConfigError: If configuration fails
    """
    validated_level = validate_log_level(level)
    try:
        sink_id = logger.add(
            destination,
            level=validated_level,
            format=format_template or log_format_console,
            colorize=colorize
        )
    except (TypeError, ValueError) as e:
        raise LoggingConfigError(f"Failed to configure console logging: {e}") from e

    _logger_state.add_sink_id(sink_id)
    return sink_id


def configure_file_logging(
    log_file_path: Union[str, Path],
    level: str = "DEBUG",
    rotation: str = "10 MB",
    retention: str = "7 days",
    compression: str = "zip",
    format_template: Optional[str] = None,
    encoding: str = "utf-8"
) -> int:
    """
    Add a rotating file sink.

    Args:
        log_file_path: Path to log file (may contain Loguru time placeholders)
        level: Log level for file output
        rotation: Log rotation setting
        retention: Log retention setting
        compression: Compression method for rotated logs
        format_template: Custom format template (uses ``log_format_file`` if None)
        encoding: File encoding

    Returns:
        Sink ID for tracking and cleanup

    Raises:
        LoggingConfigError: If configuration fails
    """
    validated_level = validate_log_level(level)
    validated_path = validate_output_destination(log_file_path)

    try:
        sink_id = logger.add(
            validated_path,
            rotation=rotation,
            retention=retention,
            compression=compression,
            level=validated_level,
            format=format_template or log_format_file,
            encoding=encoding
        )
    except (TypeError, ValueError, OSError) as e:
        raise LoggingConfigError(f"Failed to configure file logging: {e}") from e

    _logger_state.add_sink_id(sink_id)
    return sink_id


def intercept_standard_logging(level: int = logging.INFO) -> InterceptHandler:
    """Route standard-library logging records into Loguru."""
    root = logging.getLogger()
    for handler in root.handlers:
        if isinstance(handler, InterceptHandler):
            return handler
    handler = InterceptHandler()
    root.addHandler(handler)
    root.setLevel(level)
    return handler


def _remove_intercept_handlers() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, InterceptHandler):
            root.removeHandler(handler)


# --- Test-Specific Entry Points ---

def configure_test_logging(
    console_level: str = "DEBUG",
    console_destination: Optional[TextIO] = None,
    file_destination: Optional[Union[str, Path]] = None,
) -> Dict[str, int]:
    """
    Replace every sink with uncolored test sinks.

    Args:
        console_level: Console log level for tests
        console_destination: Console destination (None uses sys.stderr)
        file_destination: Optional log file for the test run

    Returns:
        Dictionary mapping sink types to sink IDs
    """
    reset_logging()

    sink_ids = {
        'console': configure_console_logging(
            level=console_level,
            destination=console_destination if console_destination is not None else sys.stderr,
            colorize=False,
        )
    }
    if file_destination:
        sink_ids['file'] = configure_file_logging(file_destination, level=console_level)

    _logger_state.mark_initialized(test_mode=True)
    return sink_ids


def reset_logging():
    """Remove all Loguru sinks and the standard logging bridge."""
    logger.remove()
    _remove_intercept_handlers()
    _logger_state.reset()


# --- Production Logging Initialization ---

def _get_default_log_directory() -> Path:
    return Path.home() / ".runcompare" / "logs"


def initialize_production_logging(
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_dir: Optional[Union[str, Path]] = None,
) -> Dict[str, int]:
    """
    Install the console and daily file sinks used outside of tests.

    Args:
        console_level: Console logging level
        file_level: File logging level
        log_dir: Directory for log files (``~/.runcompare/logs`` if None)

    Returns:
        Dictionary mapping sink types to sink IDs

    Raises:
        LoggingConfigError: If a sink cannot be installed
    """
    reset_logging()

    sink_ids = {'console': configure_console_logging(level=console_level)}

    log_dir = Path(log_dir) if log_dir is not None else _get_default_log_directory()
    sink_ids['file'] = configure_file_logging(
        log_file_path=log_dir / "runcompare_{time:YYYYMMDD}.log",
        level=file_level,
    )

    intercept_standard_logging()
    _logger_state.mark_initialized(test_mode=False)
    logger.debug("RunCompare logger initialized")
    return sink_ids


def get_logger_state() -> LoggerState:
    return _logger_state


def is_logging_initialized() -> bool:
    return _logger_state.is_initialized()


def _is_pytest_running() -> bool:
    return "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ


def _auto_initialize_logging():
    """Install production sinks on first import, except under pytest."""
    if _logger_state.is_initialized() or _is_pytest_running():
        return
    try:
        initialize_production_logging()
    except LoggingConfigError as e:
        warnings.warn(f"Failed to initialize production logging: {e}. Using basic stderr logging.")
        logger.remove()
        logger.add(sys.stderr, level="INFO")
        _logger_state.mark_initialized(test_mode=False)


_auto_initialize_logging()

# --- End Logger Configuration ---

# Public API. Imported after the logger so submodules can use ``from runcompare import logger``.
from runcompare.exceptions import (  # noqa: E402
    RunCompareError,
    ParseError,
    ConfigError,
    RenderError,
)
from runcompare.io.records import Record, parse_records, read_records  # noqa: E402
from runcompare.index.builder import MetricIndex, build_index  # noqa: E402
from runcompare.catalog.extractor import Catalog, extract_catalog  # noqa: E402
from runcompare.alignment.aligner import (  # noqa: E402
    AlignedSeries,
    AlignedSeriesSet,
    Selection,
    align_selection,
    align_series,
)
from runcompare.api import ComparisonSession, compare, load_index  # noqa: E402

__all__ = [
    "__version__",
    "logger",
    "log_format_console",
    "log_format_file",
    "LoggingConfigError",
    "configure_console_logging",
    "configure_file_logging",
    "configure_test_logging",
    "initialize_production_logging",
    "intercept_standard_logging",
    "reset_logging",
    "RunCompareError",
    "ParseError",
    "ConfigError",
    "RenderError",
    "Record",
    "parse_records",
    "read_records",
    "MetricIndex",
    "build_index",
    "Catalog",
    "extract_catalog",
    "AlignedSeries",
    "AlignedSeriesSet",
    "Selection",
    "align_selection",
    "align_series",
    "ComparisonSession",
    "compare",
    "load_index",
]
