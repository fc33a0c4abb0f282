"""
Detection Logging System

Provides structured logging for classification runs with optional file output.
Console output goes to stderr so that stdout stays a clean, machine-parseable
KEY=value stream for configuration generators.

Usage:
    from hwprofile.logging import DetectionLogger, get_logger

    # Initialize logging for a run (console only)
    logger = DetectionLogger(verbose=True)

    # Or with a log file: logs/detect_20260101.log
    logger = DetectionLogger(output_dir=Path("logs/"), filename_prefix="detect_20260101")

    # Get the logger instance from any module
    log = get_logger()
    log.section("Signal probes")
    log.debug("battery_count: 1")
"""

import logging
import sys
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO
from dataclasses import dataclass


# Module-level logger instance
_detection_logger: Optional['DetectionLogger'] = None


def get_logger() -> 'DetectionLogger':
    """
    Get the current detection logger instance.

    Returns:
        The active DetectionLogger, or a quiet console-only logger if none initialized.
    """
    global _detection_logger
    if _detection_logger is None:
        _detection_logger = DetectionLogger(console_level=logging.WARNING)
    return _detection_logger


def set_logger(logger: Optional['DetectionLogger']):
    """Set the module-level detection logger (None resets to the default)."""
    global _detection_logger
    _detection_logger = logger


@dataclass
class LogConfig:
    """Configuration for detection logging."""

    # Output directory for log files
    output_dir: Optional[Path] = None

    # Prefix for log filename (e.g., "detect_20260101")
    filename_prefix: Optional[str] = None

    # Log level for console output
    console_level: int = logging.INFO

    # Log level for file output
    file_level: int = logging.DEBUG

    # Whether to include timestamps in file output
    file_timestamps: bool = True

    # Width for section separators
    separator_width: int = 60

    # Most recent messages kept in memory for get_content()
    buffered_lines: int = 2000


class DetectionLogger:
    """
    Structured logger for hardware classification runs.

    Provides:
    - Console output to stderr, filtered by level
    - Optional log file with timestamps, always at debug level
    - Section headers and separators

    Probe failures are logged at debug: they are expected on most machines
    and only interesting when diagnosing a classification.
    """

    def __init__(
        self,
        output_dir: Optional[Path] = None,
        filename_prefix: Optional[str] = None,
        config: Optional[LogConfig] = None,
        verbose: bool = False,
        console_level: Optional[int] = None,
        stream: Optional[TextIO] = None,
    ):
        """
        Initialize the detection logger.

        Args:
            output_dir: Directory to save log file. If None, logs to console only.
            filename_prefix: Prefix for log filename; the file is "{prefix}.log".
            config: Optional LogConfig for advanced configuration.
            verbose: Show debug messages on the console.
            console_level: Explicit console level (overrides verbose).
            stream: Console stream (default: sys.stderr at write time).
        """
        self.config = config or LogConfig()
        self.output_dir = output_dir or self.config.output_dir
        self.filename_prefix = filename_prefix or self.config.filename_prefix
        self._stream = stream

        if console_level is not None:
            self.console_level = console_level
        elif verbose:
            self.console_level = logging.DEBUG
        else:
            self.console_level = self.config.console_level

        self._log_file: Optional[TextIO] = None
        self._log_path: Optional[Path] = None
        self._lines: deque = deque(maxlen=self.config.buffered_lines)

        if self.output_dir and self.filename_prefix:
            self._setup_file_logging()

        # Register as the global logger
        set_logger(self)

    def _setup_file_logging(self):
        """Set up file logging."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self._log_path = self.output_dir / f"{self.filename_prefix}.log"
        self._log_file = open(self._log_path, 'w')

    @property
    def log_path(self) -> Optional[Path]:
        """Get the path to the log file, if any."""
        return self._log_path

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def _write(self, message: str, level: int = logging.INFO):
        """Write a message to console and/or file depending on level."""
        self._lines.append(message)

        if level >= self.console_level:
            print(message, file=self.stream)

        if self._log_file and level >= self.config.file_level:
            timestamp = ""
            if self.config.file_timestamps:
                timestamp = f"[{datetime.now().strftime('%H:%M:%S.%f')[:-3]}] "
            self._log_file.write(f"{timestamp}{message}\n")
            self._log_file.flush()

    def info(self, message: str):
        """Log an informational message."""
        self._write(message, logging.INFO)

    def debug(self, message: str):
        """Log a debug message (file only unless verbose)."""
        self._write(message, logging.DEBUG)

    def warning(self, message: str):
        """Log a warning message."""
        self._write(f"⚠ WARNING: {message}", logging.WARNING)

    def error(self, message: str):
        """Log an error message."""
        self._write(f"✗ ERROR: {message}", logging.ERROR)

    def success(self, message: str):
        """Log a success message."""
        self._write(f"✓ {message}", logging.INFO)

    def section(self, title: str, level: int = logging.DEBUG):
        """Print a section header."""
        width = self.config.separator_width
        self._write("", level)
        self._write(title, level)
        self._write("-" * width, level)

    def get_content(self) -> str:
        """Get the most recent logged messages as a string."""
        return "\n".join(self._lines)

    def close(self):
        """Close the log file."""
        if self._log_file:
            self._log_file.close()
            self._log_file = None

    def __enter__(self) -> 'DetectionLogger':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def create_detection_logger(
    output_dir: Optional[Path] = None,
    command: str = "detect",
    verbose: bool = False,
) -> DetectionLogger:
    """
    Create a detection logger with standard naming convention.

    The log file will be named: {command}_{YYYYmmdd_HHMMSS}.log

    Args:
        output_dir: Directory to save the log file (None: console only)
        command: CLI command being run
        verbose: Show debug messages on the console

    Returns:
        Configured DetectionLogger instance
    """
    prefix = None
    if output_dir is not None:
        prefix = f"{command}_{datetime.now().strftime('%Y%m%d_%H%M%S')}"

    return DetectionLogger(
        output_dir=output_dir,
        filename_prefix=prefix,
        verbose=verbose,
    )
