"""
Structured logging for history checkers.

Provides configurable log levels (silent, normal, verbose, debug)
with consistent formatting for progress updates, verdicts, checker
failures and history statistics.
"""

from __future__ import annotations

import sys
import threading
from enum import Enum
from typing import Any, Dict, TextIO


class LogLevel(Enum):
    """
    Logging levels for checkers.

    SILENT:  No output at all.
    NORMAL:  Verdicts, checker failures and requested statistics.
    VERBOSE: Progress information.
    DEBUG:   Detailed per-checker diagnostics.
    """

    SILENT = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


class CheckLogger:
    """
    Structured logger shared by checkers.

    Output is filtered by the configured log level.  Writes are
    serialized, since composed checkers log from worker threads.

    Attributes:
        level: The minimum log level to display.
        stream: The output stream (defaults to stdout).
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.NORMAL,
        stream: TextIO = sys.stdout,
    ) -> None:
        """
        Initialize logger with level and output stream.

        Args:
            level: Minimum log level to display.
            stream: Output stream (default: sys.stdout).
        """
        self.level: LogLevel = level
        self.stream: TextIO = stream
        self._lock = threading.Lock()

    def enabled(self, level: LogLevel) -> bool:
        """True if messages at *level* are displayed."""
        return self.level.value >= level.value

    def debug(self, message: str, **kwargs: Any) -> None:
        """
        Log a debug message (only shown at DEBUG level).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.enabled(LogLevel.DEBUG):
            self._write("[DEBUG]", message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log an info message (shown at VERBOSE and DEBUG levels).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.enabled(LogLevel.VERBOSE):
            self._write("[INFO]", message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log a checker failure (shown at NORMAL level and above)."""
        if self.enabled(LogLevel.NORMAL):
            self._write("[ERROR]", message, kwargs)

    def verdict(self, name: str, valid: bool) -> None:
        """Log one checker's verdict (shown at NORMAL level and above)."""
        if self.enabled(LogLevel.NORMAL):
            outcome = "VALID" if valid else "INVALID"
            self._write(f"{outcome}:", name, {})

    def statistics(self, stats: Dict[str, Any], title: str = "Statistics") -> None:
        """
        Log a block of statistics (shown at NORMAL level and above).

        Args:
            stats: Dictionary of statistic names to values.
            title: Heading printed above the block.
        """
        if self.enabled(LogLevel.NORMAL):
            lines = [f"=== {title} ==="]
            for key, value in stats.items():
                label = str(key).replace("_", " ").title()
                lines.append(f"  {label}: {value}")
            self._emit(lines)

    def _write(self, prefix: str, message: str, fields: Dict[str, Any]) -> None:
        lines = [f"{prefix} {message}"]
        lines.extend(f"  {k}: {v}" for k, v in fields.items())
        self._emit(lines)

    def _emit(self, lines: list[str]) -> None:
        """Write lines to the output stream as one block."""
        with self._lock:
            self.stream.write("".join(line + "\n" for line in lines))
