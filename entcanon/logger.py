"""
Structured logging for entcanon.

Provides a logger with console and optional file output, and tracks
dispatch metrics so callers can see which entity commands reached the
dispatcher, which were skipped and which failed.
"""

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class StructuredLogger:
    """
    Logger with console and file outputs.
    Tracks dispatch metrics per entity command.
    """

    def __init__(
        self,
        name: str = "entcanon",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()  # Remove existing handlers

        self.metrics = {
            "dispatches": 0,
            "dispatches_by_cmd": {},
            "skipped_by_cmd": {},
            "failures_by_cmd": {},
            "errors_by_type": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"entcanon_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if not self.logger.isEnabledFor(level):
            return
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_dispatch(self, cmd: str):
        """Count a message handed to the dispatcher."""
        self.metrics["dispatches"] += 1
        by_cmd = self.metrics["dispatches_by_cmd"]
        by_cmd[cmd] = by_cmd.get(cmd, 0) + 1

    def record_skip(self, cmd: str):
        """Count a load/remove that had no query and was not dispatched."""
        skipped = self.metrics["skipped_by_cmd"]
        skipped[cmd] = skipped.get(cmd, 0) + 1

    def record_failure(self, cmd: str, error_type: str):
        """Count a dispatcher failure."""
        failures = self.metrics["failures_by_cmd"]
        failures[cmd] = failures.get(cmd, 0) + 1

        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a copy of current metrics with per-command failure rates."""
        metrics_copy = {
            k: (dict(v) if isinstance(v, dict) else v) for k, v in self.metrics.items()
        }
        rates = {}
        for cmd, count in metrics_copy["dispatches_by_cmd"].items():
            failed = metrics_copy["failures_by_cmd"].get(cmd, 0)
            rates[cmd] = round(failed / count, 3) if count else 0
        metrics_copy["failure_rate_by_cmd"] = rates
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Entity Dispatch Metrics ===")
        self.info(f"Dispatches: {metrics['dispatches']}")

        for cmd, count in sorted(metrics["dispatches_by_cmd"].items()):
            rate = metrics["failure_rate_by_cmd"][cmd] * 100
            self.info(f"  {cmd}: {count} ({rate:.1f}% failed)")

        if metrics["skipped_by_cmd"]:
            self.info("Skipped (no query):")
            for cmd, count in sorted(metrics["skipped_by_cmd"].items()):
                self.info(f"  {cmd}: {count}")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "entcanon",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Level defaults to ENTCANON_LOG_LEVEL (or INFO). File output is only
    enabled when ENTCANON_LOG_DIR is set, unless passed explicitly.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        if level is None:
            level = os.environ.get("ENTCANON_LOG_LEVEL", "INFO")
        log_dir = os.environ.get("ENTCANON_LOG_DIR")
        kwargs.setdefault("enable_file", bool(log_dir))
        if log_dir:
            kwargs.setdefault("log_dir", Path(log_dir))
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
