"""
Structured logging for benchmatch.

Provides a process-wide logger writing to the console and a daily log
file, plus counters that describe how the remote resource API behaved
during a session (calls, failures per endpoint, mapping fallbacks).
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks API and matching metrics for a single CLI session.
    """

    def __init__(
        self,
        name: str = "benchmatch",
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
            enable_console: Output logs to console (stderr, so command output stays clean)
        """
        self.logger = logging.getLogger(name)
        self.metrics = {
            "api_calls": 0,
            "api_successful": 0,
            "api_failed": 0,
            "errors_by_type": {},
            "endpoint_success_rate": {},
            "mapping_fallbacks": 0,
            "matches_produced": 0,
        }
        self.configure(level, log_dir, enable_file, enable_console)

    def configure(
        self,
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """(Re)build handlers in place; metrics are kept."""
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()
        self.logger.propagate = False

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            log_dir = Path(log_dir or "logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"benchmatch_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
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
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_api_call(self, endpoint: str):
        """Record an outgoing request against an endpoint."""
        self.metrics["api_calls"] += 1
        stats = self.metrics["endpoint_success_rate"].setdefault(
            endpoint, {"attempts": 0, "successes": 0}
        )
        stats["attempts"] += 1

    def record_api_success(self, endpoint: str):
        self.metrics["api_successful"] += 1
        if endpoint in self.metrics["endpoint_success_rate"]:
            self.metrics["endpoint_success_rate"][endpoint]["successes"] += 1

    def record_api_failure(self, endpoint: str, error_type: str):
        """Record a failed request, keyed by error type."""
        self.metrics["api_failed"] += 1
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def record_mapping_fallback(self):
        self.metrics["mapping_fallbacks"] += 1

    def record_matches(self, count: int):
        self.metrics["matches_produced"] += count

    def get_metrics(self) -> dict:
        """Return a snapshot of current metrics with success rates filled in."""
        snapshot = json.loads(json.dumps(self.metrics))
        for stats in snapshot["endpoint_success_rate"].values():
            if stats["attempts"] > 0:
                stats["success_rate"] = round(stats["successes"] / stats["attempts"], 3)
        return snapshot

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        total = metrics["api_calls"]
        ok = metrics["api_successful"]
        overall_rate = round(ok / total * 100, 1) if total > 0 else 0

        self.info("=== API Session Metrics ===")
        self.info(f"API Calls: {ok}/{total} ({overall_rate}% success)")
        self.info(f"Mapping fallbacks: {metrics['mapping_fallbacks']}")
        self.info(f"Matches produced: {metrics['matches_produced']}")

        if metrics["endpoint_success_rate"]:
            self.info("Endpoint Success Rates:")
            for endpoint, stats in metrics["endpoint_success_rate"].items():
                rate = stats.get("success_rate", 0) * 100
                self.info(f"  {endpoint}: {stats['successes']}/{stats['attempts']} ({rate:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "benchmatch",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    The first call fixes the configuration (console only unless told
    otherwise); later calls return the same instance regardless of their
    arguments. Use configure_logger() at startup to apply Settings.
    """
    global _global_logger

    if _global_logger is None:
        kwargs.setdefault("enable_file", False)
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def configure_logger(level: str = "INFO", log_dir: Optional[Path] = None, **kwargs) -> StructuredLogger:
    """Apply explicit settings to the global logger, creating it if needed."""
    logger = get_logger()
    logger.configure(level=level, log_dir=log_dir, **kwargs)
    return logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
