"""
Logging configuration for spot-tagger.

This module sets up the logging system with multiple outputs:
    - Console: Real-time output with tqdm-compatible formatting
    - log_full.log: Complete log of all events (DEBUG and above)
    - log_errors.log: Only ERROR and CRITICAL level messages
    - tag_failures.log: Files that could not be tagged, with the Spotify URI

Everything printed to screen is also saved to file, then filtered into
specialized files.

Usage:
    from spot_tagger.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Resolving spotify:album:...")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log file name prefixes (created in <log_dir>/logs)
LOG_FULL_FILENAME = "log_full"
LOG_ERRORS_FILENAME = "log_errors"
TAG_FAILURES_FILENAME = "tag_failures"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at DEBUG
QUIET_LOGGERS = ("spotipy", "urllib3", "requests")


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that colors the level name on console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        return f"{color}{record.levelname}{Colors.RESET}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking tqdm progress bars.

    Uses tqdm.write(), which prints above any active progress bar
    instead of tearing through it.

    Attributes:
        stream: The output stream (defaults to sys.stderr).
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self.stream = stream if stream is not None else sys.stderr

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class TagFailedTrackHandler(logging.Handler):
    """
    Handler that captures tagging failures for the tag report file.

    Listens for log records carrying tag failure information and writes
    them to tag_failures.log in a simple, human-readable format:

        /music/01 - Song Title.mp3
        spotify:track:xxxxx
        Invalid release date: 2024-13-01

    The handler looks for specific extra fields in log records:
        - 'tag_failed_file': Path of the audio file
        - 'tag_failed_uri': Spotify URI of the track being applied
        - 'tag_failed_reason': Why tagging failed

    Only records containing these fields are written to the report.

    Attributes:
        report_path: Path to the tag_failures.log file.
        report_file: Open file handle (opened by open()).
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "tag_failed_file"):
            return

        if self.report_file is None:
            return

        try:
            file_path = getattr(record, "tag_failed_file", "Unknown")
            uri = getattr(record, "tag_failed_uri", "")
            reason = getattr(record, "tag_failed_reason", "")

            self.report_file.write(f"{file_path}\n")
            self.report_file.write(f"{uri}\n")
            self.report_file.write(f"{reason}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        if self.report_file is not None:
            self.report_file.close()
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """
    Filter that only allows ERROR and CRITICAL level records.

    Used by the error log file handler to exclude DEBUG, INFO, and WARNING.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(log_dir: Path, verbose: bool = False) -> Path:
    """
    Configure the logging system for the application.

    Call this ONCE at application startup, after the configuration
    is loaded but before any other operations.

    Args:
        log_dir: Directory where log files will be created.
                 Logs are stored in a 'logs' subdirectory.
        verbose: If True, the console handler also shows DEBUG records.

    Returns:
        Path to the 'logs' directory holding this run's files.

    Behavior:
        1. Create log_dir/logs if it doesn't exist
        2. Generate timestamp for this run's log files
        3. Configure root logger level to DEBUG, dropping existing handlers
        4. Console handler (TqdmLoggingHandler), INFO or DEBUG
        5. Full log file handler, DEBUG
        6. Error log file handler, filtered to ERROR+ by ErrorOnlyFilter
        7. Tag failure report handler
        8. Quiet chatty third-party loggers to WARNING
    """
    logs_dir = log_dir / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    full_log_path = logs_dir / f"{LOG_FULL_FILENAME}_{timestamp}.log"
    full_handler = logging.FileHandler(full_log_path, mode="w", encoding="utf-8")
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_log_path = logs_dir / f"{LOG_ERRORS_FILENAME}_{timestamp}.log"
    error_handler = logging.FileHandler(error_log_path, mode="w", encoding="utf-8")
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    tag_failures_path = logs_dir / f"{TAG_FAILURES_FILENAME}_{timestamp}.log"
    tag_handler = TagFailedTrackHandler(tag_failures_path)
    tag_handler.open()
    root_logger.addHandler(tag_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logs_dir


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.
              This creates a hierarchy like 'spot_tagger.tag.id3'.

    Returns:
        logging.Logger: A logger instance configured by setup_logging().

    Note:
        Loggers obtained before setup_logging() is called have no handlers
        of their own and fall back to the root logger.
    """
    return logging.getLogger(name)


def log_tag_failure(
    logger: logging.Logger,
    file_path: Path | str,
    spotify_uri: str,
    error_message: str
) -> None:
    """
    Log a file that could not be tagged.

    Logs an ERROR level message and attaches the extra fields that
    TagFailedTrackHandler writes to tag_failures.log.

    Example:
        log_tag_failure(
            logger,
            file_path=Path("song.mp3"),
            spotify_uri="spotify:track:xxx",
            error_message="Permission denied"
        )
    """
    logger.error(
        f"Tagging failed: {file_path} - {error_message}",
        extra={
            "tag_failed_file": str(file_path),
            "tag_failed_uri": spotify_uri,
            "tag_failed_reason": error_message,
        }
    )


def shutdown_logging() -> None:
    """
    Flush and close every root handler, then detach them.

    Typically called in a finally block. After this, logging output
    is dropped until setup_logging() runs again.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        handler.flush()
        handler.close()
        root_logger.removeHandler(handler)
