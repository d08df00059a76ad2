"""
Utility functions for pipepub.

Includes logging setup and the build console the publisher writes to.
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO

from rich.console import Console
from rich.logging import RichHandler


CONSOLE_PREFIX = "[pipepub]"

logger = logging.getLogger("pipepub")


def setup_logging(
    log_file: Optional[Path] = None,
    log_level: str = "INFO",
    log_format: str = "structured",
    console_output: bool = True,
) -> logging.Logger:
    """
    Set up logging for publish runs.

    Args:
        log_file: Optional path to log file
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: "structured" (JSON) or "pretty" (human-readable)
        console_output: Also log to console

    Returns:
        Configured logger
    """
    root = logging.getLogger("pipepub")
    root.setLevel(getattr(logging, log_level.upper()))
    root.handlers = []  # Clear existing handlers

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        if log_format == "structured":
            file_handler.setFormatter(StructuredFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
        root.addHandler(file_handler)

    if console_output:
        if log_format == "pretty":
            console_handler = RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_time=False)
        else:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(
                logging.Formatter("%(levelname)s: %(message)s")
            )
        root.addHandler(console_handler)

    return root


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        if hasattr(record, "build_id"):
            log_data["build_id"] = record.build_id
        if hasattr(record, "job_id"):
            log_data["job_id"] = record.job_id
        if hasattr(record, "event"):
            log_data["event"] = record.event

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class BuildConsole:
    """
    Console of a single build.

    Lines written here are what the user sees in the CI build log. Every
    line is mirrored to the pipepub logger.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream if stream is not None else sys.stdout
        self.lines: list[str] = []

    def log(self, message: str) -> None:
        line = f"{CONSOLE_PREFIX} {message}"
        self.lines.append(line)
        self._stream.write(line + "\n")
        logger.info(message)

    def log_exception(self, exc: BaseException) -> None:
        """Write the traceback of an exception to the build console."""
        formatted = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        for text in formatted.rstrip().splitlines():
            line = f"{CONSOLE_PREFIX} {text}"
            self.lines.append(line)
            self._stream.write(line + "\n")
        logger.debug("Publish error", exc_info=(type(exc), exc, exc.__traceback__))
