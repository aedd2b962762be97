"""Logging for AI Studio.

Console output goes to stderr at ``AISTUDIO_LOG_LEVEL`` (default WARNING).
``enable_file_logging`` adds a daily file in the data directory that keeps
everything down to DEBUG, with ``extra`` fields appended as JSON.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from aistudio.utils.paths import logs_dir


# Attributes every LogRecord has; anything else came in through ``extra``.
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class StructuredFormatter(logging.Formatter):
    """UTC timestamps, with the record's extra fields appended as JSON."""

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return stamp.strftime("%Y-%m-%dT%H:%M:%S.") + f"{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }
        if not context:
            return line
        return f"{line} | {json.dumps(context, sort_keys=True, default=str)}"


class AIStudioLogger:
    """Thin wrapper around a stdlib logger with an optional file sink."""

    def __init__(self, name: str = "aistudio"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        self._file_handler: Optional[logging.FileHandler] = None

        if not self.logger.handlers:
            level_name = os.getenv("AISTUDIO_LOG_LEVEL", "WARNING").upper()
            console = logging.StreamHandler(sys.stderr)
            console.setLevel(getattr(logging, level_name, logging.WARNING))
            console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
            self.logger.addHandler(console)

    @property
    def log_file(self) -> Optional[Path]:
        if self._file_handler is None:
            return None
        return Path(self._file_handler.baseFilename)

    def attach_file_handler(self, log_file: Path) -> Path:
        """Write DEBUG and above to ``log_file``, replacing any earlier file sink."""
        log_file = log_file.resolve()
        if self.log_file == log_file:
            return log_file

        log_file.parent.mkdir(parents=True, exist_ok=True)
        if self._file_handler is not None:
            self.logger.removeHandler(self._file_handler)
            self._file_handler.close()

        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(StructuredFormatter(FILE_FORMAT))
        self.logger.addHandler(handler)
        self._file_handler = handler
        return log_file

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.logger.error(message, *args, **kwargs)


_logger: Optional[AIStudioLogger] = None


def get_logger() -> AIStudioLogger:
    """Return the process-wide logger, creating it on first use."""
    global _logger
    if _logger is None:
        _logger = AIStudioLogger()
    return _logger


def enable_file_logging() -> Path:
    """Send the global logger's output to today's file under the data directory."""
    logger = get_logger()
    log_file = logs_dir(ensure=True) / f"aistudio_{datetime.now():%Y%m%d}.log"
    log_file = logger.attach_file_handler(log_file)
    logger.debug(f"[logging] File logging enabled at {log_file}")
    return log_file
