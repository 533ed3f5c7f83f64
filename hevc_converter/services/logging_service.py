"""
This module provides the console logger setup and the file logs of a batch run.

Console output goes through Loguru and is configured explicitly from a
`LoggerSettings` value (level and colour) instead of module-wide constants.

The file logs are separate from the console: `ErrorLog` appends human-readable
failure records to a text file, and `SuccessLog` keeps a machine-readable YAML
list of every validated conversion, which makes it easy to audit a directory
after an unattended run.
"""

import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Union

import yaml
from loguru import logger

from ..config.common import (
    CONVERSION_REPORT_FILE_NAME,
    DEFAULT_LOG_LEVEL,
    ERROR_LOG_FILE_NAME,
    LOGGER_FORMAT,
)


class LogLevel(str, Enum):
    """The closed set of console log levels the application accepts."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    @classmethod
    def from_name(cls, name: str) -> "LogLevel":
        """Looks a level up by name, case-insensitively. Unknown names raise ValueError."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            choices = ", ".join(level.value for level in cls)
            raise ValueError(f"Unknown log level '{name}'. Expected one of: {choices}") from None


@dataclass(frozen=True)
class LoggerSettings:
    level: LogLevel = LogLevel(DEFAULT_LOG_LEVEL)
    colorize: bool = True


def configure_logger(settings: LoggerSettings, sink=None) -> int:
    """
    Replaces every Loguru sink with a single console sink.

    Args:
        settings: Verbosity level and colour enablement.
        sink: Where to write. Defaults to `sys.stderr`.

    Returns:
        The Loguru handler id of the new sink.
    """
    logger.remove()
    return logger.add(
        sink if sink is not None else sys.stderr,
        level=settings.level.value,
        format=LOGGER_FORMAT,
        colorize=settings.colorize,
    )


class Log:
    """
    A base class for the file logs.

    Handles the setup of the log directory; subclasses decide the file name and
    the format of what is written.
    """

    # A decorative separator line used in text-based logs for better readability.
    linesep_marker: str = "=" * 50

    def __init__(self, log_dir: Path):
        self.log_file_path: Path  # To be defined by the subclass.
        self.log_dir: Path = log_dir.resolve()
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def write(self, log_content: Union[dict, list, str]):
        raise NotImplementedError("Subclasses must implement the write() method.")


class ErrorLog(Log):
    """
    Appends error records to a plain text file.

    Each record is followed by a separator line so that consecutive failures are
    easy to tell apart.
    """

    def __init__(self, error_log_dir: Path, filename: str = ERROR_LOG_FILE_NAME):
        super().__init__(error_log_dir)
        self.log_file_path = self.log_dir / filename

    def write(self, *error_messages: str):
        """
        Writes one or more error messages to the log file, one per line.

        If the file cannot be written, the messages are sent to the console
        logger instead so they are not lost.
        """
        if not error_messages:
            return

        content_to_write = "\n".join(error_messages) + "\n" + self.linesep_marker + "\n"

        try:
            with self.log_file_path.open("a", encoding="utf-8") as f:
                f.write(content_to_write)
        except OSError as e:
            logger.error(f"Failed to write to error log {self.log_file_path}: {e}")
            logger.error("Original error messages attempted to log:")
            for msg in error_messages:
                logger.error(f"  - {msg}")


class SuccessLog(Log):
    """
    Keeps a YAML list of validated conversions.

    Entries accumulate across runs: each write reads the existing list, appends
    the new entry with the next index and writes the whole list back, so the file
    is always a valid YAML document.
    """

    def __init__(self, success_log_dir: Path, filename: str = CONVERSION_REPORT_FILE_NAME):
        super().__init__(success_log_dir)
        self.log_file_path = self.log_dir / filename

    def _load_entries(self) -> List[Dict]:
        if not self.log_file_path.is_file():
            return []
        try:
            with self.log_file_path.open("r", encoding="utf-8") as f:
                loaded_entries = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(
                f"Error reading/parsing success log {self.log_file_path}: {e}. Starting a new log."
            )
            return []
        if loaded_entries is None:
            return []
        if not isinstance(loaded_entries, list):
            logger.warning(
                f"Success log {self.log_file_path} contained unexpected data. Starting a new log."
            )
            return []
        return loaded_entries

    def write(self, new_log_entry: dict):
        """
        Appends a structured entry to the YAML report.

        Args:
            new_log_entry: The data describing one validated conversion.
        """
        if not isinstance(new_log_entry, dict):
            logger.error("SuccessLog.write expects a dictionary as a log entry.")
            return

        log_entries = self._load_entries()
        current_max_index = max(
            (entry.get("index", 0) for entry in log_entries if isinstance(entry, dict)),
            default=0,
        )
        log_entries.append({"index": current_max_index + 1, **new_log_entry})

        try:
            with self.log_file_path.open("w", encoding="utf-8") as f:
                yaml.dump(
                    log_entries,
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                    indent=4,
                    width=220,
                )
        except OSError as e:
            logger.error(f"Failed to write to success log {self.log_file_path}: {e}")
