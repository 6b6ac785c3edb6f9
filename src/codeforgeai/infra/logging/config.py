from __future__ import annotations

"""
Logging Configuration Model.

The CLI builds one LoggingConfig from its verbosity switches and hands it
to configure_logging. Quiet by default: only warnings and errors reach the
terminal unless -v/-V is given.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

_LEVEL_MAP: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable logging setup for one process.

    Attributes:
        level: Level name ("DEBUG", "INFO", "WARNING", ...). Unknown names
            resolve to WARNING.
        console: Emit records on stderr.
        log_file: Optional rotating log file.
        max_bytes: Rotation threshold of the log file.
        backup_count: Rotated files kept next to the active one.
    """
    level: str = "WARNING"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 1024 * 1024
    backup_count: int = 2

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    @property
    def level_number(self) -> int:
        """Numeric logging level for `level`."""
        if not self.level:
            return logging.WARNING
        return _LEVEL_MAP.get(str(self.level).strip().upper(), logging.WARNING)
