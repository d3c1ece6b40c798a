"""
Run context for the coalescer.

This module defines the CoalesceContext dataclass which holds the options that
every stage of a run looks at (directories, logging, console rendering,
file watching).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path

from coal_merge import ENTRY_FILENAME


class LogLevel(IntEnum):
    """Hierarchical logging levels for the coalescer."""
    SILENT = 0      # No logging
    ERROR = 3       # Error messages only (CLI default)
    WARNING = 6     # Warning messages
    INFO = 10       # General progress messages (-v)
    DEBUG = 30      # Detailed diagnostic information (-vvv)


@dataclass
class CoalesceContext:
    """
    Holds the options of one coalescer process.

    Attributes:
        watched_dir:        Directory whose eligible source files are merged.
        output_dir:         Directory receiving the merged entry file.
        use_polling:        If True, watch the directory by polling instead of
                            native file-system notifications.
        color:              If True, console progress lines use ANSI colors.
        log_rich_format:    If True, emit logs in rich format: may include log level, timestamps, etc.
        log_level:          Current logging level.
    """
    watched_dir: Path = field(default_factory=lambda: Path("."))
    output_dir: Path = field(default_factory=lambda: Path("out"))
    use_polling: bool = False
    color: bool = True
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING

    @property
    def output_path(self) -> Path:
        return self.output_dir / ENTRY_FILENAME

    @staticmethod
    def default() -> 'CoalesceContext':
        """Create a CoalesceContext with default settings."""
        return CoalesceContext(log_level=LogLevel.WARNING)
