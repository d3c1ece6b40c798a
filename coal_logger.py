"""
Logging utilities for the coalescer.

Diagnostics go to stderr and respect the CoalesceContext log level; the
human-facing progress lines are the console's job (see coal_console).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import sys
import time
import traceback
from typing import Optional

from coal_context import CoalesceContext, LogLevel


def rich_prefix(log_level: LogLevel) -> str:
    """'YYYY-mm-dd HH:MM:SS [LEVEL] ' for `-l` output; empty for SILENT."""
    if log_level == LogLevel.SILENT:
        return ""
    timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
    return f"{timestamp} [{log_level.name}] "


def log(context: CoalesceContext, log_level: LogLevel, message: str) -> None:
    """
    Write a diagnostic line to stderr unless the run is quieter than `log_level`.

    Diagnostics never go to stdout: stdout belongs to the console progress
    lines, which get erased and redrawn between renders.

    Args:
        context:    Run context; its log_level is the threshold and
                    log_rich_format adds a timestamp and level prefix.
                    Without a context the message is printed unconditionally.
        log_level:  Severity of this message.
        message:    Text to print; may span several lines (tracebacks).
    """
    if context is None:
        print("No context provided for logging.", file=sys.stderr)
        print(message, file=sys.stderr)
        return
    if context.log_level < log_level:
        return
    prefix = rich_prefix(log_level) if context.log_rich_format else ""
    print(f"{prefix}{message}", file=sys.stderr)


def log_error(context: CoalesceContext, message: str) -> None:
    """Report a failed run or a fatal condition (shown by default)."""
    log(context, LogLevel.ERROR, message)


def log_warning(context: CoalesceContext, message: str) -> None:
    log(context, LogLevel.WARNING, message)


def log_info(context: CoalesceContext, message: str) -> None:
    log(context, LogLevel.INFO, message)


def log_debug(context: CoalesceContext, message: str) -> None:
    log(context, LogLevel.DEBUG, message)


def log_exception(context: CoalesceContext, message: str, exc: BaseException) -> None:
    """
    Log an error message followed by the traceback of `exc`.

    Args:
        context: The run context containing the logging level.
        message: Header line describing what failed.
        exc:     The exception being reported.
    """
    log(context, LogLevel.ERROR, message)
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    log(context, LogLevel.ERROR, trace.rstrip())


def log_stage(context: CoalesceContext, stage: str, target: Optional[str] = None) -> None:
    """
    Log the start of a pipeline stage.

    Args:
        context: The run context containing logging flags.
        stage: The name of the stage (e.g., "Reading", "Merging").
        target: Optional directory or file the stage works on.
    """
    if target:
        log(context, LogLevel.INFO, f"{stage} '{target}'")
    else:
        log(context, LogLevel.INFO, f"{stage}...")
