#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import queue
from datetime import datetime
from pathlib import Path
from typing import Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from coal_console import COLOR_BRIGHT_CYAN, COLOR_BRIGHT_WHITE, Console
from coal_context import CoalesceContext
from coal_internal_error import InternalCoalescerError
from coal_logger import log_debug, log_error, log_exception, log_info, log_stage
from coal_merge import ENTRY_FILENAME, merge
from coal_reader import load_units

# How often a blocked wait checks that the observer thread is still running.
ARM_CHECK_INTERVAL = 0.5


class ChangeTickHandler(FileSystemEventHandler):
    """
    Turns watchdog file events into "something changed" ticks.

    Runs on the observer thread; the only thing it touches is the tick queue.
    Directory events are dropped (a non-recursive watch still reports
    modifications of sub-directory entries, such as an output directory
    placed inside the watched one).
    """

    RELEVANT_EVENTS = frozenset({
        EVENT_TYPE_MODIFIED,
        EVENT_TYPE_DELETED,
        EVENT_TYPE_CREATED,
        EVENT_TYPE_MOVED,
    })

    def __init__(self, ticks: queue.Queue, context: Optional[CoalesceContext] = None):
        super().__init__()
        self.ticks = ticks
        self.context = context or CoalesceContext.default()

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in self.RELEVANT_EVENTS:
            return
        log_debug(self.context, f"Change detected: {event.event_type} {event.src_path}")
        self.ticks.put(event.src_path)


class DirectoryEvents:
    """
    Event source over one directory, backed by a watchdog observer.

    Usage:
        with DirectoryEvents(path) as events:
            while events.wait():
                ...
                events.drain()

    wait() blocks until at least one change tick arrives and returns True, or
    returns False once the observer thread has stopped (the watch can no
    longer be re-armed). Ticks carry no meaning beyond "re-render".
    """

    def __init__(self, directory: str | Path, use_polling: bool = False,
                 context: Optional[CoalesceContext] = None):
        self.directory = Path(directory)
        self.use_polling = use_polling
        self.context = context or CoalesceContext.default()
        self.ticks: queue.Queue = queue.Queue()
        self._observer = None

    def _make_observer(self):
        if self.use_polling:
            return PollingObserver()
        return Observer()

    def start(self) -> None:
        observer = self._make_observer()
        observer.schedule(ChangeTickHandler(self.ticks, self.context), str(self.directory), recursive=False)
        observer.start()
        self._observer = observer
        log_info(self.context, f"Observing {self.directory} ({'polling' if self.use_polling else 'native'})")

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None

    def is_armed(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def wait(self) -> bool:
        while True:
            try:
                self.ticks.get(timeout=ARM_CHECK_INTERVAL)
                return True
            except queue.Empty:
                if not self.is_armed():
                    return False

    def drain(self) -> int:
        """Discard pending ticks; returns how many were dropped."""
        dropped = 0
        while True:
            try:
                self.ticks.get_nowait()
            except queue.Empty:
                return dropped
            dropped += 1

    def __enter__(self) -> "DirectoryEvents":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


def write_output(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")


def render(context: CoalesceContext, console: Console, lines_to_erase: int = 0,
           now: Optional[datetime] = None) -> int:
    """
    One full pipeline run: erase the previous progress lines, read all
    units, merge them and overwrite the output file.

    Args:
        context:        Run options (directories, logging).
        console:        Sink for progress lines.
        lines_to_erase: Progress lines printed by the previous run.
        now:            Timestamp to write (default: now).

    Returns:
        Number of progress lines printed by this run.

    Raises:
        OSError: reading the directory or writing the output failed.
        MissingEntryUnitError: the entry unit is not among the loaded units;
            the output file is left untouched.
    """
    console.erase_lines(lines_to_erase)

    log_stage(context, "Reading", str(context.watched_dir))
    loaded = load_units(context.watched_dir, console)

    log_stage(context, "Merging", f"{len(loaded.units)} unit(s)")
    text = merge(loaded.units, now=now)

    log_stage(context, "Writing", str(context.output_path))
    write_output(context.output_path, text)
    console.println(f"Write: {console.colored(ENTRY_FILENAME, COLOR_BRIGHT_CYAN)}")
    return loaded.lines_printed + 1


def print_banner(context: CoalesceContext, console: Console) -> None:
    console.println(f"Watching: {console.colored(str(context.watched_dir), COLOR_BRIGHT_WHITE)}")
    console.println(f"Output: {console.colored(str(context.output_path), COLOR_BRIGHT_WHITE)}")


def watch(context: CoalesceContext, events, console: Console) -> int:
    """
    Render once, then re-render on every tick from `events` until the event
    source goes away or the wait is interrupted.

    `events` is any object with wait() -> bool and drain() -> int, already
    started (see DirectoryEvents).

    Returns the process exit code: 0 on interrupt, 1 on I/O failure or when
    the watch could not be re-armed.
    """
    print_banner(context, console)
    lines_printed = 0
    renders = 0
    while True:
        try:
            lines_printed = render(context, console, lines_printed)
            renders += 1
        except InternalCoalescerError as e:
            log_error(context, e.format())
            # Leave this run's lines and the error on screen.
            lines_printed = 0
        except OSError as e:
            log_exception(context, f"error: [COAL-0010] I/O failure: {e}", e)
            return 1

        dropped = events.drain()
        if dropped:
            log_debug(context, f"Discarded {dropped} change(s) seen while rendering")

        try:
            if not events.wait():
                log_error(context, "Can't re-arm directory watch. Exiting!")
                return 1
        except KeyboardInterrupt:
            log_info(context, f"Interrupted after {renders} render(s); stopping")
            return 0
