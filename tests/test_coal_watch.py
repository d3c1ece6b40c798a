#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import queue
from datetime import datetime

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

import coal_watch
from coal_internal_error import MissingEntryUnitError
from coal_merge import ENTRY_FILENAME
from coal_watch import ChangeTickHandler, DirectoryEvents, render, watch
from conftest import FIXED_NOW, FIXED_STAMP, output_lines_without_timestamp


class ScriptedEvents:
    """Event source replaying a fixed list of wait() outcomes.

    Each outcome is True (a change), False (subscription lost), an exception
    instance to raise, or a callable run before reporting a change.
    """

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.waits = 0
        self.drains = 0

    def wait(self) -> bool:
        self.waits += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            outcome()
            return True
        return outcome

    def drain(self) -> int:
        self.drains += 1
        return 0


class StubObserver:
    def __init__(self, alive: bool):
        self.alive = alive

    def is_alive(self) -> bool:
        return self.alive


def writes(console_stream) -> int:
    return console_stream.getvalue().count("Write: ")


def test_render_writes_output_and_counts_lines(context, console, console_stream, player_project):
    printed = render(context, console, now=FIXED_NOW)

    text = context.output_path.read_text(encoding="utf-8")
    assert printed == 3
    assert console_stream.getvalue().splitlines() == [
        "Read: Grid.java (6 lines)",
        "Read: Player.java (11 lines)",
        f"Write: {ENTRY_FILENAME}",
    ]
    assert text.splitlines() == [
        "import java.util.*;",
        "import java.util.stream.Collectors;",
        "",
        "class Player {",
        f"    // {FIXED_STAMP}",
        "",
        "    public static void main(String[] args) {",
        "        new Grid();",
        "    }",
        "",
        "    static class Grid {",
        "        int width;",
        "    }",
        "",
        "}",
    ]


def test_render_without_entry_writes_nothing(context, console, write_source):
    write_source("Grid.java", "class Grid {}")

    with pytest.raises(MissingEntryUnitError):
        render(context, console, now=FIXED_NOW)

    assert not context.output_path.exists()


def test_render_twice_differs_only_in_timestamp(context, console, player_project):
    render(context, console, now=datetime(2026, 1, 1, 8, 0, 0))
    first = context.output_path.read_text(encoding="utf-8")
    render(context, console, now=datetime(2026, 1, 1, 8, 0, 5))
    second = context.output_path.read_text(encoding="utf-8")

    assert first != second
    assert output_lines_without_timestamp(first) == output_lines_without_timestamp(second)


def test_render_picks_up_changes(context, console, player_project, write_source):
    render(context, console, now=FIXED_NOW)
    write_source("Unit.java", "class Unit {}")
    render(context, console, now=FIXED_NOW)

    assert "    static class Unit {}" in context.output_path.read_text(encoding="utf-8").splitlines()


def test_watch_renders_initially_and_once_per_change(context, console, console_stream, player_project):
    events = ScriptedEvents([True, True, False])

    rc = watch(context, events, console)

    assert rc == 1
    assert writes(console_stream) == 3
    assert events.drains == 3
    assert console_stream.getvalue().startswith(f"Watching: {context.watched_dir}\nOutput: {context.output_path}\n")


def test_watch_exits_when_watch_cannot_be_rearmed(context, console, console_stream, player_project, capsys):
    rc = watch(context, ScriptedEvents([False]), console)

    assert rc == 1
    assert writes(console_stream) == 1
    assert "Can't re-arm directory watch" in capsys.readouterr().err


def test_watch_interrupt_is_graceful(context, console, console_stream, player_project):
    rc = watch(context, ScriptedEvents([KeyboardInterrupt()]), console)

    assert rc == 0
    assert writes(console_stream) == 1
    assert context.output_path.exists()


def test_watch_survives_missing_entry(context, console, console_stream, write_source, capsys):
    write_source("Grid.java", "class Grid {}")

    def restore_entry():
        write_source(ENTRY_FILENAME, "class Player {\n    // [[GCC::CODE]]\n}")

    rc = watch(context, ScriptedEvents([restore_entry, False]), console)

    assert rc == 1
    assert "[COAL-ICE-0010]" in capsys.readouterr().err
    assert writes(console_stream) == 1
    assert context.output_path.read_text(encoding="utf-8").splitlines() == [
        "",
        "class Player {",
        "    static class Grid {}",
        "",
        "}",
    ]


def test_watch_stops_on_io_failure(context, console, capsys):
    context.watched_dir.rmdir()

    rc = watch(context, ScriptedEvents([True]), console)

    err = capsys.readouterr().err
    assert rc == 1
    assert "[COAL-0010]" in err
    assert "Traceback" in err


def test_handler_turns_file_events_into_ticks():
    ticks = queue.Queue()
    handler = ChangeTickHandler(ticks)

    handler.dispatch(FileModifiedEvent("/w/A.java"))
    handler.dispatch(FileDeletedEvent("/w/B.java"))
    handler.dispatch(FileCreatedEvent("/w/C.java"))
    handler.dispatch(FileMovedEvent("/w/D.java~", "/w/D.java"))
    handler.dispatch(DirModifiedEvent("/w"))

    seen = []
    while not ticks.empty():
        seen.append(ticks.get_nowait())
    assert seen == ["/w/A.java", "/w/B.java", "/w/C.java", "/w/D.java~"]


def test_wait_returns_on_tick(tmp_path):
    events = DirectoryEvents(tmp_path)
    events._observer = StubObserver(alive=True)
    events.ticks.put("/w/A.java")

    assert events.wait() is True


def test_wait_reports_lost_subscription(tmp_path, monkeypatch):
    monkeypatch.setattr(coal_watch, "ARM_CHECK_INTERVAL", 0.01)
    events = DirectoryEvents(tmp_path)
    events._observer = StubObserver(alive=False)

    assert events.wait() is False


def test_drain_discards_pending_ticks(tmp_path):
    events = DirectoryEvents(tmp_path)
    for name in ("a", "b", "c"):
        events.ticks.put(name)

    assert events.drain() == 3
    assert events.drain() == 0


def test_polling_observer_lifecycle(tmp_path):
    events = DirectoryEvents(tmp_path, use_polling=True)
    assert not events.is_armed()

    with events:
        assert events.is_armed()

    assert not events.is_armed()


def test_watch_stops_on_undecodable_source(context, console, player_project, watched_dir, capsys):
    (watched_dir / "Latin.java").write_bytes(b"// caf\xe9\nclass Latin {}\n")

    rc = watch(context, ScriptedEvents([True]), console)

    err = capsys.readouterr().err
    assert rc == 1
    assert "[COAL-0010]" in err
    assert "Latin.java" in err
    assert not context.output_path.exists()
