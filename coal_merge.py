"""
Merge engine: turns the loaded units into a single compilation unit.

The entry unit (Player.java) becomes the top-level class. Every other unit is
nested inside it as a static class at the code placeholder, and all imports
are hoisted to the top of the output.

Placeholders recognized in the entry unit (substrings, anywhere in a line):

    [[GCC::TIMESTAMP]]   replaced by a "// uuuu-MM-dd|HH:mm:ss.SSS" comment
    [[GCC::CODE]]        replaced by the nested bodies of all other units

Each line holding a placeholder is replaced as a whole; every such line is
substituted independently.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from coal_internal_error import MissingEntryUnitError
from coal_unit import Unit

# Main class file as required by CodinGame.
ENTRY_FILENAME = "Player.java"

TIMESTAMP_TOKEN = "[[GCC::TIMESTAMP]]"
CODE_TOKEN = "[[GCC::CODE]]"

INDENT = "    "
STATIC_MODIFIER = "static "
COMMENT_PREFIX = "// "


def format_timestamp(now: datetime) -> str:
    """
    Render `now` as uuuu-MM-dd|HH:mm:ss.SSS in the local time zone.

    Naive datetimes are taken as local time already.
    """
    if now.tzinfo is not None:
        now = now.astimezone()
    return now.strftime("%Y-%m-%d|%H:%M:%S.") + f"{now.microsecond // 1000:03d}"


def partition_units(units: Sequence[Unit], entry_filename: str = ENTRY_FILENAME) -> Tuple[Unit, List[Unit]]:
    """
    Split `units` into the entry unit and the others, keeping the others in
    their original order. The first unit named `entry_filename` wins.

    Raises MissingEntryUnitError if no unit carries the entry name.
    """
    entry: Optional[Unit] = None
    others: List[Unit] = []
    for unit in units:
        if entry is None and unit.name == entry_filename:
            entry = unit
        else:
            others.append(unit)
    if entry is None:
        raise MissingEntryUnitError(entry_filename, [u.name for u in units])
    return entry, others


def collect_imports(units: Iterable[Unit]) -> Set[str]:
    imports: Set[str] = set()
    for unit in units:
        imports.update(unit.imports)
    return imports


def nest_unit_lines(lines: Sequence[str]) -> List[str]:
    """
    Reindent a unit body one level and make its first line a static
    declaration, so the nested class does not need an enclosing instance.

    An empty body yields no lines.
    """
    nested: List[str] = []
    for index, line in enumerate(lines):
        if index == 0:
            nested.append(INDENT + STATIC_MODIFIER + line)
        else:
            nested.append(INDENT + line)
    return nested


def expand_code(others: Sequence[Unit]) -> List[str]:
    """Nested bodies of `others`, each followed by one blank line."""
    lines: List[str] = []
    for unit in others:
        lines.extend(nest_unit_lines(unit.body))
        lines.append("")
    return lines


def timestamp_line(line: str, now: datetime) -> str:
    # The comment keeps the placeholder line's indentation.
    indent = line[: len(line) - len(line.lstrip())]
    return f"{indent}{COMMENT_PREFIX}{format_timestamp(now)}"


def expand_body(entry: Unit, others: Sequence[Unit], now: datetime) -> List[str]:
    """
    Entry unit body with both placeholders expanded.

    A line holding both tokens is treated as a timestamp line.
    """
    out: List[str] = []
    for line in entry.body:
        if TIMESTAMP_TOKEN in line:
            out.append(timestamp_line(line, now))
        elif CODE_TOKEN in line:
            out.extend(expand_code(others))
        else:
            out.append(line)
    return out


def render_imports(imports: Set[str]) -> List[str]:
    """
    Import section: sorted import lines, then one blank line.

    Sorting only keeps the output stable between runs; consumers must not
    depend on the order.
    """
    return sorted(imports) + [""]


def merge_lines(units: Sequence[Unit], now: Optional[datetime] = None,
                entry_filename: str = ENTRY_FILENAME) -> List[str]:
    entry, others = partition_units(units, entry_filename)
    if now is None:
        now = datetime.now()
    return render_imports(collect_imports(units)) + expand_body(entry, others, now)


def merge(units: Sequence[Unit], now: Optional[datetime] = None,
          entry_filename: str = ENTRY_FILENAME) -> str:
    """
    Build the merged output text for `units`.

    Args:
        units:          Units in discovery order.
        now:            Time written at the timestamp placeholder (default: now).
        entry_filename: Name of the unit everything else is nested into.

    Returns:
        The import section followed by the expanded entry body, every line
        newline-terminated.

    Raises:
        MissingEntryUnitError: if no unit is named `entry_filename`.
    """
    return "".join(line + "\n" for line in merge_lines(units, now, entry_filename))
