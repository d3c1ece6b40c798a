#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from coal_console import COLOR_BRIGHT_GREEN, COLOR_BRIGHT_YELLOW, Console
from coal_unit import Unit

SOURCE_SUFFIX = ".java"
# A bare ".java" is five characters long.
MIN_NAME_LENGTH = 5


@dataclass
class LoadResult:
    """
    Units read in one run, plus how many console lines reading them printed.
    """
    units: List[Unit] = field(default_factory=list)
    lines_printed: int = 0


def is_eligible(path: Path) -> bool:
    name = path.name
    return path.is_file() and len(name) > MIN_NAME_LENGTH and name.endswith(SOURCE_SUFFIX)


def list_unit_files(directory: str | Path) -> List[Path]:
    """
    Eligible source files directly inside `directory`, sorted by name.

    Raises OSError if the directory cannot be listed.
    """
    directory = Path(directory)
    return sorted((p for p in directory.iterdir() if is_eligible(p)), key=lambda p: p.name)


def split_lines(text: str) -> List[str]:
    """
    Split on LF only; CR and CRLF were already turned into LF when reading.

    Unlike str.splitlines(), form feeds and Unicode separators such as
    U+2028 stay inside their line, as Java does not end lines on them.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def read_unit(path: str | Path) -> Unit:
    """
    Read one source file as UTF-8.

    Raises OSError if the file cannot be read or is not valid UTF-8.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise OSError(f"{path}: not valid UTF-8: {e}") from e
    return Unit(name=path.name, lines=split_lines(text))


def load_units(directory: str | Path, console: Console) -> LoadResult:
    """
    Read every eligible file in `directory`, reporting each on the console.

    Prints one "Read:" line per file, or a single "Read: Nothing" line when
    the directory holds no eligible file. I/O errors propagate.
    """
    result = LoadResult()
    for path in list_unit_files(directory):
        unit = read_unit(path)
        result.units.append(unit)
        console.println(f"Read: {console.colored(unit.name, COLOR_BRIGHT_GREEN)} ({len(unit)} lines)")
        result.lines_printed += 1
    if result.lines_printed == 0:
        console.println(f"Read: {console.colored('Nothing', COLOR_BRIGHT_YELLOW)}")
        result.lines_printed += 1
    return result
