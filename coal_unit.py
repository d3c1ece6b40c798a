#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import FrozenSet, List

IMPORT_PREFIX = "import "
PACKAGE_PREFIX = "package "


def is_import_line(line: str) -> bool:
    """
    Textual import-declaration check.

    Anything that starts like an import declaration counts, whether or not
    it would parse.
    """
    return line.startswith(IMPORT_PREFIX)


def is_package_line(line: str) -> bool:
    return line.startswith(PACKAGE_PREFIX)


def extract_imports(lines: List[str]) -> FrozenSet[str]:
    return frozenset(line for line in lines if is_import_line(line))


def extract_body(lines: List[str]) -> List[str]:
    """
    Lines that belong inside the merged output.

    Import and package declarations are dropped (imports are hoisted to the
    top of the output), then leading blank lines are skipped so the first
    body line is the type declaration.
    """
    body = [line for line in lines if not (is_import_line(line) or is_package_line(line))]
    start = 0
    while start < len(body) and not body[start].strip():
        start += 1
    return body[start:]


@dataclass
class Unit:
    """
    One loaded source file.

    - name: the file's base name (e.g. 'Player.java')
    - lines: the file's lines as read, without line terminators
    """
    name: str
    lines: List[str] = field(default_factory=list)

    @property
    def imports(self) -> FrozenSet[str]:
        return extract_imports(self.lines)

    @property
    def body(self) -> List[str]:
        return extract_body(self.lines)

    def __len__(self) -> int:
        return len(self.lines)
