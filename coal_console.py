"""
Console sink for human-readable progress lines.

Progress lines go to stdout (diagnostics go to stderr through coal_logger).
Colors and cursor movement use ANSI escape sequences and are only emitted
when enabled, so captured output stays plain text.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
import sys
from typing import Optional, TextIO

ESC = "\x1b["
RESET = f"{ESC}0m"

COLOR_BRIGHT_GREEN = 92
COLOR_BRIGHT_YELLOW = 93
COLOR_BRIGHT_CYAN = 96
COLOR_BRIGHT_WHITE = 97

ERASE_WIDTH = 80


def supports_color(stream: TextIO) -> bool:
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class Console:
    """
    Line-oriented terminal writer.

    `color` controls both ANSI colors and cursor movement: a stream that
    cannot show colors cannot be redrawn in place either.
    """

    def __init__(self, stream: Optional[TextIO] = None, color: Optional[bool] = None):
        self.stream = stream if stream is not None else sys.stdout
        self.color = supports_color(self.stream) if color is None else color

    def colored(self, text: str, color: int) -> str:
        if not self.color:
            return text
        return f"{ESC}{color}m{text}{RESET}"

    def cursor_up(self, count: int) -> str:
        # ESC[0A moves one line on most terminals, so zero means no sequence.
        if not self.color or count <= 0:
            return ""
        return f"{ESC}{count}A"

    def write(self, text: str) -> None:
        self.stream.write(text)

    def println(self, text: str = "") -> None:
        self.stream.write(text + "\n")
        self.stream.flush()

    def erase_lines(self, count: int) -> None:
        """
        Blank out the last `count` printed lines and leave the cursor where
        the first of them started.
        """
        if not self.color or count <= 0:
            return
        self.write(self.cursor_up(count))
        for _ in range(count):
            self.write(" " * ERASE_WIDTH + "\n")
        self.write(self.cursor_up(count))
        self.stream.flush()
