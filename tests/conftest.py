#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import io
import sys
from datetime import datetime
from pathlib import Path
from textwrap import dedent

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from coal_console import Console
from coal_context import CoalesceContext, LogLevel

FIXED_NOW = datetime(2026, 3, 14, 9, 26, 53, 589123)
FIXED_STAMP = "2026-03-14|09:26:53.589"


@pytest.fixture
def watched_dir(tmp_path: Path) -> Path:
    path = tmp_path / "src"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def write_source(watched_dir: Path):
    """Write a source file into the watched directory.

    Usage:
        def test_something(write_source):
            write_source("Player.java", '''
                class Player {
                }
            ''')
    """

    def _write(name: str, content: str) -> Path:
        file_path = watched_dir / name
        file_path.write_text(dedent(content).lstrip("\n"), encoding="utf-8")
        return file_path

    return _write


@pytest.fixture
def console_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def console(console_stream: io.StringIO) -> Console:
    return Console(console_stream, color=False)


@pytest.fixture
def context(watched_dir: Path, output_dir: Path) -> CoalesceContext:
    return CoalesceContext(
        watched_dir=watched_dir,
        output_dir=output_dir,
        color=False,
        log_level=LogLevel.ERROR,
    )


PLAYER_SOURCE = """
    import java.util.*;

    class Player {
        // [[GCC::TIMESTAMP]]

        public static void main(String[] args) {
            new Grid();
        }

        // [[GCC::CODE]]
    }
"""

GRID_SOURCE = """
    import java.util.*;
    import java.util.stream.Collectors;

    class Grid {
        int width;
    }
"""


@pytest.fixture
def player_project(write_source):
    """Watched directory holding Player.java and Grid.java."""
    write_source("Player.java", PLAYER_SOURCE)
    write_source("Grid.java", GRID_SOURCE)


def output_lines_without_timestamp(text: str) -> list[str]:
    return [line for line in text.splitlines() if not line.lstrip().startswith("// 2")]
