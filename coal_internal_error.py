#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

# coal_internal_error.py
from __future__ import annotations

from typing import Optional


class InternalCoalescerError(RuntimeError):
    """
    Violated pipeline invariant.
    Not for user mistakes (those are logged diagnostics with exit codes).
    """

    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.filename = filename

    def format(self) -> str:
        message = self.message
        if not "[COAL-ICE-" in message:
            message = f"[COAL-ICE-9999] {message}"
        if self.filename:
            return f"{self.filename}: internal coalescer error: {message}"
        return f"internal coalescer error: {message}"


class MissingEntryUnitError(InternalCoalescerError):
    """Raised when no loaded unit carries the entry filename."""

    def __init__(self, entry_filename: str, available: list[str] | None = None):
        names = ", ".join(available) if available else "<none>"
        super().__init__(
            f"[COAL-ICE-0010] entry unit '{entry_filename}' not found among loaded units: {names}",
            filename=entry_filename,
        )
        self.entry_filename = entry_filename
        self.available = list(available or [])
