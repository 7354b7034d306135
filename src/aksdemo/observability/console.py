"""User-facing progress output.

Status lines are printed to stdout with a colored level tag, separate
from the structured logs on stderr.
"""

from __future__ import annotations

import os
import sys
from typing import TextIO


RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"
RESET = "\033[0m"


class Console:
    """Prints `[INFO]`, `[SUCCESS]`, `[WARNING]` and `[ERROR]` lines."""

    def __init__(self, stream: TextIO | None = None, *, color: bool | None = None) -> None:
        self._stream = stream
        if color is None:
            target = stream or sys.stdout
            color = target.isatty() and "NO_COLOR" not in os.environ
        self.color = color

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so pytest's capsys sees the output.
        return self._stream or sys.stdout

    def _emit(self, tag: str, color: str, message: str) -> None:
        if self.color:
            print(f"{color}[{tag}]{RESET} {message}", file=self.stream)
        else:
            print(f"[{tag}] {message}", file=self.stream)

    def status(self, message: str) -> None:
        self._emit("INFO", BLUE, message)

    def success(self, message: str) -> None:
        self._emit("SUCCESS", GREEN, message)

    def warning(self, message: str) -> None:
        self._emit("WARNING", YELLOW, message)

    def error(self, message: str) -> None:
        self._emit("ERROR", RED, message)

    def echo(self, message: str = "") -> None:
        """Print a plain line (tables, command output)."""
        print(message, file=self.stream)
