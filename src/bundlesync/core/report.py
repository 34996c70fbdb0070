"""Per-bundle report output.

Workers finish in any order; each one hands a complete block of text to the
sink, which prints it in one piece so blocks never interleave.
"""

import threading
from abc import ABC, abstractmethod
from typing import IO

from rich.console import Console

# Every report block starts with this marker followed by the bundle URL or path.
BLOCK_MARKER = "============ "
# Marks a secondary failure inside a block.
DETAIL_MARKER = "------------ "


class ReportSink(ABC):
    """Destination of report blocks. Must tolerate concurrent emit() calls."""

    @abstractmethod
    def emit(self, block: str) -> None:
        """Output one report block atomically."""


def report_console(file: IO[str] | None = None) -> Console:
    """Console that prints report text verbatim (stdout when file is None).

    Report text holds URLs, brackets and commit subjects such as ":bug: fix", so
    markup, highlighting and emoji codes are all off.
    """
    return Console(file=file, highlight=False, markup=False, emoji=False, soft_wrap=True)


class ConsoleReportSink(ReportSink):
    """Prints blocks through a report_console()."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or report_console()
        self._lock = threading.Lock()

    def emit(self, block: str) -> None:
        with self._lock:
            self._console.print(block)


class RecordingReportSink(ReportSink):
    """Keeps blocks in memory, in emission order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._blocks: list[str] = []

    @property
    def blocks(self) -> list[str]:
        with self._lock:
            return list(self._blocks)

    def emit(self, block: str) -> None:
        with self._lock:
            self._blocks.append(block)
