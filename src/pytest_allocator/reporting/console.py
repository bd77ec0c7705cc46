"""Console reporter for test allocations.

Produces human-readable output for terminal display: totals first, then
one line per job.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO


if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from pytest_allocator.reporting.manifest import ManifestEntry


class ConsoleReporter:
    """Reporter that writes an allocation summary to the console.

    Produces output in the following format:

        ====================== pytest-allocator ======================

        Jobs: 2  Classes: 3  Methods: 37

          job 0:   15 methods in 1 class
          job 1:   22 methods in 2 classes

        Manifest written to build/test-allocation.json
        ==============================================================

    Attributes:
        output: The file-like object to write to.
    """

    BORDER_CHAR = '='
    BORDER_WIDTH = 70

    def __init__(self, output: TextIO | None = None) -> None:
        """Initialize the console reporter.

        Args:
            output: File-like object to write to. Defaults to sys.stdout.
        """
        self.output = output or sys.stdout

    def write_report(self, entries: Sequence[ManifestEntry], output_path: Path | None = None) -> None:
        """Write the allocation summary to the output.

        Args:
            entries: The manifest entries, in job order.
            output_path: Where the manifest was written, if anywhere.
        """
        self._write_header()
        self._write_blank_line()

        if not entries:
            self._write_line('No test classes allocated.')
        else:
            self._write_totals(entries)
            self._write_blank_line()
            self._write_jobs(entries)

        if output_path is not None:
            self._write_blank_line()
            self._write_line(f'Manifest written to {output_path}')
        self._write_footer()

    def _write_header(self) -> None:
        """Write the report header."""
        title = ' pytest-allocator '
        border_len = (self.BORDER_WIDTH - len(title)) // 2
        header = f'{self.BORDER_CHAR * border_len}{title}{self.BORDER_CHAR * border_len}'
        self._write_line(header)

    def _write_footer(self) -> None:
        """Write the report footer."""
        self._write_line(self.BORDER_CHAR * self.BORDER_WIDTH)

    def _write_totals(self, entries: Sequence[ManifestEntry]) -> None:
        total_classes = sum(len(entry.classes) for entry in entries)
        total_methods = sum(entry.total_methods for entry in entries)
        self._write_line(f'Jobs: {len(entries)}  Classes: {total_classes}  Methods: {total_methods}')

    def _write_jobs(self, entries: Sequence[ManifestEntry]) -> None:
        for entry in entries:
            noun = 'class' if len(entry.classes) == 1 else 'classes'
            self._write_line(f'  job {entry.job_index}: {entry.total_methods:4d} methods in {len(entry.classes)} {noun}')

    def _write_blank_line(self) -> None:
        """Write a blank line."""
        self.output.write('\n')

    def _write_line(self, text: str) -> None:
        """Write a line of text followed by newline."""
        self.output.write(text + '\n')
