"""Console reporter for the slicing plan.

Produces output in the following format::

    ==================== pytest-slicing plan ====================

    Running batch 1 of 2, fork 2 of 2
    This cell: 7 of 30 scenarios (41.5s estimated)

    Cells:
      batch 1 fork 1     8 scenarios     42.0s
      batch 1 fork 2     7 scenarios     41.5s
      ...
    ==================================================================
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, TextIO


if TYPE_CHECKING:
    from collections.abc import Mapping

    from pytest_slicing.slicing.result import PartitionResult


class SlicePlanReporter:
    """Reporter that writes the slicing plan to the console.

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

    def write_report(
        self,
        result: PartitionResult,
        plan: Mapping[tuple[int, int], PartitionResult] | None = None,
    ) -> None:
        """Write the slicing report.

        Args:
            result: The partition of this process's cell.
            plan: Optional results of every cell, keyed by (batch, fork).
        """
        self._write_header()
        self._write_blank_line()
        self._write_line(f'Running {result.request}')
        self._write_line(
            f'This cell: {len(result)} of {result.total_scenario_count} scenarios '
            f'({result.total_weight:.1f}s estimated)'
        )

        if plan:
            self._write_blank_line()
            self._write_plan(plan)

        self._write_footer()

    def _write_plan(self, plan: Mapping[tuple[int, int], PartitionResult]) -> None:
        """Write one line per cell of the plan."""
        self._write_line('Cells:')
        for (batch_number, fork_number), cell in sorted(plan.items()):
            label = f'batch {batch_number} fork {fork_number}'
            self._write_line(f'  {label:<18} {len(cell):>5} scenarios {cell.total_weight:>10.1f}s')

    def _write_header(self) -> None:
        """Write the report header."""
        title = ' pytest-slicing plan '
        border_len = (self.BORDER_WIDTH - len(title)) // 2
        header = f'{self.BORDER_CHAR * border_len}{title}{self.BORDER_CHAR * border_len}'
        self._write_line(header)

    def _write_footer(self) -> None:
        """Write the report footer."""
        self._write_line(self.BORDER_CHAR * self.BORDER_WIDTH)

    def _write_blank_line(self) -> None:
        """Write a blank line."""
        self.output.write('\n')

    def _write_line(self, text: str) -> None:
        """Write a line of text followed by newline."""
        self.output.write(text + '\n')
