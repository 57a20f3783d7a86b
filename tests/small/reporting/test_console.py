"""Tests for the slicing plan console reporter."""

from __future__ import annotations

from io import StringIO
import sys

import pytest

from pytest_slicing.reporting.console import SlicePlanReporter
from pytest_slicing.slicing.partitioner import partition, plan_matrix
from pytest_slicing.slicing.request import PartitionRequest


@pytest.mark.small
class TestSlicePlanReporter:
    """Tests for SlicePlanReporter."""

    def test_defaults_to_stdout(self):
        assert SlicePlanReporter().output is sys.stdout

    def test_report_describes_cell(self, weighted_catalog):
        features, stats = weighted_catalog([4.0, 3.0, 2.0, 1.0])
        result = partition(features, stats, PartitionRequest(batch_number=1, batch_count=2))
        output = StringIO()

        SlicePlanReporter(output).write_report(result)
        text = output.getvalue()

        assert 'pytest-slicing plan' in text
        assert 'Running batch 1 of 2, fork 1 of 1' in text
        assert 'This cell: 2 of 4 scenarios (5.0s estimated)' in text
        assert 'Cells:' not in text

    def test_report_lists_every_cell_of_plan(self, weighted_catalog):
        features, stats = weighted_catalog([4.0, 3.0, 2.0, 1.0])
        plan = plan_matrix(features, stats, 2, 2)
        output = StringIO()

        SlicePlanReporter(output).write_report(plan[(2, 1)], plan)
        lines = output.getvalue().splitlines()

        assert 'Cells:' in lines
        cell_lines = [line for line in lines if line.startswith('  batch')]
        assert [line.split()[:4] for line in cell_lines] == [
            ['batch', '1', 'fork', '1'],
            ['batch', '1', 'fork', '2'],
            ['batch', '2', 'fork', '1'],
            ['batch', '2', 'fork', '2'],
        ]

    def test_report_is_framed(self, weighted_catalog):
        features, stats = weighted_catalog([1.0])
        output = StringIO()

        SlicePlanReporter(output).write_report(partition(features, stats, PartitionRequest()))
        lines = output.getvalue().splitlines()

        assert lines[0].startswith('=')
        assert lines[-1] == '=' * SlicePlanReporter.BORDER_WIDTH
