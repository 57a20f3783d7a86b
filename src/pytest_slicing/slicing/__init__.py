"""Slicing of scenarios across a batch x fork grid of executors.

Exports:
    PartitionRequest: The (batch, fork) cell a process runs
    SlicingPartitioner: Weighted first-fit-decreasing partitioning
    PartitionResult: The scenarios assigned to one cell
    ScenarioFilter: Per-feature inclusion decision for a runner
    apply_partition: Hands a result to a SessionController
"""

from __future__ import annotations

from pytest_slicing.slicing.distribution import DistributionStrategy, FirstFitDecreasing
from pytest_slicing.slicing.filter import FilterStatus, ScenarioFilter
from pytest_slicing.slicing.partitioner import SlicingPartitioner, partition, plan_matrix
from pytest_slicing.slicing.request import InvalidPartitionRequest, PartitionRequest
from pytest_slicing.slicing.result import PartitionResult
from pytest_slicing.slicing.session import (
    PartitionCountMismatch,
    SessionController,
    apply_partition,
    check_plan_counts,
    check_scenario_counts,
)


__all__ = [
    'DistributionStrategy',
    'FilterStatus',
    'FirstFitDecreasing',
    'InvalidPartitionRequest',
    'PartitionCountMismatch',
    'PartitionRequest',
    'PartitionResult',
    'ScenarioFilter',
    'SessionController',
    'SlicingPartitioner',
    'apply_partition',
    'check_plan_counts',
    'check_scenario_counts',
    'partition',
    'plan_matrix',
]
