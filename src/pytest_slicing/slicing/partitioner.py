"""Slicing of a scenario catalog across the batch x fork grid.

Every process computes its own cell independently. Given the same catalog,
statistics and grid dimensions, all processes agree on the assignment
without talking to each other, and every tag-filtered scenario lands in
exactly one cell:

1. Tag-filter the catalog.
2. Weigh every scenario from the historical statistics.
3. Split into ``batch_count`` buckets with first-fit-decreasing and keep
   bucket ``batch_number``.
4. Split that batch into ``fork_count`` buckets the same way and keep
   bucket ``fork_number``.

With a single cell (``batch_count == fork_count == 1``) steps 2-4 are
skipped and no statistics are needed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pytest_slicing.catalog.model import WeightedScenario
from pytest_slicing.catalog.tags import TagFilter
from pytest_slicing.slicing.distribution import FirstFitDecreasing, sort_heaviest_first
from pytest_slicing.slicing.request import PartitionRequest
from pytest_slicing.slicing.result import PartitionResult


if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from pytest_slicing.catalog.model import Feature, Scenario
    from pytest_slicing.slicing.distribution import DistributionStrategy
    from pytest_slicing.statistics.store import HistoricalStatistics


logger = logging.getLogger(__name__)


def _scenarios_of(features: Iterable[Feature]) -> list[Scenario]:
    return [scenario for feature in features for scenario in feature.scenarios]


class SlicingPartitioner:
    """Computes the scenarios of one grid cell.

    Attributes:
        statistics: Historical durations used to weigh scenarios.
        strategy: How scenarios are bucketed at each phase.
    """

    def __init__(
        self,
        statistics: HistoricalStatistics,
        strategy: DistributionStrategy | None = None,
    ) -> None:
        """Create a partitioner.

        Args:
            statistics: Read-only statistics snapshot.
            strategy: Bucketing strategy. Defaults to first-fit-decreasing.
        """
        self.statistics = statistics
        self.strategy = strategy or FirstFitDecreasing()

    def weigh(self, scenarios: Iterable[Scenario]) -> list[WeightedScenario]:
        """Attach a weight to every scenario, heaviest first."""
        return sort_heaviest_first(
            WeightedScenario(scenario=scenario, weight=self.statistics.weight_of(scenario)) for scenario in scenarios
        )

    def partition(self, catalog: Sequence[Feature], request: PartitionRequest) -> PartitionResult:
        """Select the scenarios of the requested cell.

        Args:
            catalog: Discovered features, before tag filtering.
            request: The grid cell to compute.

        Returns:
            The cell's weighted scenarios and the tag-filtered total.

        Raises:
            InvalidTagExpression: If a tag expression cannot be parsed.
        """
        catalog = tuple(catalog)
        filtered = _scenarios_of(TagFilter(request.tag_expressions).apply(catalog))

        if request.is_single_cell:
            # Weights are irrelevant with a single cell, keep discovery order
            cell = tuple(WeightedScenario(scenario=scenario, weight=0.0) for scenario in filtered)
            return PartitionResult(
                scenarios=cell,
                total_scenario_count=len(filtered),
                features=catalog,
                request=request,
            )

        weighted = self.weigh(filtered)
        batch = self.strategy.distribute(weighted, request.batch_count)[request.batch_number - 1]
        fork = self.strategy.distribute(sort_heaviest_first(batch), request.fork_count)[request.fork_number - 1]

        logger.debug(
            'Selected %d of %d scenario(s) for %s (batch holds %d)',
            len(fork),
            len(filtered),
            request,
            len(batch),
        )
        return PartitionResult(
            scenarios=tuple(sort_heaviest_first(fork)),
            total_scenario_count=len(filtered),
            features=catalog,
            request=request,
        )


def partition(
    catalog: Sequence[Feature],
    statistics: HistoricalStatistics,
    request: PartitionRequest,
) -> PartitionResult:
    """Select the scenarios of one grid cell with first-fit-decreasing.

    Args:
        catalog: Discovered features, before tag filtering.
        statistics: Historical durations.
        request: The grid cell to compute.

    Returns:
        The PartitionResult for the requested cell.
    """
    return SlicingPartitioner(statistics).partition(catalog, request)


def plan_matrix(
    catalog: Sequence[Feature],
    statistics: HistoricalStatistics,
    batch_count: int,
    fork_count: int,
    tag_expressions: Sequence[str] = (),
) -> dict[tuple[int, int], PartitionResult]:
    """Compute every cell of the grid.

    Useful for diagnostics: the cells together must cover the tag-filtered
    catalog exactly once.

    Args:
        catalog: Discovered features, before tag filtering.
        statistics: Historical durations.
        batch_count: Number of batches.
        fork_count: Number of forks per batch.
        tag_expressions: Tag expressions every scenario must satisfy.

    Returns:
        Mapping of (batch_number, fork_number) to that cell's result.

    Raises:
        InvalidPartitionRequest: If a count is not positive.
    """
    PartitionRequest(batch_count=batch_count, fork_count=fork_count)

    partitioner = SlicingPartitioner(statistics)
    catalog = tuple(catalog)
    plan: dict[tuple[int, int], PartitionResult] = {}
    for batch_number in range(1, batch_count + 1):
        for fork_number in range(1, fork_count + 1):
            request = PartitionRequest(
                batch_number=batch_number,
                batch_count=batch_count,
                fork_number=fork_number,
                fork_count=fork_count,
                tag_expressions=tuple(tag_expressions),
            )
            plan[request.cell] = partitioner.partition(catalog, request)
    return plan
