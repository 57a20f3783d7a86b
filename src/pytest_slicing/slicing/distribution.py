"""Weighted bucketing of scenarios for parallel executors.

Scenarios are spread with first-fit-decreasing: heaviest first, each one
into the bucket with the smallest accumulated weight. The aim is wall-clock
parity between executors, so buckets are balanced by duration rather than by
scenario count.
"""

from __future__ import annotations

import heapq
from typing import TYPE_CHECKING, Protocol


if TYPE_CHECKING:
    from collections.abc import Iterable

    from pytest_slicing.catalog.model import WeightedScenario


class DistributionStrategy(Protocol):
    """Protocol for scenario distribution strategies.

    Implementations must be deterministic: the same scenarios and bucket
    count always give the same buckets, whatever the input order.
    """

    def distribute(
        self,
        scenarios: Iterable[WeightedScenario],
        num_buckets: int,
    ) -> list[list[WeightedScenario]]:
        """Distribute scenarios across buckets.

        Args:
            scenarios: Weighted scenarios to distribute.
            num_buckets: Number of buckets.

        Returns:
            List of num_buckets buckets.
        """
        ...


def sort_heaviest_first(scenarios: Iterable[WeightedScenario]) -> list[WeightedScenario]:
    """Sort by descending weight, then feature path, line and name.

    This is a total order over scenario identities, so every process sees
    the same sequence regardless of the order scenarios were discovered in.
    """
    return sorted(scenarios, key=lambda ws: ws.sort_key)


def bucket_weights(buckets: list[list[WeightedScenario]]) -> list[float]:
    """Return the aggregate weight of each bucket."""
    return [sum(ws.weight for ws in bucket) for bucket in buckets]


class FirstFitDecreasing:
    """First-fit-decreasing distribution strategy.

    Sorts scenarios heaviest first, then assigns each to the bucket with the
    smallest current total weight, ties going to the lowest bucket index.
    Any two buckets end up differing by at most the heaviest single weight.

    Example:
        >>> strategy = FirstFitDecreasing()
        >>> buckets = strategy.distribute(weighted_scenarios, num_buckets=2)
        >>> len(buckets)
        2
    """

    def distribute(
        self,
        scenarios: Iterable[WeightedScenario],
        num_buckets: int,
    ) -> list[list[WeightedScenario]]:
        """Distribute scenarios weighted by duration.

        Args:
            scenarios: Weighted scenarios to distribute.
            num_buckets: Number of buckets, at least 1.

        Returns:
            List of num_buckets buckets, each in heaviest-first order.

        Raises:
            ValueError: If num_buckets is not positive.
        """
        if num_buckets <= 0:
            msg = f'num_buckets must be positive, got {num_buckets}'
            raise ValueError(msg)

        buckets: list[list[WeightedScenario]] = [[] for _ in range(num_buckets)]

        # (accumulated weight, bucket index): the heap yields the lightest
        # bucket, lowest index first on equal weight
        loads = [(0.0, index) for index in range(num_buckets)]

        for weighted in sort_heaviest_first(scenarios):
            load, index = heapq.heappop(loads)
            buckets[index].append(weighted)
            heapq.heappush(loads, (load + weighted.weight, index))

        return buckets
