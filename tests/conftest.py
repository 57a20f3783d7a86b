"""Shared fixtures for pytest-slicing tests."""

from __future__ import annotations

import pytest

from pytest_slicing.catalog.model import ExampleRow, Feature, Scenario
from pytest_slicing.statistics.store import HistoricalStatistics


@pytest.fixture
def make_scenario():
    """Factory fixture for creating scenarios."""
    counter = 0

    def _make_scenario(
        feature_path: str = 'login.feature',
        name: str | None = None,
        line: int | None = None,
        tags: tuple[str, ...] = (),
        example_lines: tuple[int, ...] = (),
    ) -> Scenario:
        nonlocal counter
        counter += 1
        return Scenario(
            feature_path=feature_path,
            name=name if name is not None else f'Scenario {counter}',
            line=line if line is not None else counter * 10,
            tags=frozenset(tags),
            examples=tuple(ExampleRow(row_line) for row_line in example_lines),
        )

    return _make_scenario


@pytest.fixture
def weighted_catalog():
    """Build a catalog of one scenario per weight, with matching statistics.

    Returns a function taking a list of weights and returning
    (features, statistics). Scenarios are spread over two features.
    """

    def _weighted_catalog(weights: list[float]) -> tuple[tuple[Feature, ...], HistoricalStatistics]:
        by_feature: dict[str, list[Scenario]] = {'a.feature': [], 'b.feature': []}
        durations: dict[tuple[str, str], float] = {}
        for index, weight in enumerate(weights):
            path = 'a.feature' if index % 2 == 0 else 'b.feature'
            scenario = Scenario(feature_path=path, name=f's{index:03d}', line=index + 1)
            by_feature[path].append(scenario)
            durations[(path, scenario.name)] = weight
        features = tuple(Feature(path=path, scenarios=tuple(scenarios)) for path, scenarios in by_feature.items())
        return features, HistoricalStatistics(durations)

    return _weighted_catalog
