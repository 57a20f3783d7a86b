"""The scenarios assigned to one cell of the execution grid."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pytest_slicing.slicing.filter import ScenarioFilter


if TYPE_CHECKING:
    from pytest_slicing.catalog.model import Feature, Scenario, WeightedScenario
    from pytest_slicing.slicing.request import PartitionRequest


@dataclass(frozen=True)
class PartitionResult:
    """Weighted scenarios selected for a (batch, fork) cell.

    Attributes:
        scenarios: Scenarios of this cell with their weights, heaviest first.
        total_scenario_count: Size of the whole tag-filtered catalog, across
            every cell.
        features: The unfiltered catalog the partition was computed from.
            Needed to tell which scenarios of a feature are excluded.
        request: The request that produced this result.
    """

    scenarios: tuple[WeightedScenario, ...]
    total_scenario_count: int
    features: tuple[Feature, ...]
    request: PartitionRequest

    def __len__(self) -> int:
        """Return the number of scenarios in this cell."""
        return len(self.scenarios)

    @property
    def total_weight(self) -> float:
        """Return the aggregate weight of this cell."""
        return sum(ws.weight for ws in self.scenarios)

    @property
    def scenario_set(self) -> frozenset[Scenario]:
        """Return the scenarios of this cell without weights."""
        return frozenset(ws.scenario for ws in self.scenarios)

    def includes_feature(self, feature_path: str) -> bool:
        """Return True if any scenario of the feature path is in this cell."""
        return any(ws.scenario.feature_path == feature_path for ws in self.scenarios)

    def feature_names(self) -> tuple[str, ...]:
        """Return a unique name for each catalog feature, in catalog order.

        A feature keeps its display name unless other features share it. All
        features of such a group get a 1-based suffix in catalog order,
        e.g. ``Login 1`` and ``Login 2``.
        """
        counts = Counter(feature.display_name for feature in self.features)
        seen: Counter[str] = Counter()
        names = []
        for feature in self.features:
            name = feature.display_name
            if counts[name] > 1:
                seen[name] += 1
                name = f'{name} {seen[name]}'
            names.append(name)
        return tuple(names)

    def feature_named(self, feature_name: str) -> Feature | None:
        """Return the catalog feature with the given unique name."""
        for name, feature in zip(self.feature_names(), self.features, strict=True):
            if name == feature_name:
                return feature
        return None

    def filter_for(self, feature_name: str) -> ScenarioFilter:
        """Build the inclusion decision for one feature.

        Args:
            feature_name: Unique name of the feature, as listed by
                feature_names. This is the feature name, or its path when
                unnamed, unless several features share it.

        Returns:
            A ScenarioFilter whose included set holds the feature's scenarios
            assigned to this cell, and whose excluded set holds the rest. An
            empty included set means the whole feature should be dropped. An
            unknown feature yields a filter with both sets empty.
        """
        feature = self.feature_named(feature_name)
        if feature is None:
            return ScenarioFilter(feature_name=feature_name)
        return self.filter_for_feature(feature, feature_name)

    def filter_for_feature(self, feature: Feature, feature_name: str | None = None) -> ScenarioFilter:
        """Build the inclusion decision for a catalog feature.

        Args:
            feature: The feature to decide on.
            feature_name: Name to report in the filter; defaults to the
                feature's display name.

        Returns:
            A ScenarioFilter splitting the feature's own scenarios into those
            assigned to this cell and the rest.
        """
        selected = self.scenario_set
        included = frozenset(scenario for scenario in feature.scenarios if scenario in selected)
        excluded = frozenset(feature.scenarios) - included
        return ScenarioFilter(
            feature_name=feature_name or feature.display_name,
            scenarios_included=included,
            scenarios_excluded=excluded,
        )
