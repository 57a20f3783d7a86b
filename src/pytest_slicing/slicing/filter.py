"""Per-feature inclusion decisions derived from a partition result.

A ScenarioFilter only states what is in and what is out. Applying it to an
execution plan (deselecting pytest items, pruning a runner's tree) is left to
the test runner.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from pytest_slicing.catalog.model import Scenario


class FilterStatus(Enum):
    """How much of a feature survives the partition.

    Attributes:
        FULLY_INCLUDED: Every scenario of the feature runs here.
        PARTIALLY_INCLUDED: Some scenarios run here, others are excluded.
        FEATURE_FULLY_EXCLUDED: Nothing runs here; the runner should drop the
            whole feature. Informational, not an error.
    """

    FULLY_INCLUDED = 'fully_included'
    PARTIALLY_INCLUDED = 'partially_included'
    FEATURE_FULLY_EXCLUDED = 'feature_fully_excluded'


@dataclass(frozen=True)
class ScenarioFilter:
    """Inclusion decision for the scenarios of one feature.

    Attributes:
        feature_name: The feature this filter was built for.
        scenarios_included: Scenarios of the feature assigned to this cell.
        scenarios_excluded: The feature's other scenarios.
    """

    feature_name: str
    scenarios_included: frozenset[Scenario] = field(default_factory=frozenset)
    scenarios_excluded: frozenset[Scenario] = field(default_factory=frozenset)

    @property
    def status(self) -> FilterStatus:
        """Return whether the feature is fully, partially or not included."""
        if not self.scenarios_included:
            return FilterStatus.FEATURE_FULLY_EXCLUDED
        if self.scenarios_excluded:
            return FilterStatus.PARTIALLY_INCLUDED
        return FilterStatus.FULLY_INCLUDED

    @property
    def is_fully_excluded(self) -> bool:
        """Return True if no scenario of the feature is included."""
        return self.status is FilterStatus.FEATURE_FULLY_EXCLUDED

    def should_run(self, scenario: Scenario) -> bool:
        """Return True if the scenario is included by this filter."""
        return scenario in self.scenarios_included

    def describe(self) -> str:
        """Return a one-line human-readable summary of the filter."""
        return (
            f"'{self.feature_name}': {len(self.scenarios_included)} included, "
            f'{len(self.scenarios_excluded)} excluded'
        )
