"""Hand-off of a partition result to a test runner.

The slicing core never runs or prunes anything itself. A runner integration
implements SessionController, and apply_partition tells it, feature by
feature, what to keep. Features with nothing left are dropped, which is an
ordinary outcome and not an error.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol
import warnings


if TYPE_CHECKING:
    from collections.abc import Mapping

    from pytest_slicing.catalog.model import Feature
    from pytest_slicing.slicing.filter import ScenarioFilter
    from pytest_slicing.slicing.result import PartitionResult


logger = logging.getLogger(__name__)


class PartitionCountMismatch(UserWarning):
    """Scenarios actually included disagree with the expected count.

    Diagnostic only. It points at an upstream filtering or structural
    anomaly (for example a feature whose scenarios the runner cannot map
    back), never at the partitioning itself.
    """


class SessionController(Protocol):
    """What a test runner must provide to apply a partition."""

    def drop_feature(self, feature: Feature, scenario_filter: ScenarioFilter) -> None:
        """Remove every scenario of the feature from the run."""
        ...

    def restrict_feature(self, feature: Feature, scenario_filter: ScenarioFilter) -> None:
        """Keep only the filter's included scenarios of the feature."""
        ...


def check_scenario_counts(included: int, expected: int) -> bool:
    """Compare the number of included scenarios with the expected count.

    Emits a PartitionCountMismatch warning (and logs it) on disagreement.

    Args:
        included: Scenarios the runner actually kept.
        expected: Scenarios the partition assigned.

    Returns:
        True if the counts agree.
    """
    if included == expected:
        return True

    msg = (
        f'There is a mismatch between the number of scenarios included in this test run ({included}) '
        f'and the expected number of scenarios ({expected}). This suggests that the scenario filtering '
        'is not working correctly or that feature file(s) of an unexpected structure are being run'
    )
    logger.warning(msg)
    warnings.warn(msg, PartitionCountMismatch, stacklevel=2)
    return False


def check_plan_counts(plan: Mapping[tuple[int, int], PartitionResult]) -> bool:
    """Check that the cells of a full plan add up to the filtered catalog.

    Args:
        plan: Results keyed by (batch_number, fork_number), as computed by
              plan_matrix.

    Returns:
        True if the cell sizes sum to the total scenario count.
    """
    if not plan:
        return True
    expected = next(iter(plan.values())).total_scenario_count
    return check_scenario_counts(sum(len(result) for result in plan.values()), expected)


def apply_partition(result: PartitionResult, controller: SessionController) -> int:
    """Apply a partition result to a runner, feature by feature.

    Args:
        result: The partition of this process's cell.
        controller: The runner integration receiving the decisions.

    Returns:
        The number of scenarios included across all features.
    """
    included_count = 0
    kept_features = 0

    for name, feature in zip(result.feature_names(), result.features, strict=True):
        scenario_filter = result.filter_for_feature(feature, name)

        if scenario_filter.is_fully_excluded:
            logger.info(
                "Filtered out all %d scenarios for feature '%s'",
                len(feature.scenarios),
                name,
            )
            controller.drop_feature(feature, scenario_filter)
            continue

        logger.info(
            "%d scenario(s) included for '%s' in %s",
            len(scenario_filter.scenarios_included),
            name,
            feature.path,
        )
        for scenario in sorted(scenario_filter.scenarios_included, key=lambda s: (s.line, s.name)):
            logger.info("Included scenario '%s'", scenario.name)
        if scenario_filter.scenarios_excluded:
            logger.debug(
                "%d scenario(s) excluded for '%s' in %s",
                len(scenario_filter.scenarios_excluded),
                name,
                feature.path,
            )
            for scenario in sorted(scenario_filter.scenarios_excluded, key=lambda s: (s.line, s.name)):
                logger.debug("Excluded scenario '%s'", scenario.name)

        controller.restrict_feature(feature, scenario_filter)
        included_count += len(scenario_filter.scenarios_included)
        kept_features += 1

    logger.info('Running %d of %d features', kept_features, len(result.features))
    check_scenario_counts(included_count, len(result))
    return included_count
