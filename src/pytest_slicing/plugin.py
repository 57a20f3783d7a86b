"""pytest plugin for slicing a test suite across batches and forks.

This module provides the pytest hooks that turn the slicing core into a
running integration: collected items form the scenario catalog, the
partition of this process's cell decides which items stay selected, and
the line filter further restricts the run.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import StringIO
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from pytest_slicing.catalog.items import catalog_from_items, scenario_for_item
from pytest_slicing.catalog.tags import TagFilter
from pytest_slicing.config import SlicingConfig, load_config, load_env_config, merge_configs
from pytest_slicing.reporting.console import SlicePlanReporter
from pytest_slicing.slicing.partitioner import SlicingPartitioner, plan_matrix
from pytest_slicing.slicing.session import apply_partition, check_plan_counts
from pytest_slicing.statistics.loader import load_statistics
from pytest_slicing.statistics.store import HistoricalStatistics


if TYPE_CHECKING:
    from pytest_slicing.catalog.model import Feature, Scenario
    from pytest_slicing.lines import LineFilterTable
    from pytest_slicing.slicing.filter import ScenarioFilter
    from pytest_slicing.slicing.request import PartitionRequest
    from pytest_slicing.slicing.result import PartitionResult


logger = logging.getLogger(__name__)


@dataclass
class _SlicingState:
    """Per-session slicing state kept on the pytest config."""

    settings: SlicingConfig
    request: PartitionRequest
    line_filters: LineFilterTable
    show_plan: bool = False
    result: PartitionResult | None = None
    plan: dict[tuple[int, int], PartitionResult] | None = None


_STATE_KEY = pytest.StashKey[_SlicingState]()


class _ItemDeselector:
    """SessionController that deselects pytest items."""

    def __init__(self, items_by_scenario: dict[Scenario, pytest.Item]) -> None:
        self._items_by_scenario = items_by_scenario
        self.deselected: set[str] = set()

    def drop_feature(self, feature: Feature, scenario_filter: ScenarioFilter) -> None:  # noqa: ARG002
        for scenario in feature.scenarios:
            self.deselected.add(self._items_by_scenario[scenario].nodeid)

    def restrict_feature(self, feature: Feature, scenario_filter: ScenarioFilter) -> None:  # noqa: ARG002
        for scenario in scenario_filter.scenarios_excluded:
            self.deselected.add(self._items_by_scenario[scenario].nodeid)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add command-line options for pytest-slicing."""
    group = parser.getgroup('slicing', 'slice the test suite across batches and forks')
    group.addoption(
        '--slice-batch',
        action='store',
        type=int,
        default=None,
        dest='slice_batch',
        help='1-indexed batch to run (default: 1)',
    )
    group.addoption(
        '--slice-batch-count',
        action='store',
        type=int,
        default=None,
        dest='slice_batch_count',
        help='Number of batches the suite is split into (default: 1)',
    )
    group.addoption(
        '--slice-fork',
        action='store',
        type=int,
        default=None,
        dest='slice_fork',
        help='1-indexed fork to run within the batch (default: 1)',
    )
    group.addoption(
        '--slice-fork-count',
        action='store',
        type=int,
        default=None,
        dest='slice_fork_count',
        help='Number of forks each batch is split into (default: 1)',
    )
    group.addoption(
        '--slice-tags',
        action='append',
        default=None,
        dest='slice_tags',
        help="Tag expression over '@marker' tags, e.g. '@smoke and not @slow'. May be repeated",
    )
    group.addoption(
        '--slice-statistics',
        action='store',
        default=None,
        dest='slice_statistics',
        help='JSON file or directory of JSON files with historical test durations',
    )
    group.addoption(
        '--slice-default-weight',
        action='store',
        type=float,
        default=None,
        dest='slice_default_weight',
        help='Weight in seconds for tests without history (default: mean of known durations)',
    )
    group.addoption(
        '--slice-lines',
        action='append',
        default=None,
        dest='slice_lines',
        help='Only run tests declared at PATH:LINE[:LINE...]. May be repeated',
    )
    group.addoption(
        '--slice-plan',
        action='store_true',
        default=False,
        dest='slice_plan',
        help='Show how every batch and fork cell is filled',
    )


def _cli_config(config: pytest.Config) -> SlicingConfig:
    """Read the slicing options given on the command line."""
    option = config.option
    return SlicingConfig(
        batch_number=option.slice_batch,
        batch_count=option.slice_batch_count,
        fork_number=option.slice_fork,
        fork_count=option.slice_fork_count,
        tags=tuple(option.slice_tags) if option.slice_tags else None,
        statistics=option.slice_statistics,
        default_weight=option.slice_default_weight,
        lines=tuple(option.slice_lines) if option.slice_lines else None,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Resolve and validate the slicing configuration.

    Invalid grid coordinates, tag expressions or line filters stop the
    session before any test is collected.
    """
    try:
        settings = merge_configs(_cli_config(config), load_env_config(os.environ), load_config(config.rootpath))
        request = settings.to_request()
        TagFilter(request.tag_expressions)
        HistoricalStatistics.empty(settings.default_weight)
        line_filters = settings.line_filters().relative_to(config.rootpath, config.invocation_params.dir)
    except ValueError as exc:
        raise pytest.UsageError(str(exc)) from exc

    config.stash[_STATE_KEY] = _SlicingState(
        settings=settings,
        request=request,
        line_filters=line_filters,
        show_plan=config.option.slice_plan,
    )


def _load_statistics(config: pytest.Config, settings: SlicingConfig) -> HistoricalStatistics:
    """Load historical durations, resolving relative paths against the rootdir."""
    if settings.statistics is None:
        return HistoricalStatistics.empty(settings.default_weight)
    source = Path(settings.statistics)
    if not source.is_absolute():
        source = config.rootpath / source
    return load_statistics(source, default_weight=settings.default_weight)


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(
    session: pytest.Session,  # noqa: ARG001
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Deselect the items that do not belong to this process's cell."""
    state = config.stash.get(_STATE_KEY, None)
    if state is None or not state.settings.is_active:
        return

    request = state.request
    features, items_by_scenario = catalog_from_items(items)

    if request.is_single_cell:
        statistics = HistoricalStatistics.empty(state.settings.default_weight)
    else:
        logger.info('Running %s from %d feature file(s)', request, len(features))
        statistics = _load_statistics(config, state.settings)

    state.result = SlicingPartitioner(statistics).partition(features, request)
    if state.show_plan:
        state.plan = plan_matrix(
            features,
            statistics,
            request.batch_count,
            request.fork_count,
            request.tag_expressions,
        )
        check_plan_counts(state.plan)

    deselector = _ItemDeselector(items_by_scenario)
    apply_partition(state.result, deselector)

    selected: list[pytest.Item] = []
    deselected: list[pytest.Item] = []
    for item in items:
        if item.nodeid in deselector.deselected:
            deselected.append(item)
            continue
        scenario = scenario_for_item(item)
        if not state.line_filters.row_included(scenario.feature_path, scenario.line):
            deselected.append(item)
            continue
        selected.append(item)

    if deselected:
        config.hook.pytest_deselected(items=deselected)
        items[:] = selected


def pytest_terminal_summary(
    terminalreporter: pytest.TerminalReporter,
    exitstatus: int,  # noqa: ARG001
    config: pytest.Config,
) -> None:
    """Write the slicing plan at the end of the session."""
    state = config.stash.get(_STATE_KEY, None)
    if state is None or state.result is None:
        return
    if state.request.is_single_cell and not state.show_plan:
        return

    buffer = StringIO()
    SlicePlanReporter(buffer).write_report(state.result, state.plan)
    terminalreporter.write(buffer.getvalue())
