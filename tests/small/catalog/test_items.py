"""Tests for building a catalog from pytest items."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import SimpleNamespace

import pytest

from pytest_slicing.catalog.items import catalog_from_items, item_line, scenario_for_item, split_node_id


@dataclass
class FakeItem:
    """Just enough of pytest.Item for the catalog adapter."""

    nodeid: str
    line: int | None
    markers: list[str] = field(default_factory=list)

    @property
    def location(self) -> tuple[str, int | None, str]:
        return (self.nodeid.split('::')[0], self.line, self.nodeid)

    def iter_markers(self):
        return [SimpleNamespace(name=name) for name in self.markers]


@pytest.mark.small
class TestSplitNodeId:
    """Tests for split_node_id."""

    def test_function_in_module(self):
        assert split_node_id('tests/test_login.py::test_ok') == ('tests/test_login.py', 'test_ok')

    def test_method_with_parameters(self):
        assert split_node_id('tests/test_login.py::TestLogin::test_ok[admin-1]') == (
            'tests/test_login.py',
            'TestLogin::test_ok[admin-1]',
        )

    def test_node_id_without_separator(self):
        """A bare path is both the feature and the scenario name."""
        assert split_node_id('tests/doc.txt') == ('tests/doc.txt', 'tests/doc.txt')


@pytest.mark.small
class TestScenarioForItem:
    """Tests for describing a single item."""

    def test_line_is_one_based(self):
        """pytest locations are 0-based, scenario lines are 1-based."""
        assert item_line(FakeItem('tests/test_a.py::test_x', 9)) == 10

    def test_unknown_line_is_zero(self):
        assert item_line(FakeItem('tests/test_a.py::test_x', None)) == 0

    def test_markers_become_tags(self):
        """Marker names are prefixed with @."""
        scenario = scenario_for_item(FakeItem('tests/test_a.py::test_x', 4, ['smoke', 'slow']))

        assert scenario.feature_path == 'tests/test_a.py'
        assert scenario.name == 'test_x'
        assert scenario.line == 5
        assert scenario.tags == frozenset({'@smoke', '@slow'})


@pytest.mark.small
class TestCatalogFromItems:
    """Tests for grouping items into features."""

    def test_groups_by_file_in_collection_order(self):
        """Features follow the order their first item was collected in."""
        items = [
            FakeItem('tests/test_b.py::test_one', 0),
            FakeItem('tests/test_a.py::test_two', 3),
            FakeItem('tests/test_b.py::test_three', 6),
        ]

        features, _ = catalog_from_items(items)

        assert [feature.path for feature in features] == ['tests/test_b.py', 'tests/test_a.py']
        assert [scenario.name for scenario in features[0].scenarios] == ['test_one', 'test_three']

    def test_parametrized_items_are_distinct_scenarios(self):
        """Items sharing a line are told apart by their parameter ids."""
        items = [
            FakeItem('tests/test_a.py::test_x[1]', 2),
            FakeItem('tests/test_a.py::test_x[2]', 2),
        ]

        features, by_scenario = catalog_from_items(items)

        assert len(features[0].scenarios) == 2
        assert len(by_scenario) == 2

    def test_maps_scenarios_back_to_items(self):
        """Every scenario maps back to the item it was built from."""
        items = [FakeItem('tests/test_a.py::test_x', 2), FakeItem('tests/test_a.py::test_y', 5)]

        features, by_scenario = catalog_from_items(items)

        assert [by_scenario[scenario] for scenario in features[0].scenarios] == items

    def test_no_items(self):
        assert catalog_from_items([]) == ((), {})
