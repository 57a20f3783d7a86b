"""Build a scenario catalog from collected pytest items.

Every test item becomes one scenario of the feature named after its file:

- feature path: the file part of the node id, e.g. ``tests/test_login.py``
- scenario name: the rest of the node id, e.g. ``TestLogin::test_ok[admin]``
- line: the 1-based line pytest reports for the item
- tags: marker names prefixed with ``@``, e.g. ``@smoke``

Node ids are relative to the rootdir, so every process of a sliced run sees
identical identities.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pytest_slicing.catalog.model import Feature, Scenario


if TYPE_CHECKING:
    from collections.abc import Sequence

    import pytest


def split_node_id(node_id: str) -> tuple[str, str]:
    """Split a node id into its file part and the remainder.

    Args:
        node_id: A pytest node id such as ``tests/test_a.py::TestA::test_b``.

    Returns:
        Tuple of (file part, remainder). The remainder is the whole node id
        when it has no ``::`` separator.

    Example:
        >>> split_node_id('tests/test_a.py::TestA::test_b')
        ('tests/test_a.py', 'TestA::test_b')
    """
    path, sep, rest = node_id.partition('::')
    if not sep:
        return path, node_id
    return path, rest


def item_line(item: pytest.Item) -> int:
    """Return the 1-based declaration line of an item (0 if unknown)."""
    line = item.location[1]
    return line + 1 if line is not None else 0


def item_tags(item: pytest.Item) -> frozenset[str]:
    """Return the ``@``-prefixed marker names applied to an item."""
    return frozenset(f'@{marker.name}' for marker in item.iter_markers())


def scenario_for_item(item: pytest.Item) -> Scenario:
    """Describe a single pytest item as a scenario."""
    path, name = split_node_id(item.nodeid)
    return Scenario(feature_path=path, name=name, line=item_line(item), tags=item_tags(item))


def catalog_from_items(
    items: Sequence[pytest.Item],
) -> tuple[tuple[Feature, ...], dict[Scenario, pytest.Item]]:
    """Group collected items into features.

    Features appear in the order their first item was collected, and
    scenarios keep collection order within a feature.

    Args:
        items: Collected pytest items.

    Returns:
        Tuple of (features, mapping from scenario back to its item).
    """
    grouped: dict[str, list[Scenario]] = {}
    by_scenario: dict[Scenario, pytest.Item] = {}

    for item in items:
        scenario = scenario_for_item(item)
        grouped.setdefault(scenario.feature_path, []).append(scenario)
        by_scenario[scenario] = item

    features = tuple(Feature(path=path, scenarios=tuple(scenarios)) for path, scenarios in grouped.items())
    return features, by_scenario
