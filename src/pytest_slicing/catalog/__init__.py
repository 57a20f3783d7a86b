"""Scenario catalog: discovered features, scenarios and example rows.

Exports:
    Feature: An ordered collection of scenarios sharing a source path
    Scenario: A single test case identified by path, name and line
    ExampleRow: One data row of a scenario outline
    WeightedScenario: A scenario paired with its estimated duration
    TagFilter: Pre-filters the catalog by tag expressions
"""

from __future__ import annotations

from pytest_slicing.catalog.model import ExampleRow, Feature, Scenario, WeightedScenario
from pytest_slicing.catalog.tags import InvalidTagExpression, TagFilter


__all__ = ['ExampleRow', 'Feature', 'InvalidTagExpression', 'Scenario', 'TagFilter', 'WeightedScenario']
