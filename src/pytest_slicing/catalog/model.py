"""Scenario catalog dataclasses.

The catalog is what a feature parser (or the pytest item adapter) discovers:
features owning scenarios, and outlines owning example rows. Weights are
never stored on a Scenario; a WeightedScenario pairs the two so the catalog
stays a pure discovery artifact.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExampleRow:
    """A single data row of a scenario outline.

    Attributes:
        line: 1-based line of the row in the feature file.
    """

    line: int


@dataclass(frozen=True)
class Scenario:
    """A single behavior-driven test case.

    Identity is ``(feature_path, name, line)``; tags and example rows do not
    take part in equality or hashing.

    Attributes:
        feature_path: Opaque identifier of the owning feature (path or URI).
        name: Scenario name, unique within its feature.
        line: 1-based declaration line.
        tags: Tags attached to the scenario, e.g. ``{'@smoke'}``.
        examples: Example rows, in source order, if this is an outline.
    """

    feature_path: str
    name: str
    line: int
    tags: frozenset[str] = field(default_factory=frozenset, compare=False)
    examples: tuple[ExampleRow, ...] = field(default=(), compare=False)

    @property
    def key(self) -> tuple[str, str, int]:
        """Return the identity tuple of this scenario."""
        return (self.feature_path, self.name, self.line)

    @property
    def is_outline(self) -> bool:
        """Return True if this scenario has example rows."""
        return bool(self.examples)

    @property
    def execution_count(self) -> int:
        """Return how many times the runner executes this scenario."""
        return len(self.examples) or 1

    def __str__(self) -> str:
        return f'{self.feature_path}:{self.line} {self.name}'


@dataclass(frozen=True)
class Feature:
    """An ordered collection of scenarios sharing a source path.

    Attributes:
        path: Opaque identifier of the feature file.
        scenarios: Scenarios in declaration order.
        name: Optional human-readable feature name.
    """

    path: str
    scenarios: tuple[Scenario, ...] = ()
    name: str | None = None

    def __post_init__(self) -> None:
        for scenario in self.scenarios:
            if scenario.feature_path != self.path:
                msg = f'Scenario {scenario.name!r} belongs to {scenario.feature_path!r}, not {self.path!r}'
                raise ValueError(msg)

    @property
    def display_name(self) -> str:
        """Return the feature name, falling back to its path."""
        return self.name or self.path

    def with_scenarios(self, scenarios: tuple[Scenario, ...]) -> Feature:
        """Return a copy of this feature owning only the given scenarios."""
        return Feature(path=self.path, scenarios=scenarios, name=self.name)


@dataclass(frozen=True)
class WeightedScenario:
    """A scenario paired with its estimated duration in seconds.

    Attributes:
        scenario: The weighted scenario.
        weight: Non-negative estimated execution time.
    """

    scenario: Scenario
    weight: float

    def __post_init__(self) -> None:
        if self.weight < 0:
            msg = f'weight must be non-negative, got {self.weight}'
            raise ValueError(msg)

    @property
    def sort_key(self) -> tuple[float, str, int, str]:
        """Total order used for bucketing: heaviest first, then by location."""
        return (-self.weight, self.scenario.feature_path, self.scenario.line, self.scenario.name)
