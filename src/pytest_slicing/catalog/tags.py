"""Tag expression filtering of the scenario catalog.

Scenarios failing the tag filter are dropped before weighting and slicing,
so they never count towards a partition's total scenario count.

Example:
    >>> from pytest_slicing.catalog.model import Scenario
    >>> tag_filter = TagFilter(['@smoke and not @slow'])
    >>> tag_filter.matches(Scenario('login.feature', 'Log in', 3, tags=frozenset({'@smoke'})))
    True
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cucumber_tag_expressions import TagExpressionError, parse


if TYPE_CHECKING:
    from collections.abc import Iterable

    from pytest_slicing.catalog.model import Feature, Scenario


class InvalidTagExpression(ValueError):
    """Raised when a tag expression cannot be parsed."""


class TagFilter:
    """Conjunction of boolean tag expressions over scenario tags.

    Each expression supports ``and``, ``or``, ``not`` and parentheses over
    tag literals such as ``@smoke``. A scenario matches when it satisfies
    every expression; with no expressions every scenario matches.

    Attributes:
        expressions: The expression strings, blanks removed.
    """

    def __init__(self, expressions: Iterable[str] = ()) -> None:
        """Parse the tag expressions.

        Args:
            expressions: Tag expression strings. Blank strings are ignored.

        Raises:
            InvalidTagExpression: If any expression is malformed.
        """
        self.expressions = tuple(text.strip() for text in expressions if text and text.strip())
        self._compiled = []
        for text in self.expressions:
            try:
                self._compiled.append(parse(text))
            except TagExpressionError as exc:
                msg = f'Invalid tag expression {text!r}: {exc}'
                raise InvalidTagExpression(msg) from exc

    def __bool__(self) -> bool:
        return bool(self._compiled)

    def matches(self, scenario: Scenario) -> bool:
        """Return True if the scenario satisfies every expression."""
        tags = sorted(scenario.tags)
        return all(expression.evaluate(tags) for expression in self._compiled)

    def apply(self, features: Iterable[Feature]) -> tuple[Feature, ...]:
        """Filter a catalog, keeping only matching scenarios.

        Features left without scenarios are dropped.

        Args:
            features: The catalog to filter.

        Returns:
            The filtered catalog, preserving feature and scenario order.
        """
        if not self._compiled:
            return tuple(feature for feature in features if feature.scenarios)

        filtered = []
        for feature in features:
            kept = tuple(scenario for scenario in feature.scenarios if self.matches(scenario))
            if kept:
                filtered.append(feature.with_scenarios(kept))
        return tuple(filtered)
