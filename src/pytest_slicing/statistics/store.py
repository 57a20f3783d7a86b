"""Read-only lookup of historical scenario durations.

HistoricalStatistics answers one question for the partitioner: how long is
this scenario expected to take? Durations are looked up by
``(feature_path, scenario_name)`` first and ``(feature_path, line)`` second.

Scenarios missing from the dataset get the default weight:

- the configured ``default_weight`` when one is given;
- otherwise the arithmetic mean of all known durations;
- otherwise, for an empty dataset, ``FALLBACK_WEIGHT``.

An outline without a recorded duration is charged the default weight once
per example row.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Mapping

    from pytest_slicing.catalog.model import Scenario


FALLBACK_WEIGHT = 1.0


class HistoricalStatistics:
    """Immutable snapshot of previously observed scenario durations.

    Example:
        >>> stats = HistoricalStatistics({('login.feature', 'Log in'): 4.0})
        >>> stats.duration_for('login.feature', 'Log in')
        4.0
        >>> stats.default_weight
        4.0
    """

    def __init__(
        self,
        durations: Mapping[tuple[str, str], float] | None = None,
        line_durations: Mapping[tuple[str, int], float] | None = None,
        default_weight: float | None = None,
    ) -> None:
        """Create a statistics snapshot.

        Args:
            durations: Seconds keyed by (feature path, scenario name).
            line_durations: Seconds keyed by (feature path, declaration line).
            default_weight: Fixed weight for unknown scenarios. When None, the
                mean of all known durations is used.

        Raises:
            ValueError: If any duration or the default weight is negative or
                not finite.
        """
        self._durations = dict(durations or {})
        self._line_durations = dict(line_durations or {})

        known = list(self._durations.values()) + list(self._line_durations.values())
        if any(not math.isfinite(value) or value < 0 for value in known):
            msg = 'durations must be finite and non-negative'
            raise ValueError(msg)
        if default_weight is not None and (not math.isfinite(default_weight) or default_weight < 0):
            msg = f'default_weight must be finite and non-negative, got {default_weight}'
            raise ValueError(msg)

        if default_weight is not None:
            self._default_weight = float(default_weight)
        elif known:
            self._default_weight = sum(known) / len(known)
        else:
            self._default_weight = FALLBACK_WEIGHT

    @classmethod
    def empty(cls, default_weight: float | None = None) -> HistoricalStatistics:
        """Return a snapshot without any recorded durations."""
        return cls(default_weight=default_weight)

    def __len__(self) -> int:
        """Return the number of recorded durations."""
        return len(self._durations) + len(self._line_durations)

    @property
    def default_weight(self) -> float:
        """Return the weight used for scenarios without history."""
        return self._default_weight

    def duration_for(self, feature_path: str, name: str, line: int | None = None) -> float | None:
        """Look up a recorded duration.

        Args:
            feature_path: Path of the feature.
            name: Scenario name.
            line: Optional declaration line, used when the name is unknown.

        Returns:
            Seconds, or None if the scenario has no recorded duration.
        """
        duration = self._durations.get((feature_path, name))
        if duration is None and line is not None:
            duration = self._line_durations.get((feature_path, line))
        return duration

    def is_known(self, scenario: Scenario) -> bool:
        """Return True if the scenario has a recorded duration."""
        return self.duration_for(scenario.feature_path, scenario.name, scenario.line) is not None

    def weight_of(self, scenario: Scenario) -> float:
        """Return the estimated duration of a scenario in seconds.

        Args:
            scenario: The scenario to weigh.

        Returns:
            The recorded duration, or the default weight times the number of
            executions when nothing was recorded.
        """
        duration = self.duration_for(scenario.feature_path, scenario.name, scenario.line)
        if duration is None:
            return self._default_weight * scenario.execution_count
        return duration
