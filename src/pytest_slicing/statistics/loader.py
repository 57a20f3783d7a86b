"""Loading of historical duration datasets.

A dataset is either a single JSON run file or a directory of them. A run file
is a list of records::

    [
        {"feature": "tests/test_login.py", "scenario": "test_ok", "line": 12, "duration": 1.5},
        {"feature": "features/pay.feature", "scenario": "Pay by card", "duration": 8.0}
    ]

When a scenario appears in several runs its durations are averaged. Loading
never fails a test run: unreadable files and malformed records are logged
and skipped, and a missing source yields an empty dataset.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any

from pytest_slicing.statistics.store import HistoricalStatistics


logger = logging.getLogger(__name__)


class _Averager:
    """Accumulates durations per key and averages them."""

    def __init__(self) -> None:
        self._totals: dict[Any, float] = {}
        self._counts: dict[Any, int] = {}

    def add(self, key: Any, duration: float) -> None:
        self._totals[key] = self._totals.get(key, 0.0) + duration
        self._counts[key] = self._counts.get(key, 0) + 1

    def averages(self) -> dict[Any, float]:
        return {key: total / self._counts[key] for key, total in self._totals.items()}


def run_files(source: Path) -> list[Path]:
    """List the run files of a dataset source in a stable order.

    Args:
        source: A JSON file or a directory of JSON files.

    Returns:
        Sorted list of run files; empty if the source does not exist.
    """
    if source.is_dir():
        return sorted(source.glob('*.json'))
    if source.is_file():
        return [source]
    return []


def read_run(path: Path) -> list[dict[str, Any]]:
    """Read the records of one run file.

    Args:
        path: The JSON run file.

    Returns:
        The list of records, or an empty list if the file is unusable.
    """
    try:
        with path.open(encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning('Could not read test statistics from %s: %s', path, exc)
        return []

    if not isinstance(data, list):
        logger.warning('Ignoring test statistics in %s: expected a list of records', path)
        return []
    return [record for record in data if isinstance(record, dict)]


def _parse_record(record: dict[str, Any]) -> tuple[str, str | None, int | None, float] | None:
    """Validate a record, returning (feature, scenario, line, duration) or None."""
    feature = record.get('feature')
    scenario = record.get('scenario')
    line = record.get('line')
    duration = record.get('duration')

    if not isinstance(feature, str) or isinstance(duration, bool) or not isinstance(duration, (int, float)):
        return None
    if not math.isfinite(duration) or duration < 0:
        return None
    if not isinstance(scenario, str):
        scenario = None
    if isinstance(line, bool) or not isinstance(line, int):
        line = None
    if scenario is None and line is None:
        return None
    return feature, scenario, line, float(duration)


def load_statistics(source: Path | str | None, default_weight: float | None = None) -> HistoricalStatistics:
    """Load historical durations from a run file or a directory of runs.

    Args:
        source: Path to a JSON run file or directory, or None for no history.
        default_weight: Fixed weight for unknown scenarios; None to use the
            mean of the loaded durations.

    Returns:
        An immutable HistoricalStatistics snapshot. Empty if nothing usable
        was found.
    """
    if source is None:
        return HistoricalStatistics.empty(default_weight)

    source = Path(source)
    files = run_files(source)
    if not files:
        logger.warning('No test statistics found at %s, using default weights', source)
        return HistoricalStatistics.empty(default_weight)

    by_name = _Averager()
    by_line = _Averager()
    skipped = 0

    for path in files:
        for record in read_run(path):
            parsed = _parse_record(record)
            if parsed is None:
                skipped += 1
                continue
            feature, scenario, line, duration = parsed
            if scenario is not None:
                by_name.add((feature, scenario), duration)
            if line is not None:
                by_line.add((feature, line), duration)

    if skipped:
        logger.warning('Skipped %d malformed test statistics record(s) under %s', skipped, source)

    statistics = HistoricalStatistics(by_name.averages(), by_line.averages(), default_weight=default_weight)
    logger.info(
        'Loaded %d scenario duration(s) from %d run file(s), default weight %.3fs',
        len(statistics),
        len(files),
        statistics.default_weight,
    )
    return statistics
