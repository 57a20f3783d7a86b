"""Historical duration statistics used to weigh scenarios."""

from __future__ import annotations

from pytest_slicing.statistics.loader import load_statistics
from pytest_slicing.statistics.store import FALLBACK_WEIGHT, HistoricalStatistics


__all__ = ['FALLBACK_WEIGHT', 'HistoricalStatistics', 'load_statistics']
