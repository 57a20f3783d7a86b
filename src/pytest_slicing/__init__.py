"""pytest-slicing: Split a test suite across batches and forks.

pytest-slicing spreads the collected tests (scenarios) over a grid of
``batch_count`` x ``fork_count`` independent processes. Each process
computes its own share from historical durations, so every test runs
exactly once across the grid and the shares take about the same time.

Example:
    Run the second fork of the first of three batches::

        $ pytest --slice-batch=1 --slice-batch-count=3 --slice-fork=2 --slice-fork-count=2

    Weigh tests by durations recorded in earlier runs::

        $ pytest --slice-batch-count=4 --slice-batch=2 --slice-statistics=.test-stats/

    Only run the tests declared at given lines::

        $ pytest --slice-lines=tests/test_login.py:12:30
"""

from __future__ import annotations


__version__ = '1.0.0'
__all__ = ['__version__']
