"""Line-number filtering for running single scenarios or example rows.

A LineFilterTable maps feature paths to the lines to run, typically from
arguments such as ``features/login.feature:12:30``. It is independent of
slicing: a scenario runs only if it passes both.

Rules:

- An empty table disables line filtering; everything passes.
- Once any path is configured, paths without an entry are excluded.
- A row passes when its own line is configured. An outline's examples block
  passes when any of its rows does; rows are then pruned one by one.

Example:
    >>> table = LineFilterTable.parse(['login.feature:12:30'])
    >>> table.row_included('login.feature', 12)
    True
    >>> table.row_included('login.feature', 20)
    False
    >>> table.row_included('payments.feature', 12)
    False
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path


_LINE_SPEC = re.compile(r'^(?P<path>.+?)(?P<lines>(?::\d+)+)$')


class LineFilterTable:
    """Immutable mapping of feature path to the line numbers to run."""

    def __init__(self, lines: Mapping[str, Iterable[int]] | None = None) -> None:
        """Create a table.

        Args:
            lines: Line numbers keyed by feature path. Paths with no lines
                are ignored.
        """
        table = {path: frozenset(numbers) for path, numbers in (lines or {}).items()}
        self._lines = MappingProxyType({path: numbers for path, numbers in table.items() if numbers})

    @classmethod
    def parse(cls, specs: Iterable[str]) -> LineFilterTable:
        """Build a table from ``path:line[:line...]`` strings.

        Repeated paths are merged.

        Args:
            specs: Strings such as ``tests/test_login.py:12:30``.

        Returns:
            The parsed table.

        Raises:
            ValueError: If a string has no line suffix.
        """
        merged: dict[str, set[int]] = {}
        for spec in specs:
            match = _LINE_SPEC.match(spec.strip())
            if match is None:
                msg = f'Invalid line filter {spec!r}: expected PATH:LINE[:LINE...]'
                raise ValueError(msg)
            numbers = {int(number) for number in match.group('lines').split(':') if number}
            merged.setdefault(match.group('path'), set()).update(numbers)
        return cls(merged)

    def relative_to(self, rootpath: Path, base: Path) -> LineFilterTable:
        """Rewrite the configured paths relative to a root directory.

        Collected node ids name files relative to the rootdir in POSIX form,
        so ``./tests/test_login.py``, an absolute path, or a path given from
        a subdirectory must be normalized before they can match.

        Args:
            rootpath: The directory node ids are relative to.
            base: The directory relative paths were given from.

        Returns:
            A table keyed by rootdir-relative POSIX paths. Paths outside the
            rootdir are kept as given. Entries that normalize to the same
            path are merged.
        """
        root = rootpath.resolve()
        merged: dict[str, set[int]] = {}
        for path, numbers in self._lines.items():
            absolute = (base / path).resolve()
            try:
                key = absolute.relative_to(root).as_posix()
            except ValueError:
                key = path
            merged.setdefault(key, set()).update(numbers)
        return LineFilterTable(merged)

    def __bool__(self) -> bool:
        return bool(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def is_empty(self) -> bool:
        """Return True if line filtering is disabled."""
        return not self._lines

    @property
    def paths(self) -> frozenset[str]:
        """Return the configured feature paths."""
        return frozenset(self._lines)

    def is_configured(self, path: str) -> bool:
        """Return True if the path has an entry in the table."""
        return path in self._lines

    def lines_for(self, path: str) -> frozenset[int]:
        """Return the configured lines of a path (empty if unconfigured)."""
        return self._lines.get(path, frozenset())

    def row_included(self, path: str, line: int) -> bool:
        """Decide whether a scenario or example row should run.

        Args:
            path: Feature path of the row.
            line: 1-based line of the scenario or row.

        Returns:
            True if filtering is disabled or the line is configured for the
            path; False otherwise, including for unconfigured paths.
        """
        if not self._lines:
            return True
        lines = self._lines.get(path)
        if lines is None:
            return False
        return line in lines

    def examples_block_included(self, path: str, row_lines: Iterable[int]) -> bool:
        """Decide whether an outline's examples block should be kept.

        Args:
            path: Feature path of the outline.
            row_lines: Lines of the rows in the block.

        Returns:
            True if filtering is disabled or any row line is configured for
            the path.
        """
        if not self._lines:
            return True
        lines = self._lines.get(path)
        if lines is None:
            return False
        return any(line in lines for line in row_lines)
