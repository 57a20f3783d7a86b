"""Configuration loading for pytest-slicing.

Settings come from three layers, highest precedence first:

1. Command line options (``--slice-batch``, ``--slice-fork-count``, ...)
2. Environment variables (``SLICING_BATCH_NUMBER``, ``SLICING_FORK_COUNT``, ...)
3. The ``[tool.pytest-slicing]`` section of pyproject.toml

The merged SlicingConfig is an immutable value passed explicitly to the
components that need it.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
import tomllib
from typing import TYPE_CHECKING, Any

from pytest_slicing.lines import LineFilterTable
from pytest_slicing.slicing.request import InvalidPartitionRequest, PartitionRequest


if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path


ENV_BATCH_NUMBER = 'SLICING_BATCH_NUMBER'
ENV_BATCH_COUNT = 'SLICING_BATCH_COUNT'
ENV_FORK_NUMBER = 'SLICING_FORK_NUMBER'
ENV_FORK_COUNT = 'SLICING_FORK_COUNT'
ENV_TAGS = 'SLICING_TAGS'
ENV_STATISTICS = 'SLICING_STATISTICS'
ENV_DEFAULT_WEIGHT = 'SLICING_DEFAULT_WEIGHT'


@dataclass(frozen=True)
class SlicingConfig:
    """Configuration for pytest-slicing.

    All fields default to None, meaning "not set at this layer". Unset grid
    coordinates resolve to 1 when building a request.

    Attributes:
        batch_number: 1-indexed batch this process runs.
        batch_count: Number of batches.
        fork_number: 1-indexed fork this process runs within its batch.
        fork_count: Number of forks per batch.
        tags: Tag expressions scenarios must satisfy.
        statistics: Path to a JSON run file or directory of historical durations.
        default_weight: Fixed weight for scenarios without history.
        lines: Line filters in ``path:line[:line...]`` form.
    """

    batch_number: int | None = None
    batch_count: int | None = None
    fork_number: int | None = None
    fork_count: int | None = None
    tags: tuple[str, ...] | None = None
    statistics: str | None = None
    default_weight: float | None = None
    lines: tuple[str, ...] | None = None

    def to_request(self) -> PartitionRequest:
        """Build the partition request for this process.

        Raises:
            InvalidPartitionRequest: If the grid coordinates are invalid.
        """
        return PartitionRequest(
            batch_number=1 if self.batch_number is None else self.batch_number,
            batch_count=1 if self.batch_count is None else self.batch_count,
            fork_number=1 if self.fork_number is None else self.fork_number,
            fork_count=1 if self.fork_count is None else self.fork_count,
            tag_expressions=self.tags or (),
        )

    def line_filters(self) -> LineFilterTable:
        """Build the line filter table.

        Raises:
            ValueError: If a line filter is malformed.
        """
        return LineFilterTable.parse(self.lines or ())

    @property
    def is_active(self) -> bool:
        """Return True if there is anything to slice or filter."""
        request = self.to_request()
        return not request.is_single_cell or bool(request.tag_expressions) or bool(self.lines)


def _as_tuple(value: Any) -> tuple[str, ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)


def _toml_int(tool_config: Mapping[str, Any], key: str) -> int | None:
    value = tool_config.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f'[tool.pytest-slicing] {key} must be an integer, got {value!r}'
        raise InvalidPartitionRequest(msg)
    return value


def _toml_float(tool_config: Mapping[str, Any], key: str) -> float | None:
    value = tool_config.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f'[tool.pytest-slicing] {key} must be a number, got {value!r}'
        raise ValueError(msg)
    return float(value)


def _toml_str(tool_config: Mapping[str, Any], key: str) -> str | None:
    value = tool_config.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        msg = f'[tool.pytest-slicing] {key} must be a string, got {value!r}'
        raise ValueError(msg)
    return value


def load_config(rootdir: Path) -> SlicingConfig:
    """Load configuration from pyproject.toml.

    Reads the [tool.pytest-slicing] section from pyproject.toml in the given
    directory. Returns an empty configuration if the file or section does not
    exist.

    Args:
        rootdir: Directory containing pyproject.toml.

    Returns:
        SlicingConfig with values from pyproject.toml.

    Raises:
        InvalidPartitionRequest: If a grid coordinate is not an integer.
        ValueError: If another value has the wrong type.
    """
    pyproject_path = rootdir / 'pyproject.toml'

    if not pyproject_path.exists():
        return SlicingConfig()

    with pyproject_path.open('rb') as f:
        data = tomllib.load(f)

    tool_config = data.get('tool', {}).get('pytest-slicing', {})

    return SlicingConfig(
        batch_number=_toml_int(tool_config, 'batch-number'),
        batch_count=_toml_int(tool_config, 'batch-count'),
        fork_number=_toml_int(tool_config, 'fork-number'),
        fork_count=_toml_int(tool_config, 'fork-count'),
        tags=_as_tuple(tool_config.get('tags')),
        statistics=_toml_str(tool_config, 'statistics'),
        default_weight=_toml_float(tool_config, 'default-weight'),
        lines=_as_tuple(tool_config.get('lines')),
    )


def _env_int(environ: Mapping[str, str], name: str) -> int | None:
    value = environ.get(name, '').strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        msg = f'{name} must be an integer, got {value!r}'
        raise InvalidPartitionRequest(msg) from None


def load_env_config(environ: Mapping[str, str]) -> SlicingConfig:
    """Load configuration from environment variables.

    ``SLICING_TAGS`` holds a single tag expression.

    Args:
        environ: The environment, usually ``os.environ``.

    Returns:
        SlicingConfig with values from the environment.

    Raises:
        InvalidPartitionRequest: If a grid coordinate is not an integer.
        ValueError: If the default weight is not a number.
    """
    tags = environ.get(ENV_TAGS, '').strip()
    statistics = environ.get(ENV_STATISTICS, '').strip()

    default_weight: float | None = None
    raw_weight = environ.get(ENV_DEFAULT_WEIGHT, '').strip()
    if raw_weight:
        try:
            default_weight = float(raw_weight)
        except ValueError:
            msg = f'{ENV_DEFAULT_WEIGHT} must be a number, got {raw_weight!r}'
            raise ValueError(msg) from None

    return SlicingConfig(
        batch_number=_env_int(environ, ENV_BATCH_NUMBER),
        batch_count=_env_int(environ, ENV_BATCH_COUNT),
        fork_number=_env_int(environ, ENV_FORK_NUMBER),
        fork_count=_env_int(environ, ENV_FORK_COUNT),
        tags=(tags,) if tags else None,
        statistics=statistics or None,
        default_weight=default_weight,
    )


def merge_configs(*layers: SlicingConfig) -> SlicingConfig:
    """Merge configuration layers.

    Earlier layers take precedence: for each field the first layer that sets
    it wins. Empty tag and line lists count as not set.

    Args:
        layers: Configurations, highest precedence first.

    Returns:
        SlicingConfig with every field taken from the first layer setting it.
    """
    merged: dict[str, Any] = {}
    for config_field in fields(SlicingConfig):
        for layer in layers:
            value = getattr(layer, config_field.name)
            if value is None or value == ():
                continue
            merged[config_field.name] = value
            break
    return SlicingConfig(**merged)
