"""Tests for configuration loading and merging."""

from __future__ import annotations

import pytest

from pytest_slicing.config import (
    ENV_BATCH_COUNT,
    ENV_BATCH_NUMBER,
    ENV_DEFAULT_WEIGHT,
    ENV_FORK_COUNT,
    ENV_FORK_NUMBER,
    ENV_STATISTICS,
    ENV_TAGS,
    SlicingConfig,
    load_config,
    load_env_config,
    merge_configs,
)
from pytest_slicing.slicing.request import InvalidPartitionRequest


@pytest.mark.small
class TestLoadConfig:
    """Tests for reading [tool.pytest-slicing] from pyproject.toml."""

    def test_missing_pyproject_gives_empty_config(self, tmp_path):
        assert load_config(tmp_path) == SlicingConfig()

    def test_missing_section_gives_empty_config(self, tmp_path):
        (tmp_path / 'pyproject.toml').write_text('[tool.other]\nkey = 1\n', encoding='utf-8')

        assert load_config(tmp_path) == SlicingConfig()

    def test_reads_all_keys(self, tmp_path):
        (tmp_path / 'pyproject.toml').write_text(
            """
[tool.pytest-slicing]
batch-number = 2
batch-count = 3
fork-number = 1
fork-count = 4
tags = ["@smoke", "not @wip"]
statistics = ".test-stats"
default-weight = 2.5
lines = "tests/test_login.py:12"
""",
            encoding='utf-8',
        )

        config = load_config(tmp_path)

        assert config == SlicingConfig(
            batch_number=2,
            batch_count=3,
            fork_number=1,
            fork_count=4,
            tags=('@smoke', 'not @wip'),
            statistics='.test-stats',
            default_weight=2.5,
            lines=('tests/test_login.py:12',),
        )

    def test_quoted_count_is_invalid_request(self, tmp_path):
        (tmp_path / 'pyproject.toml').write_text('[tool.pytest-slicing]\nbatch-count = "2"\n', encoding='utf-8')

        with pytest.raises(InvalidPartitionRequest, match='batch-count must be an integer'):
            load_config(tmp_path)

    def test_boolean_coordinate_is_invalid_request(self, tmp_path):
        (tmp_path / 'pyproject.toml').write_text('[tool.pytest-slicing]\nfork-number = true\n', encoding='utf-8')

        with pytest.raises(InvalidPartitionRequest, match='fork-number'):
            load_config(tmp_path)

    def test_non_numeric_default_weight(self, tmp_path):
        (tmp_path / 'pyproject.toml').write_text('[tool.pytest-slicing]\ndefault-weight = "heavy"\n', encoding='utf-8')

        with pytest.raises(ValueError, match='default-weight must be a number'):
            load_config(tmp_path)

    def test_integer_default_weight_is_accepted(self, tmp_path):
        (tmp_path / 'pyproject.toml').write_text('[tool.pytest-slicing]\ndefault-weight = 3\n', encoding='utf-8')

        assert load_config(tmp_path).default_weight == 3.0


@pytest.mark.small
class TestLoadEnvConfig:
    """Tests for reading SLICING_* environment variables."""

    def test_empty_environment(self):
        assert load_env_config({}) == SlicingConfig()

    def test_reads_all_variables(self):
        environ = {
            ENV_BATCH_NUMBER: '1',
            ENV_BATCH_COUNT: '2',
            ENV_FORK_NUMBER: '3',
            ENV_FORK_COUNT: '4',
            ENV_TAGS: '@smoke and not @slow',
            ENV_STATISTICS: '/tmp/stats',
            ENV_DEFAULT_WEIGHT: '1.5',
        }

        assert load_env_config(environ) == SlicingConfig(
            batch_number=1,
            batch_count=2,
            fork_number=3,
            fork_count=4,
            tags=('@smoke and not @slow',),
            statistics='/tmp/stats',
            default_weight=1.5,
        )

    def test_blank_values_are_unset(self):
        assert load_env_config({ENV_BATCH_COUNT: '  ', ENV_TAGS: ''}) == SlicingConfig()

    def test_non_integer_coordinate_is_invalid_request(self):
        with pytest.raises(InvalidPartitionRequest, match=ENV_FORK_COUNT):
            load_env_config({ENV_FORK_COUNT: 'two'})

    def test_non_numeric_default_weight(self):
        with pytest.raises(ValueError, match=ENV_DEFAULT_WEIGHT):
            load_env_config({ENV_DEFAULT_WEIGHT: 'heavy'})


@pytest.mark.small
class TestMergeConfigs:
    """Tests for merging configuration layers."""

    def test_first_layer_wins(self):
        cli = SlicingConfig(batch_count=4)
        env = SlicingConfig(batch_count=2, fork_count=3)
        file = SlicingConfig(batch_count=1, fork_count=1, statistics='stats')

        merged = merge_configs(cli, env, file)

        assert merged.batch_count == 4
        assert merged.fork_count == 3
        assert merged.statistics == 'stats'

    def test_empty_tuples_count_as_unset(self):
        merged = merge_configs(SlicingConfig(tags=()), SlicingConfig(tags=('@smoke',)))

        assert merged.tags == ('@smoke',)

    def test_zero_default_weight_is_set(self):
        merged = merge_configs(SlicingConfig(default_weight=0.0), SlicingConfig(default_weight=5.0))

        assert merged.default_weight == 0.0

    def test_no_layers(self):
        assert merge_configs() == SlicingConfig()


@pytest.mark.small
class TestSlicingConfig:
    """Tests for deriving runtime values from a SlicingConfig."""

    def test_request_defaults_to_single_cell(self):
        request = SlicingConfig().to_request()

        assert request.is_single_cell is True
        assert request.cell == (1, 1)

    def test_request_carries_coordinates_and_tags(self):
        config = SlicingConfig(batch_number=2, batch_count=2, fork_number=3, fork_count=3, tags=('@smoke',))

        request = config.to_request()

        assert request.cell == (2, 3)
        assert request.tag_expressions == ('@smoke',)

    def test_invalid_coordinates(self):
        with pytest.raises(InvalidPartitionRequest):
            SlicingConfig(batch_number=3, batch_count=2).to_request()

    def test_zero_batch_count_is_invalid_not_defaulted(self):
        with pytest.raises(InvalidPartitionRequest):
            SlicingConfig(batch_count=0).to_request()

    def test_line_filters(self):
        table = SlicingConfig(lines=('login.feature:3',)).line_filters()

        assert table.row_included('login.feature', 3) is True

    @pytest.mark.parametrize(
        ('config', 'active'),
        [
            (SlicingConfig(), False),
            (SlicingConfig(batch_count=1, fork_count=1), False),
            (SlicingConfig(statistics='stats'), False),
            (SlicingConfig(batch_count=2), True),
            (SlicingConfig(fork_count=2), True),
            (SlicingConfig(tags=('@smoke',)), True),
            (SlicingConfig(lines=('login.feature:3',)), True),
        ],
    )
    def test_is_active(self, config, active):
        assert config.is_active is active
