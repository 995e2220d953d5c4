"""
Configuration Tests

Tests:
    - Defaults
    - VECTABLE_* environment overrides
    - Validation failures
"""

from __future__ import annotations

from pathlib import Path

import pytest

from vectable.core.config import (
    ObservabilityConfig,
    SearchConfig,
    StorageConfig,
    VectorTableConfig,
)
from vectable.tests.utils import assert_ok


class TestDefaults:
    """Default configuration values."""

    def test_defaults(self):
        config = VectorTableConfig()

        assert config.storage.db_path == Path("./data/vectors.db")
        assert config.storage.engine == "sqlite"
        assert config.search.default_top_n == 10
        assert config.search.candidate_multiplier == 1
        assert config.observability.log_level == "INFO"
        assert_ok(config.validate())

    def test_in_memory_flag(self):
        assert StorageConfig(db_path=Path(":memory:")).in_memory
        assert not StorageConfig().in_memory

    def test_frozen(self):
        with pytest.raises(AttributeError):
            SearchConfig().default_top_n = 5


class TestFromEnv:
    """Environment overrides."""

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("VECTABLE_DB_PATH", str(tmp_path / "env.db"))
        monkeypatch.setenv("VECTABLE_MAX_BLOB_BYTES", "4096")
        monkeypatch.setenv("VECTABLE_DEFAULT_TOP_N", "3")
        monkeypatch.setenv("VECTABLE_CANDIDATE_MULTIPLIER", "4")
        monkeypatch.setenv("VECTABLE_LOG_LEVEL", "debug")
        monkeypatch.setenv("VECTABLE_LOG_JSON", "false")

        config = assert_ok(VectorTableConfig.from_env())

        assert config.storage.db_path == tmp_path / "env.db"
        assert config.storage.max_blob_bytes == 4096
        assert config.search.default_top_n == 3
        assert config.search.candidate_multiplier == 4
        assert config.observability.log_level == "DEBUG"
        assert config.observability.log_json is False

    def test_non_numeric_value(self, monkeypatch):
        monkeypatch.setenv("VECTABLE_DEFAULT_TOP_N", "ten")

        result = VectorTableConfig.from_env()

        assert result.is_err()
        assert "Configuration error" in result.error


class TestValidate:
    """Validation of configuration invariants."""

    @pytest.mark.parametrize(
        "config",
        [
            VectorTableConfig(storage=StorageConfig(max_blob_bytes=2)),
            VectorTableConfig(storage=StorageConfig(busy_timeout_ms=-1)),
            VectorTableConfig(search=SearchConfig(default_top_n=0)),
            VectorTableConfig(search=SearchConfig(candidate_multiplier=0)),
            VectorTableConfig(observability=ObservabilityConfig(log_level="LOUD")),
        ],
    )
    def test_invalid(self, config):
        assert config.validate().is_err()
