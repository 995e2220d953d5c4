"""
Configuration Management

Validated configuration with sensible defaults and VECTABLE_* environment
overrides.

Design:
- Immutable after construction
- Fail-fast on invalid configuration
- Type-safe with dataclasses
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from vectable.core import constants as C
from vectable.core.errors import Err, Ok, Result


@dataclass(frozen=True)
class StorageConfig:
    """Storage backend configuration."""

    db_path: Path = field(default_factory=lambda: Path("./data/vectors.db"))
    max_blob_bytes: int = C.SQLITE_MAX_BLOB_BYTES
    busy_timeout_ms: int = C.BUSY_TIMEOUT_MS
    engine: str = C.DEFAULT_ENGINE

    @property
    def in_memory(self) -> bool:
        return str(self.db_path) == ":memory:"


@dataclass(frozen=True)
class SearchConfig:
    """
    Two-stage search configuration.

    Stage 1 requests top_n * candidate_multiplier candidates; the default
    multiplier of 1 filters exactly top_n records.
    """

    default_top_n: int = C.DEFAULT_TOP_N
    candidate_multiplier: int = C.DEFAULT_CANDIDATE_MULTIPLIER


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration."""

    log_level: str = "INFO"
    log_json: bool = True


@dataclass(frozen=True)
class VectorTableConfig:
    """Root configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @classmethod
    def from_env(cls) -> Result[VectorTableConfig, str]:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with VECTABLE_.
        Example: VECTABLE_DB_PATH, VECTABLE_DEFAULT_TOP_N
        """
        try:
            storage = StorageConfig(
                db_path=Path(os.getenv("VECTABLE_DB_PATH", "./data/vectors.db")),
                max_blob_bytes=int(
                    os.getenv("VECTABLE_MAX_BLOB_BYTES", str(C.SQLITE_MAX_BLOB_BYTES))
                ),
                busy_timeout_ms=int(
                    os.getenv("VECTABLE_BUSY_TIMEOUT_MS", str(C.BUSY_TIMEOUT_MS))
                ),
            )

            search = SearchConfig(
                default_top_n=int(os.getenv("VECTABLE_DEFAULT_TOP_N", str(C.DEFAULT_TOP_N))),
                candidate_multiplier=int(
                    os.getenv(
                        "VECTABLE_CANDIDATE_MULTIPLIER",
                        str(C.DEFAULT_CANDIDATE_MULTIPLIER),
                    )
                ),
            )

            observability = ObservabilityConfig(
                log_level=os.getenv("VECTABLE_LOG_LEVEL", "INFO").upper(),
                log_json=os.getenv("VECTABLE_LOG_JSON", "true").lower() in ("1", "true", "yes"),
            )

            return Ok(cls(storage=storage, search=search, observability=observability))
        except (ValueError, TypeError) as e:
            return Err(f"Configuration error: {e}")

    def validate(self) -> Result[None, str]:
        """Validate configuration invariants."""
        if self.storage.max_blob_bytes < C.FLOAT32_BYTES:
            return Err(
                f"max_blob_bytes must be >= {C.FLOAT32_BYTES}, "
                f"got {self.storage.max_blob_bytes}"
            )
        if self.storage.busy_timeout_ms < 0:
            return Err(f"busy_timeout_ms must be >= 0, got {self.storage.busy_timeout_ms}")
        if self.search.default_top_n <= 0:
            return Err(f"default_top_n must be > 0, got {self.search.default_top_n}")
        if self.search.candidate_multiplier < 1:
            return Err(
                f"candidate_multiplier must be >= 1, got {self.search.candidate_multiplier}"
            )
        if self.observability.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return Err(f"Unknown log level: {self.observability.log_level}")
        return Ok(None)
