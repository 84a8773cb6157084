# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.
"""Central task spec tooling configuration.

All values have sensible defaults and can be overridden via environment variables
using the ``TASKSPEC_`` prefix:

  TASKSPEC_LOG_LEVEL           Log level (default: WARNING)
  TASKSPEC_LOG_FORMAT          Log line format, ``text`` or ``json`` (default: text)
  TASKSPEC_LOG_FILE            Write logs to this file instead of stderr (optional)
  TASKSPEC_MAX_LOG_FILE_BYTES  Max bytes per log file before rotation (optional)
  TASKSPEC_LOG_BACKUP_COUNT    Log rotation backup count (optional)
  TASKSPEC_OUTPUT_FORMAT       Default ``validate`` output: ``text``, ``table`` or ``json``
                               (default: text)

Command line flags take precedence over these values.
"""

from __future__ import annotations

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"})
_VALID_LOG_FORMATS = frozenset({"text", "json"})
_VALID_OUTPUT_FORMATS = frozenset({"text", "table", "json"})


class TaskSpecConfig(BaseSettings):
    """Task spec tooling configuration.

    Instantiate with ``TaskSpecConfig()`` to read defaults and any
    ``TASKSPEC_*`` environment variable overrides automatically.
    """

    # ── Logging configuration ──────────────────────────────────────────────
    log_level: str = "WARNING"
    log_format: str = "text"
    log_file: Optional[str] = None
    max_log_file_bytes: Optional[int] = None
    log_backup_count: Optional[int] = None

    # ── Output configuration ───────────────────────────────────────────────
    output_format: str = "text"

    model_config = SettingsConfigDict(env_prefix="TASKSPEC_")

    # ── Validators ─────────────────────────────────────────────────────────

    @field_validator("log_level")
    @classmethod
    def _valid_log_level(cls, v: str) -> str:
        if v.upper() not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level {v!r}. "
                f"Valid values: {', '.join(sorted(_VALID_LOG_LEVELS))}"
            )
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def _valid_log_format(cls, v: str) -> str:
        if v.lower() not in _VALID_LOG_FORMATS:
            raise ValueError(f"Invalid log format {v!r}. Valid values: json, text")
        return v.lower()

    @field_validator("output_format")
    @classmethod
    def _valid_output_format(cls, v: str) -> str:
        if v.lower() not in _VALID_OUTPUT_FORMATS:
            raise ValueError(f"Invalid output format {v!r}. Valid values: json, table, text")
        return v.lower()

    @field_validator("max_log_file_bytes", "log_backup_count")
    @classmethod
    def _non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError(f"{v} must be >= 0")
        return v


# ── Module-level singleton ─────────────────────────────────────────────────────

_config: Optional[TaskSpecConfig] = None


def get_config() -> TaskSpecConfig:
    """Return the process-wide config singleton.

    Creates a fresh ``TaskSpecConfig`` on first call (reading env vars).
    Subsequent calls return the cached instance.
    """
    global _config
    if _config is None:
        _config = TaskSpecConfig()
    return _config


def load_and_validate_config() -> TaskSpecConfig:
    """Build, validate, cache and return the config.

    Raises ``pydantic.ValidationError`` with a clear message if any value is
    invalid. Call this once at CLI startup to surface config errors before any
    file is read.
    """
    global _config
    cfg = TaskSpecConfig()
    _config = cfg
    return cfg
