"""Run-level settings via Pydantic Settings.

Values come from ``EC_``-prefixed environment variables or a ``.env`` file;
the command-line script overrides them per invocation.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Harmonization run settings."""

    model_config = SettingsConfigDict(
        env_prefix="EC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    data_root: Path = Field(
        default=Path("data/raw"),
        description="Folder holding one 'Parliament <n>' sub-folder per election",
    )
    output_root: Path = Field(
        default=Path("data/processed"),
        description="Folder the combined table, per-parliament files and run report are written to",
    )
    parliaments: Optional[List[int]] = Field(
        default=None,
        description="Restrict the run to these parliaments (default: every registered era)",
    )
    log_level: str = Field(default="INFO", description="Minimum log level")
    log_dir: Optional[str] = Field(default=None, description="Optional directory for a rotating log file")
    max_workers: int = Field(default=1, gt=0, description="Eras processed concurrently")
    split_by_parliament: bool = Field(
        default=True,
        description="Also write one <parliament>_Parliament.csv per election",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            msg = f"Invalid log_level {v!r}: expected one of {', '.join(sorted(_LOG_LEVELS))}"
            raise ValueError(msg)
        return level


def get_settings(**overrides) -> Settings:
    """Settings from the environment, with explicit (non-None) overrides applied."""
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
