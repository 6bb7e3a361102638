"""Configuration management for benchledger.

This module provides configuration classes using pydantic-settings
for environment variable management and validation.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables with
    the BENCHLEDGER_ prefix.

    Attributes:
        data_file: Path to the persisted history artifact.
        global_name: Script-level identifier the history is bound to.
        repo_url: Repository URL recorded in a freshly created history.
        threshold: Fractional change that counts as a warning or improvement.
        alert_threshold: Fractional change that counts as a regression.
        comparator: Direction of "better" (None infers it from the tool).
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Example:
        >>> # export BENCHLEDGER_DATA_FILE=gh-pages/dev/bench/data.js
        >>> # export BENCHLEDGER_ALERT_THRESHOLD=0.10
        >>>
        >>> settings = Settings()
        >>> settings.alert_threshold
        0.1

    Environment Variables:
        BENCHLEDGER_DATA_FILE: History artifact (default: dev/bench/data.js)
        BENCHLEDGER_GLOBAL_NAME: Global identifier (default: window.BENCHMARK_DATA)
        BENCHLEDGER_REPO_URL: Repository URL (default: empty)
        BENCHLEDGER_THRESHOLD: Warning threshold (default: 0.02)
        BENCHLEDGER_ALERT_THRESHOLD: Regression threshold (default: 0.05)
        BENCHLEDGER_COMPARATOR: lower-is-better or higher-is-better (optional)
        BENCHLEDGER_LOG_LEVEL: Logging level (default: INFO)
    """

    model_config = SettingsConfigDict(
        env_prefix="BENCHLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage settings
    data_file: str = Field(
        default="dev/bench/data.js",
        description="Path to the persisted history artifact",
    )
    global_name: str = Field(
        default="window.BENCHMARK_DATA",
        description="Global identifier the history is assigned to",
    )
    repo_url: str = Field(
        default="",
        description="Repository URL recorded in a new history",
    )

    # Regression settings
    threshold: float = Field(
        default=0.02,
        ge=0,
        allow_inf_nan=False,
        description="Fractional change reported as warning or improvement",
    )
    alert_threshold: float = Field(
        default=0.05,
        ge=0,
        allow_inf_nan=False,
        description="Fractional change reported as regression",
    )
    comparator: Literal["lower-is-better", "higher-is-better"] | None = Field(
        default=None,
        description="Which direction is better (inferred from tool when unset)",
    )

    # General settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _check_thresholds(self) -> Self:
        if self.alert_threshold < self.threshold:
            msg = f"alert_threshold ({self.alert_threshold}) must be >= threshold ({self.threshold})"
            raise ValueError(msg)
        return self
