# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for staging, cache, cluster storage and logging
settings used by the launch pipeline.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Staging ===
    local_data_dir: Path = Path("~/.launchprep/data")
    temp_dir: str = "tmp"

    # === Launch ===
    launch_timeout_s: float = 60.0
    program_interpreter_opts: str = ""
    runtime_config_prefix: str = "runtime."

    # === Content cache ===
    cache_backend: Literal["local", "s3"] = "local"
    cache_root: Path = Path("~/.launchprep/cache")
    cache_s3_bucket: str = ""
    cache_s3_prefix: str = "launchprep/cache/"
    cache_s3_region: str = ""

    # === Cluster-native storage ===
    cluster_storage_scheme: str = "s3"
    cluster_storage_region: str = ""
    cluster_storage_endpoint_url: str = ""

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("cluster_storage_scheme")
    @classmethod
    def validate_scheme(cls, v: str) -> str:  # noqa: N805
        """Schemes compare lowercase and without the '://' suffix."""
        return v.lower().removesuffix("://")

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_backend == "s3" and not self.cache_s3_bucket:
            errors.append("CACHE_BACKEND=s3 requires CACHE_S3_BUCKET")

        if self.launch_timeout_s <= 0:
            errors.append("LAUNCH_TIMEOUT_S must be > 0")

        if self.cluster_storage_scheme in ("", "file"):
            errors.append("CLUSTER_STORAGE_SCHEME must name a remote scheme")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def staging_root(self) -> Path:
        """Parent directory of every per-launch staging directory."""
        return (self.local_data_dir / self.temp_dir).expanduser().absolute()


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-launch config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
