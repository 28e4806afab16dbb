# enginetdms/config.py
from __future__ import annotations

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration, overridable through ENGINETDMS_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ENGINETDMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "WARNING"

    # Channel reading
    waveform_time_track: bool = True  # time from wf_* properties, else sample index

    # Trend analysis
    fft_averages: int = 0


# Global configuration instance
settings = Settings()


def configure_logging(level: str | int | None = None) -> None:
    """Apply `level` (default: settings.log_level) to the root logger."""
    if level is None:
        level = settings.log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level)
    logging.getLogger("enginetdms").setLevel(level)
